"""
Offset pagination for list endpoints: ``(items, meta)`` pairs where meta is
``{total, page, limit, totalPages}``.
"""
from __future__ import annotations

import math

MAX_LIMIT = 100


def paginate(qs, page: int = 1, limit: int = 15):
    limit = max(1, min(int(limit), MAX_LIMIT))
    page = max(1, int(page))
    total = qs.count()
    start = (page - 1) * limit
    items = list(qs[start:start + limit])
    return items, {
        'total': total,
        'page': page,
        'limit': limit,
        'totalPages': math.ceil(total / limit) if total else 0,
    }
