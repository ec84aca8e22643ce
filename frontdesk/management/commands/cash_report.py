"""
Print a staff member's session-cash report as JSON.

Useful for checking the dashboard figures against the ledger from a
shell, e.g. ``python manage.py cash_report reception1 --preset lastWeek``.
"""
import json

from django.core.management.base import BaseCommand, CommandError
from rest_framework.utils.encoders import JSONEncoder

from frontdesk.exceptions import ClinicError
from frontdesk.models import User
from frontdesk.services.cash_report import build_session_cash_report
from frontdesk.services.periods import PRESETS


class Command(BaseCommand):
    help = "Print the session-cash report for a user and date preset."

    def add_arguments(self, parser):
        parser.add_argument("username")
        parser.add_argument("--preset", default="today", choices=PRESETS)
        parser.add_argument("--department", default="all", help="Department id or 'all'.")
        parser.add_argument("--start", help="YYYY-MM-DD (custom preset).")
        parser.add_argument("--end", help="YYYY-MM-DD (custom preset).")
        parser.add_argument("--detailed", action="store_true", help="Include per-payment rows.")

    def handle(self, *args, **opts):
        user = User.objects.select_related("staff").filter(username=opts["username"]).first()
        if user is None:
            raise CommandError(f"No user named {opts['username']}")
        try:
            report = build_session_cash_report(
                user,
                preset=opts["preset"],
                department_id=opts["department"],
                start_date=opts["start"],
                end_date=opts["end"],
                detailed=opts["detailed"],
            )
        except ClinicError as exc:
            raise CommandError(exc.message)
        self.stdout.write(json.dumps(report, cls=JSONEncoder, indent=2))
