import logging

from django.http import JsonResponse

logger = logging.getLogger(__name__)


class SuspiciousPathMiddleware:
    """Answer vulnerability-scanner probes with a bare 404 before routing."""
    SUSPICIOUS_PATTERNS = (
        '.env',
        'config.json',
        'credentials.json',
        'secrets.json',
        'laravel_session',
        'xdebug_session_start',
        'owa/auth/logon.jsp',
        'remote/fgt_lang',
        'vendor/phpunit',
        'api/v1/cmd/',
        'system_api.php',
        'dispatch.asp',
        'shell.jsp',
        'cmd.jsp',
        'webshell.php',
        'eval.php',
        'c99.php',
        'r57.php',
        'wso.php',
        'adminer.php',
        'index.action',
        'struts2-',
        'axis2/',
        'hudson/',
        'jenkins/',
        'jmx-console/',
        'web-console/',
        'invoker/',
        '.aws/credentials',
        'backup.sql',
        'database.sql',
        'dump.sql',
        '.git/config',
        'sftp-config.json',
        'docker-compose.yml',
        'dockerfile',
        'terraform.tfstate',
        'reportserver',
        'dana-na/',
        'pulse/secure/',
        'citrix/',
        'autodiscover/',
        '.vscode/sftp.json',
        '.idea/',
        '.htaccess',
        '.htpasswd',
        'wp-admin',
        'wp-login.php',
    )

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = (request.path or '').lower()
        if any(p in path for p in self.SUSPICIOUS_PATTERNS):
            logger.warning(f"Blocked suspicious path {request.path} from {request.META.get('REMOTE_ADDR')}")
            return JsonResponse({'success': False, 'error': 'Not found'}, status=404)
        return self.get_response(request)
