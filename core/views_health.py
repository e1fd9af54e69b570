"""
Health check endpoints for monitoring.

/health/       - Liveness check (always returns 200)
/health/ready/ - Readiness check (verifies DB and mail configuration)
"""
import logging

from django.conf import settings
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name='dispatch')
class HealthCheckView(View):
    """Liveness probe: always returns 200 if Django is running."""

    def get(self, request):
        return JsonResponse({"status": "ok"})


@method_decorator(csrf_exempt, name='dispatch')
class ReadinessCheckView(View):
    """Readiness probe: checks database and mail config."""

    def get(self, request):
        checks = {}

        # 1. Database connectivity
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
            checks["database"] = "ok"
        except DatabaseError as e:
            logger.error(f"Readiness check: database unavailable: {e}")
            checks["database"] = f"error: {e}"

        # 2. Mail configuration (account emails and admin notifications)
        checks["mail"] = {
            "from_email": bool(getattr(settings, 'DEFAULT_FROM_EMAIL', '')),
            "admin_notification_email": bool(getattr(settings, 'ADMIN_NOTIFICATION_EMAIL', '')),
        }

        # 3. Prospect count (basic data sanity)
        if checks["database"] == "ok":
            from crm.models import Prospect
            checks["prospect_count"] = Prospect.objects.count()

        all_ok = (
            checks["database"] == "ok"
            and checks["mail"]["from_email"]
        )

        return JsonResponse(
            {"status": "ready" if all_ok else "degraded", "checks": checks},
            status=200 if all_ok else 503,
        )
