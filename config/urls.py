"""
URL configuration for the Catalog Management service.

- ``health/``: liveness, answers as long as the process runs
- ``health/ready/``: readiness, checks the database and the product tag cache
- ``api/``: catalog REST API
"""
import logging

from django.conf import settings
from django.contrib import admin
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.urls import include, path

from catalog.cache import get_redis_client

logger = logging.getLogger(__name__)


def health_check(request):
    return JsonResponse({'status': 'healthy', 'service': 'catalog-api'})


def readiness_check(request):
    """
    Database failures make the service unready (503). The product tag cache
    is optional: without Redis it is reported as degraded only.
    """
    checks = {}
    ready = True

    try:
        connection.ensure_connection()
        checks['database'] = {'status': 'healthy', 'vendor': connection.vendor}
    except DatabaseError as e:
        logger.error(f"Readiness check: database unavailable: {e}")
        checks['database'] = {'status': 'unhealthy', 'error': str(e)}
        ready = False

    if not getattr(settings, 'PRODUCT_TAG_CACHE_ENABLED', True):
        checks['product_tag_cache'] = {'status': 'disabled'}
    elif get_redis_client() is None:
        checks['product_tag_cache'] = {'status': 'degraded', 'note': 'Redis unreachable, cache bypassed'}
    else:
        checks['product_tag_cache'] = {'status': 'healthy'}

    return JsonResponse(
        {'status': 'ready' if ready else 'not_ready', 'checks': checks},
        status=200 if ready else 503
    )


urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health_check, name='health-check'),
    path('health/ready/', readiness_check, name='readiness-check'),
    path('api/', include('catalog.urls')),
]
