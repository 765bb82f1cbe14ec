"""
URL configuration for the school fee ledger backend
"""
from django.contrib import admin
from django.db import DatabaseError
from django.urls import path, include
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods
from django.views.generic import RedirectView
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)


@require_http_methods(["GET"])
def health_view(request):
    """Minimal health check for connectivity verification. No auth required."""
    return JsonResponse({'status': 'ok', 'service': 'fee-ledger'})


@require_http_methods(["GET"])
def system_health_view(request):
    """
    Full system health check for monitoring.
    Returns db and fee ledger status. No auth required.
    """
    result = {'db': 'ok', 'fees': 'ok'}
    try:
        from django.db import connection
        connection.ensure_connection()
    except DatabaseError as e:
        result['db'] = f'error: {str(e)[:80]}'
    try:
        from fees.models import StudentFee
        StudentFee.objects.exists()
    except DatabaseError as e:
        result['fees'] = f'error: {str(e)[:80]}'
    return JsonResponse(result)


@require_http_methods(["GET"])
def api_root(request):
    """Root endpoint - API information"""
    return JsonResponse({
        'name': 'School Fee Ledger API',
        'version': '1.0.0',
        'description': 'Fee structures, student bills, wallet and collections',
        'endpoints': {
            'health': '/api/health/',
            'auth': '/api/auth/',
            'fees': '/api/fees/',
            'docs': '/api/docs/',
            'schema': '/api/schema/',
        }
    })


urlpatterns = [
    path('', api_root, name='api-root'),
    path('admin', RedirectView.as_view(url='/admin/', permanent=False)),
    path('admin/', admin.site.urls),
    path('api', RedirectView.as_view(url='/api/', permanent=False)),
    path('api/', api_root),
    path('api/health/', health_view, name='api-health'),
    path('api/system/health/', system_health_view, name='api-system-health'),

    # API Schema
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),

    # API endpoints
    path('api/auth/', include('accounts.urls')),
    path('api/fees/', include('fees.urls')),
]
