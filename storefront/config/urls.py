"""
URL configuration for the storefront backend.

Every app mounts its routes under /api/v1/ so the mobile app and the admin
panel share one base URL.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Storefront Admin Panel"
admin.site.site_title = "Storefront Admin Portal"
admin.site.index_title = "Catalog, orders and reviews"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('storefront.core.urls')),
    path('api/v1/', include('storefront.catalog.urls')),
    path('api/v1/', include('storefront.courses.urls')),
    path('api/v1/', include('storefront.reviews.urls')),
    path('api/v1/', include('storefront.orders.urls')),
    path('api/v1/', include('storefront.enrollments.urls')),
    path('api/v1/', include('storefront.content.urls')),
]
