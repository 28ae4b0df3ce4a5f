from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, register, verify_token,
    forgot_password, verify_otp, reset_password,
    user_me, change_password, user_list_create, user_detail,
    config_list_create, config_detail, stripe_publishable_key,
    audit_log_list
)

urlpatterns = [
    # Auth endpoints
    path('auth/register/', register, name='register'),
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='auth-me'),
    path('auth/verify-token/', verify_token, name='verify-token'),
    path('auth/forgot-password/', forgot_password, name='forgot-password'),
    path('auth/verify-otp/', verify_otp, name='verify-otp'),
    path('auth/reset-password/', reset_password, name='reset-password'),

    # User endpoints
    path('users/me/', user_me, name='user-me'),
    path('users/change-password/', change_password, name='change-password'),
    path('users/', user_list_create, name='user-list-create'),
    path('users/<int:pk>/', user_detail, name='user-detail'),

    # Config endpoints
    path('config/', config_list_create, name='config-list-create'),
    path('config/stripe/', stripe_publishable_key, name='config-stripe'),
    path('config/<int:pk>/', config_detail, name='config-detail'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
]
