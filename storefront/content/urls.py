from django.urls import path
from .views import ad_list_create, ad_detail, theme_detail, policy_detail

urlpatterns = [
    path('ads/', ad_list_create, name='ad-list-create'),
    path('ads/<int:pk>/', ad_detail, name='ad-detail'),
    path('theme/', theme_detail, name='theme-detail'),
    path('policies/<str:policy_type>/', policy_detail, name='policy-detail'),
]
