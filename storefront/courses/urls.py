from django.urls import path
from .views import (
    course_list_create, course_create_featured, featured_reels,
    course_search, course_admin_list, course_detail
)

urlpatterns = [
    path('courses/', course_list_create, name='course-list-create'),
    path('courses/featured/', course_create_featured, name='course-create-featured'),
    path('courses/featured-reels/', featured_reels, name='course-featured-reels'),
    path('courses/search/', course_search, name='course-search'),
    path('courses/admin/', course_admin_list, name='course-admin-list'),
    path('courses/<int:pk>/', course_detail, name='course-detail'),
]
