from django.urls import path
from .views import (
    enrollment_for_course, lesson_progress_update, my_enrollments,
    admin_enrollment_list_create, admin_enrollment_detail
)

urlpatterns = [
    path('enrollments/my/', my_enrollments, name='enrollment-my'),
    path('enrollments/admin/', admin_enrollment_list_create, name='enrollment-admin-list-create'),
    path('enrollments/admin/<int:pk>/', admin_enrollment_detail, name='enrollment-admin-detail'),
    path('enrollments/<int:course_id>/', enrollment_for_course, name='enrollment-for-course'),
    path('enrollments/<int:course_id>/progress/', lesson_progress_update, name='enrollment-lesson-progress'),
]
