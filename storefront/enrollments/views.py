import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from storefront.catalog.pricing import effective_price
from storefront.core.permissions import IsAdminRole
from storefront.core.utils import create_audit_log
from storefront.courses.models import Course
from .models import Enrollment, LessonProgress
from .serializers import (
    EnrollmentSerializer, EnrollmentUpdateSerializer, AdminEnrollmentSerializer,
    LessonProgressUpdateSerializer
)

logger = logging.getLogger(__name__)


def _enrollment_queryset():
    return Enrollment.objects.select_related('user', 'course').prefetch_related('lessons_progress')


@api_view(['POST', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def enrollment_for_course(request, course_id):
    """
    POST: enroll the current user in the course
    PATCH: update progress/status fields of the user's enrollment
    DELETE: unenroll
    """
    if request.method == 'POST':
        course = get_object_or_404(Course, pk=course_id)
        if Enrollment.objects.filter(user=request.user, course=course).exists():
            return Response({'error': 'You are already enrolled in this course.'}, status=status.HTTP_400_BAD_REQUEST)

        enrollment = Enrollment.objects.create(
            user=request.user,
            course=course,
            payment_status='not_required',
            price_paid=effective_price(course),
        )
        create_audit_log(
            request=request,
            action='enroll',
            model_name='Enrollment',
            object_id=str(enrollment.id),
            object_name=course.title,
            changes={'price_paid': str(enrollment.price_paid)}
        )
        return Response({
            'success': True,
            'message': 'Enrollment successful',
            'enrollment': EnrollmentSerializer(enrollment).data,
        }, status=status.HTTP_201_CREATED)

    try:
        enrollment = _enrollment_queryset().get(user=request.user, course_id=course_id)
    except Enrollment.DoesNotExist:
        return Response({'error': 'You are not enrolled in this course.'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'DELETE':
        create_audit_log(
            request=request,
            action='unenroll',
            model_name='Enrollment',
            object_id=str(enrollment.id),
            object_name=enrollment.course.title,
        )
        enrollment.delete()
        return Response({'success': True, 'message': 'Successfully unenrolled'})

    serializer = EnrollmentUpdateSerializer(enrollment, data=request.data, partial=True)
    if serializer.is_valid():
        with transaction.atomic():
            serializer.save()
        enrollment = _enrollment_queryset().get(pk=enrollment.pk)
        return Response({
            'success': True,
            'message': 'Enrollment updated',
            'enrollment': EnrollmentSerializer(enrollment).data,
        })
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def lesson_progress_update(request, course_id):
    """Upsert one lesson's progress and recompute the enrollment percentage"""
    serializer = LessonProgressUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(
            {'error': 'Lesson ID is required.', 'details': serializer.errors},
            status=status.HTTP_400_BAD_REQUEST
        )
    data = serializer.validated_data

    try:
        enrollment = Enrollment.objects.select_related('course').get(user=request.user, course_id=course_id)
    except Enrollment.DoesNotExist:
        return Response({'error': 'Enrollment not found for this user/course.'}, status=status.HTTP_404_NOT_FOUND)

    with transaction.atomic():
        lesson, created = LessonProgress.objects.get_or_create(
            enrollment=enrollment,
            lesson_id=data['lesson_id'],
            defaults={
                'watched_duration': data.get('watched_duration', 0),
                'completed': data.get('completed', False),
            }
        )
        if not created:
            if 'watched_duration' in data:
                lesson.watched_duration = data['watched_duration']
            if 'completed' in data:
                lesson.completed = data['completed']
            lesson.save()

        enrollment.recalculate_progress()
        enrollment.last_accessed = timezone.now()
        enrollment.save(update_fields=['progress', 'last_accessed', 'updated_at'])

    enrollment = _enrollment_queryset().get(pk=enrollment.pk)
    return Response({
        'success': True,
        'message': 'Lesson progress updated.',
        'enrollment': EnrollmentSerializer(enrollment).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_enrollments(request):
    enrollments = _enrollment_queryset().filter(user=request.user).order_by('-enrolled_at')
    data = EnrollmentSerializer(enrollments, many=True).data
    return Response({
        'success': True,
        'count': len(data),
        'enrollments': data,
    })


# Admin views
@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def admin_enrollment_list_create(request):
    if request.method == 'GET':
        enrollments = _enrollment_queryset().order_by('-created_at')
        return Response({
            'success': True,
            'data': AdminEnrollmentSerializer(enrollments, many=True).data,
        })

    serializer = AdminEnrollmentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    if Enrollment.objects.filter(user=serializer.validated_data['user'],
                                 course=serializer.validated_data['course']).exists():
        return Response({'error': 'This user is already enrolled in that course.'}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        enrollment = serializer.save()
    create_audit_log(
        request=request,
        action='create',
        model_name='Enrollment',
        object_id=str(enrollment.id),
        object_name=f"{enrollment.user.email} -> {enrollment.course.title}",
    )
    return Response({
        'success': True,
        'data': AdminEnrollmentSerializer(_enrollment_queryset().get(pk=enrollment.pk)).data,
        'message': 'Enrollment created by admin',
    }, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAdminRole])
def admin_enrollment_detail(request, pk):
    enrollment = get_object_or_404(_enrollment_queryset(), pk=pk)

    if request.method == 'DELETE':
        create_audit_log(request=request, action='delete', model_name='Enrollment',
                         object_id=str(enrollment.id), object_name=str(enrollment))
        enrollment.delete()
        return Response({
            'success': True,
            'message': 'Enrollment removed successfully by admin.',
            'data': {'id': pk},
        })

    serializer = AdminEnrollmentSerializer(enrollment, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user = serializer.validated_data.get('user', enrollment.user)
    course = serializer.validated_data.get('course', enrollment.course)
    if Enrollment.objects.filter(user=user, course=course).exclude(pk=enrollment.pk).exists():
        return Response({'error': 'This user is already enrolled in that course.'}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        enrollment = serializer.save()
    create_audit_log(request=request, action='update', model_name='Enrollment',
                     object_id=str(enrollment.id), object_name=str(enrollment),
                     changes={'fields': sorted(request.data.keys())})
    return Response({
        'success': True,
        'data': AdminEnrollmentSerializer(_enrollment_queryset().get(pk=enrollment.pk)).data,
        'message': 'Enrollment updated by admin',
    })
