import logging

from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from storefront.core.cache_utils import get_cached_list, cache_list, COURSES_LIST_PREFIX, COURSES_LIST_CACHE_TTL
from storefront.core.permissions import IsAdminRole
from storefront.core.utils import create_audit_log, paginate
from .models import Course
from .serializers import CourseSerializer, FeaturedReelSerializer, CourseSearchSerializer

logger = logging.getLogger(__name__)


def _create_course(request, force_featured=False):
    serializer = CourseSerializer(data=request.data, context={'force_featured': force_featured})
    if serializer.is_valid():
        course = serializer.save()
        create_audit_log(
            request=request,
            action='create',
            model_name='Course',
            object_id=str(course.id),
            object_name=course.title,
            changes={'is_featured': course.is_featured, 'videos': course.videos.count()}
        )
        return Response(CourseSerializer(course).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def course_list_create(request):
    """
    GET: paginated course list with the first video URL of each course (cached)
    POST: create a course with nested videos (admin only)
    """
    if request.method == 'POST':
        if not request.user.is_admin:
            return Response({'error': 'Admin access required.'}, status=status.HTTP_403_FORBIDDEN)
        return _create_course(request)

    filters_dict = {
        'page': request.query_params.get('page'),
        'limit': request.query_params.get('limit'),
    }
    cached_data, cache_key = get_cached_list(COURSES_LIST_PREFIX, filters_dict)
    if cached_data is not None:
        return Response(cached_data)

    queryset = Course.objects.prefetch_related('videos').order_by('-created_at')
    data = paginate(request, queryset, CourseSerializer, default_limit=10)
    cache_list(cache_key, data, COURSES_LIST_CACHE_TTL)
    return Response(data)


@api_view(['POST'])
@permission_classes([IsAdminRole])
def course_create_featured(request):
    """Create a course that is always featured"""
    return _create_course(request, force_featured=True)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def featured_reels(request):
    queryset = Course.objects.filter(is_featured=True).order_by('-created_at')
    return Response(paginate(request, queryset, FeaturedReelSerializer, default_limit=5))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def course_search(request):
    """Case-insensitive title/description search; empty query returns an empty list"""
    query = request.query_params.get('query', '').strip()
    if not query:
        return Response([])

    courses = Course.objects.filter(
        Q(title__icontains=query) | Q(description__icontains=query)
    ).order_by('-created_at')
    return Response(CourseSearchSerializer(courses, many=True).data)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def course_admin_list(request):
    courses = Course.objects.prefetch_related('videos').order_by('-created_at')
    return Response(CourseSerializer(courses, many=True).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def course_detail(request, pk):
    """Retrieve a course; update or delete it (admin only)"""
    course = get_object_or_404(Course.objects.prefetch_related('videos'), pk=pk)

    if request.method == 'GET':
        return Response(CourseSerializer(course).data)

    if not request.user.is_admin:
        return Response({'error': 'Admin access required.'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        # Missing fields keep their current values
        serializer = CourseSerializer(course, data=request.data, partial=True)
        if serializer.is_valid():
            course = serializer.save()
            create_audit_log(
                request=request,
                action='update',
                model_name='Course',
                object_id=str(course.id),
                object_name=course.title,
                changes={'fields': sorted(request.data.keys())}
            )
            course = Course.objects.prefetch_related('videos').get(pk=course.pk)
            return Response(CourseSerializer(course).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # DELETE: videos cascade, reviews are removed by storefront.reviews.signals
    create_audit_log(request=request, action='delete', model_name='Course',
                     object_id=str(course.id), object_name=course.title)
    course.delete()
    logger.info(f"Course {pk} deleted by {request.user.email}")
    return Response({'message': 'Course removed.'}, status=status.HTTP_200_OK)
