import logging

from django.db import IntegrityError, transaction
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly, AllowAny
from rest_framework.response import Response

from storefront.core.utils import create_audit_log, paginate
from .models import Review
from .ratings import is_valid_type, get_reviewable
from .serializers import ReviewSerializer, ReviewCreateSerializer, ReviewUpdateSerializer

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('reviewable_id', 'reviewable_type', 'rating', 'comment')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
def review_list_create(request):
    """
    GET: all reviews; paginated when ?page or ?limit is given
    POST: review a product or course
    """
    if request.method == 'GET':
        queryset = Review.objects.select_related('user').order_by('-created_at')
        if 'page' in request.query_params or 'limit' in request.query_params:
            return Response(paginate(request, queryset, ReviewSerializer))
        return Response(ReviewSerializer(queryset, many=True).data)

    missing = [field for field in REQUIRED_FIELDS if not request.data.get(field)]
    if missing:
        return Response(
            {'error': 'Reviewable ID, reviewable type, rating, and comment are required.', 'missing': missing},
            status=status.HTTP_400_BAD_REQUEST
        )

    serializer = ReviewCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    reviewable_type = data['reviewable_type']
    if not is_valid_type(reviewable_type):
        return Response({'error': 'Invalid reviewable type.'}, status=status.HTTP_400_BAD_REQUEST)

    reviewable = get_reviewable(reviewable_type, data['reviewable_id'])
    if reviewable is None:
        return Response({'error': f'{reviewable_type} not found.'}, status=status.HTTP_404_NOT_FOUND)

    if Review.objects.filter(user=request.user, reviewable_type=reviewable_type,
                             reviewable_id=reviewable.pk).exists():
        return Response({'error': 'You have already reviewed this item.'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        with transaction.atomic():
            review = Review.objects.create(
                user=request.user,
                reviewable_type=reviewable_type,
                reviewable_id=reviewable.pk,
                name=request.user.name or request.user.email,
                rating=data['rating'],
                comment=data['comment'],
            )
            request.user.increment_reviews()
    except IntegrityError:
        # A concurrent request stored the same (user, target) review first
        logger.warning(f"Duplicate review by user {request.user.id} for {reviewable_type} {reviewable.pk}")
        return Response({'error': 'You have already reviewed this item.'}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='review_create',
        model_name='Review',
        object_id=str(review.id),
        object_name=f"{reviewable_type} #{reviewable.pk}",
        changes={'rating': review.rating}
    )
    return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([AllowAny])
def review_list_for_item(request, reviewable_type, reviewable_id):
    """Reviews for one product or course"""
    if not is_valid_type(reviewable_type):
        return Response({'error': 'Invalid reviewable type.'}, status=status.HTTP_400_BAD_REQUEST)

    if get_reviewable(reviewable_type, reviewable_id) is None:
        return Response({'error': f'{reviewable_type} not found.'}, status=status.HTTP_404_NOT_FOUND)

    reviews = Review.objects.filter(
        reviewable_type=reviewable_type, reviewable_id=reviewable_id
    ).select_related('user').order_by('-created_at')
    return Response(ReviewSerializer(reviews, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def review_my_list(request):
    reviews = Review.objects.filter(user=request.user).select_related('user').order_by('-created_at')
    return Response({
        'success': True,
        'data': ReviewSerializer(reviews, many=True).data,
    })


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def review_detail(request, pk):
    """
    PUT/PATCH: owner updates rating and/or comment
    DELETE: owner or admin removes the review
    """
    review = get_object_or_404(Review.objects.select_related('user'), pk=pk)
    is_owner = review.user_id == request.user.id

    if request.method in ('PUT', 'PATCH'):
        if not is_owner:
            return Response({'error': 'Not authorized to update this review.'}, status=status.HTTP_403_FORBIDDEN)

        old_rating = review.rating
        serializer = ReviewUpdateSerializer(review, data=request.data, partial=True)
        if serializer.is_valid():
            review = serializer.save()
            create_audit_log(
                request=request,
                action='review_update',
                model_name='Review',
                object_id=str(review.id),
                object_name=f"{review.reviewable_type} #{review.reviewable_id}",
                changes={'rating': {'old': old_rating, 'new': review.rating}}
            )
            return Response(ReviewSerializer(review).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # DELETE
    if not (is_owner or request.user.is_admin):
        return Response({'error': 'Not authorized to delete this review.'}, status=status.HTTP_403_FORBIDDEN)

    author = review.user
    review_id = review.id
    with transaction.atomic():
        review.delete()
        author.decrement_reviews()

    create_audit_log(
        request=request,
        action='review_delete',
        model_name='Review',
        object_id=str(review_id),
        object_name=f"{review.reviewable_type} #{review.reviewable_id}",
    )
    logger.info(f"Review {review_id} deleted by {request.user.email}")
    return Response({'message': 'Review deleted successfully.'}, status=status.HTTP_200_OK)
