"""
Resolution of reviewable targets and aggregate rating maintenance
"""
import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Avg, Count

from storefront.catalog.models import Product
from storefront.courses.models import Course
from .models import Review

logger = logging.getLogger(__name__)

REVIEWABLE_MODELS = {
    Review.PRODUCT: Product,
    Review.COURSE: Course,
}

# Field names holding the (average, count) pair on each reviewable
RATING_FIELDS = {
    Review.PRODUCT: ('ratings', 'number_of_reviews'),
    Review.COURSE: ('rating', 'reviews'),
}


def is_valid_type(reviewable_type):
    return reviewable_type in REVIEWABLE_MODELS


def get_reviewable(reviewable_type, reviewable_id):
    """Return the product/course instance, or None if it does not exist"""
    model = REVIEWABLE_MODELS[reviewable_type]
    try:
        return model.objects.get(pk=reviewable_id)
    except (model.DoesNotExist, ValueError, TypeError):
        return None


def recalculate_ratings(reviewable_type, reviewable_id):
    """
    Recompute the average rating and review count stored on a reviewable
    Both become 0 when no reviews remain.
    """
    model = REVIEWABLE_MODELS.get(reviewable_type)
    if model is None:
        return None

    result = Review.objects.filter(
        reviewable_type=reviewable_type, reviewable_id=reviewable_id
    ).aggregate(average=Avg('rating'), total=Count('id'))

    average = result['average']
    total = result['total'] or 0
    average = (
        Decimal(str(average)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        if average is not None else Decimal('0.00')
    )

    rating_field, count_field = RATING_FIELDS[reviewable_type]
    updated = model.objects.filter(pk=reviewable_id).update(**{rating_field: average, count_field: total})
    if updated:
        logger.debug(f"Ratings for {reviewable_type} {reviewable_id}: avg={average} count={total}")
    return average, total


def reviewable_summary(reviewable_type, reviewable):
    """Title/name, price and image of a reviewable for review listings"""
    if reviewable is None:
        return None
    return {
        'id': reviewable.pk,
        'type': reviewable_type,
        'title': getattr(reviewable, 'title', None) or getattr(reviewable, 'name', None),
        'price': str(reviewable.price),
        'image': reviewable.image,
    }


def load_reviewables(reviews):
    """
    Fetch the targets of many reviews with one query per reviewable type

    Returns:
        Dict keyed by (reviewable_type, reviewable_id)
    """
    ids_by_type = {}
    for review in reviews:
        ids_by_type.setdefault(review.reviewable_type, set()).add(review.reviewable_id)

    loaded = {}
    for reviewable_type, ids in ids_by_type.items():
        model = REVIEWABLE_MODELS.get(reviewable_type)
        if model is None:
            continue
        for reviewable in model.objects.filter(pk__in=ids):
            loaded[(reviewable_type, reviewable.pk)] = reviewable
    return loaded
