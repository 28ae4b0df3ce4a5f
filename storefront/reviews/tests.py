"""
Test suite for reviews and denormalized ratings
"""
from decimal import Decimal
from unittest.mock import patch

from django.db import connection
from django.test import TestCase
from django.test.utils import CaptureQueriesContext
from rest_framework import status
from rest_framework.test import APIClient

from storefront.core.models import AuditLog
from storefront.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from storefront.reviews.models import Review
from storefront.reviews.ratings import recalculate_ratings, get_reviewable


class RatingRecalculationTests(TestCase):
    """Test aggregate ratings stored on products and courses"""

    def setUp(self):
        self.product = TestDataFactory.create_product()
        self.course = TestDataFactory.create_course()

    def test_product_average(self):
        TestDataFactory.create_review(TestDataFactory.create_user(), self.product, rating=4)
        TestDataFactory.create_review(TestDataFactory.create_user(), self.product, rating=5)
        self.product.refresh_from_db()
        self.assertEqual(self.product.ratings, Decimal('4.50'))
        self.assertEqual(self.product.number_of_reviews, 2)

    def test_course_average_rounded(self):
        for rating in (5, 4, 4):
            TestDataFactory.create_review(TestDataFactory.create_user(), self.course, rating=rating)
        self.course.refresh_from_db()
        self.assertEqual(self.course.rating, Decimal('4.33'))
        self.assertEqual(self.course.reviews, 3)

    def test_reset_when_last_review_deleted(self):
        review = TestDataFactory.create_review(TestDataFactory.create_user(), self.product, rating=3)
        review.delete()
        self.product.refresh_from_db()
        self.assertEqual(self.product.ratings, Decimal('0.00'))
        self.assertEqual(self.product.number_of_reviews, 0)

    def test_unknown_type_is_ignored(self):
        self.assertIsNone(recalculate_ratings('Article', 1))

    def test_get_reviewable_missing(self):
        self.assertIsNone(get_reviewable(Review.PRODUCT, 99999))
        self.assertEqual(get_reviewable(Review.COURSE, self.course.pk), self.course)


class ReviewAPITests(TestCase):
    """Test review endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(name='Reviewer')
        self.other = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_admin()
        self.product = TestDataFactory.create_product()
        self.course = TestDataFactory.create_course()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _review_data(self, **overrides):
        data = {
            'reviewable_id': self.product.id,
            'reviewable_type': 'Product',
            'rating': 4,
            'comment': 'Clear and concise',
        }
        data.update(overrides)
        return data

    def test_create_review(self):
        """Test creating a review updates ratings and the author's counter"""
        response = self.client.post('/api/v1/reviews/', self._review_data(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Reviewer')
        self.assertEqual(response.data['reviewable']['title'], self.product.name)

        self.product.refresh_from_db()
        self.assertEqual(self.product.ratings, Decimal('4.00'))
        self.assertEqual(self.product.number_of_reviews, 1)
        self.user.refresh_from_db()
        self.assertEqual(self.user.reviews_count, 1)
        self.assertTrue(AuditLog.objects.filter(action='review_create').exists())

    def test_create_course_review(self):
        response = self.client.post('/api/v1/reviews/', self._review_data(
            reviewable_id=self.course.id, reviewable_type='Course', rating=5
        ), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.course.refresh_from_db()
        self.assertEqual(self.course.rating, Decimal('5.00'))

    def test_create_review_missing_fields(self):
        response = self.client.post('/api/v1/reviews/', {'reviewable_type': 'Product'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('comment', response.data['missing'])
        self.assertIn('rating', response.data['missing'])

    def test_create_review_rating_out_of_range(self):
        response = self.client.post('/api/v1/reviews/', self._review_data(rating=6), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('rating', response.data)

    def test_create_review_invalid_type(self):
        response = self.client.post('/api/v1/reviews/', self._review_data(reviewable_type='Article'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_review_missing_target(self):
        response = self.client.post('/api/v1/reviews/', self._review_data(reviewable_id=99999), format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_duplicate_review_rejected(self):
        self.client.post('/api/v1/reviews/', self._review_data(), format='json')
        response = self.client.post('/api/v1/reviews/', self._review_data(rating=1), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Review.objects.filter(user=self.user).count(), 1)

    def test_duplicate_review_lost_race(self):
        """Test a duplicate that slips past the existence check still gets a 400"""
        TestDataFactory.create_review(self.user, self.product)
        with patch('django.db.models.query.QuerySet.exists', return_value=False):
            response = self.client.post('/api/v1/reviews/', self._review_data(rating=1), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'You have already reviewed this item.')
        self.assertEqual(Review.objects.filter(user=self.user).count(), 1)

    def test_create_requires_auth(self):
        response = APIClient().post('/api/v1/reviews/', self._review_data(), format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_reviews_public(self):
        TestDataFactory.create_review(self.user, self.product)
        TestDataFactory.create_review(self.other, self.course)
        response = APIClient().get('/api/v1/reviews/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_list_reviews_paginated(self):
        TestDataFactory.create_review(self.user, self.product)
        TestDataFactory.create_review(self.other, self.product)
        response = APIClient().get('/api/v1/reviews/?limit=1')
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(len(response.data['results']), 1)

    def test_list_reviews_loads_targets_in_bulk(self):
        """Test listing cost does not grow with the number of reviewed items"""
        TestDataFactory.create_review(self.user, self.product)
        TestDataFactory.create_review(self.user, self.course)
        client = APIClient()
        with CaptureQueriesContext(connection) as few:
            client.get('/api/v1/reviews/')

        for _ in range(3):
            TestDataFactory.create_review(self.other, TestDataFactory.create_product())
            TestDataFactory.create_review(self.other, TestDataFactory.create_course())
        with CaptureQueriesContext(connection) as many:
            response = client.get('/api/v1/reviews/')

        self.assertEqual(len(response.data), 8)
        self.assertEqual(len(many), len(few))
        titles = {item['reviewable']['title'] for item in response.data}
        self.assertIn(self.product.name, titles)
        self.assertIn(self.course.title, titles)

    def test_list_for_item(self):
        TestDataFactory.create_review(self.user, self.product)
        TestDataFactory.create_review(self.user, self.course)
        response = APIClient().get(f'/api/v1/reviews/Product/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['reviewable_type'], 'Product')

    def test_list_for_item_invalid(self):
        response = APIClient().get('/api/v1/reviews/Article/1/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = APIClient().get('/api/v1/reviews/Course/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_my_reviews(self):
        TestDataFactory.create_review(self.user, self.product)
        TestDataFactory.create_review(self.other, self.product)
        response = self.client.get('/api/v1/reviews/my/')
        self.assertTrue(response.data['success'])
        self.assertEqual(len(response.data['data']), 1)

    def test_owner_updates_review(self):
        review = TestDataFactory.create_review(self.user, self.product, rating=2)
        response = self.client.patch(f'/api/v1/reviews/{review.id}/', {'rating': 5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['comment'], 'Great material')
        self.product.refresh_from_db()
        self.assertEqual(self.product.ratings, Decimal('5.00'))

    def test_non_owner_cannot_update(self):
        review = TestDataFactory.create_review(self.other, self.product)
        response = self.client.put(f'/api/v1/reviews/{review.id}/', {'rating': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_cannot_update_others_review(self):
        review = TestDataFactory.create_review(self.other, self.product)
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/v1/reviews/{review.id}/', {'comment': 'edited'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_owner_deletes_review(self):
        """Test deleting resets ratings and decrements the author's counter"""
        self.client.post('/api/v1/reviews/', self._review_data(), format='json')
        review = Review.objects.get(user=self.user)
        response = self.client.delete(f'/api/v1/reviews/{review.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Review.objects.filter(pk=review.pk).exists())
        self.user.refresh_from_db()
        self.assertEqual(self.user.reviews_count, 0)
        self.product.refresh_from_db()
        self.assertEqual(self.product.number_of_reviews, 0)

    def test_admin_deletes_any_review(self):
        review = TestDataFactory.create_review(self.other, self.product)
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/reviews/{review.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_stranger_cannot_delete(self):
        review = TestDataFactory.create_review(self.other, self.product)
        response = self.client.delete(f'/api/v1/reviews/{review.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Review.objects.filter(pk=review.pk).exists())
