"""
Test suite for courses, nested videos and the featured reel feed
"""
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from storefront.core.models import AuditLog
from storefront.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from storefront.courses.models import Course, Video
from storefront.reviews.models import Review


class CourseModelTests(TestCase):

    def test_video_ordering_by_priority(self):
        course = TestDataFactory.create_course()
        late = TestDataFactory.create_video(course, title='Late', priority=5)
        early = TestDataFactory.create_video(course, title='Early', priority=1)
        self.assertEqual(list(course.videos.all()), [early, late])

    def test_deleting_course_removes_videos(self):
        course = TestDataFactory.create_course()
        TestDataFactory.create_video(course)
        course.delete()
        self.assertEqual(Video.objects.count(), 0)


class CourseAPITests(TestCase):
    """Test course endpoints"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.course_data = {
            'title': 'Intro to Machine Learning',
            'description': 'Supervised learning from scratch',
            'instructor': 'Ada Lovelace',
            'price': '49.99',
            'image': 'https://cdn.test.com/images/ml.jpg',
            'topics': ['regression', 'classification'],
            'tags': ['ml'],
            'videos': [
                {'title': 'Second', 'url': 'https://cdn.test.com/videos/2.mp4', 'priority': 2},
                {'title': 'First', 'url': 'https://cdn.test.com/videos/1.mp4', 'priority': 1},
            ],
        }

    def test_create_course_with_videos(self):
        """Test admin creates a course; videos are stored in priority order"""
        response = self.client.post('/api/v1/courses/', self.course_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual([v['title'] for v in response.data['videos']], ['First', 'Second'])
        self.assertEqual(response.data['video_url'], 'https://cdn.test.com/videos/1.mp4')
        self.assertEqual(response.data['language'], 'English')
        self.assertTrue(AuditLog.objects.filter(model_name='Course', action='create').exists())

    def test_create_course_requires_admin(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/v1/courses/', self.course_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(Course.objects.count(), 0)

    def test_create_course_invalid_video_url(self):
        self.course_data['videos'][0]['url'] = 'https://cdn.test.com/videos/2.avi'
        response = self.client.post('/api/v1/courses/', self.course_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Course.objects.count(), 0)

    def test_create_course_rejects_non_string_topics(self):
        self.course_data['topics'] = ['ok', 3]
        response = self.client.post('/api/v1/courses/', self.course_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('topics', response.data)

    def test_non_featured_course_drops_reel(self):
        self.course_data['short_video_link'] = 'https://cdn.test.com/videos/reel.mp4'
        response = self.client.post('/api/v1/courses/', self.course_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['is_featured'])
        self.assertEqual(response.data['short_video_link'], '')

    def test_create_featured_course(self):
        """Test the featured endpoint always marks the course featured"""
        self.course_data['short_video_link'] = 'https://cdn.test.com/videos/reel.webm'
        self.course_data['is_featured'] = False
        response = self.client.post('/api/v1/courses/featured/', self.course_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_featured'])
        self.assertEqual(response.data['short_video_link'], 'https://cdn.test.com/videos/reel.webm')

    def test_list_courses_paginated(self):
        for _ in range(3):
            TestDataFactory.create_course()
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/courses/?limit=2')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(len(response.data['results']), 2)
        self.assertEqual(response.data['total_pages'], 2)
        self.assertEqual(response.data['next'], 2)

    def test_list_courses_requires_auth(self):
        response = APIClient().get('/api/v1/courses/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_cache_refreshed_after_video_added(self):
        course = TestDataFactory.create_course()
        response = self.client.get('/api/v1/courses/')
        self.assertIsNone(response.data['results'][0]['video_url'])
        video = TestDataFactory.create_video(course)
        response = self.client.get('/api/v1/courses/')
        self.assertEqual(response.data['results'][0]['video_url'], video.url)

    def test_featured_reels(self):
        TestDataFactory.create_course(title='Reel', is_featured=True)
        TestDataFactory.create_course(title='Plain')
        response = self.client.get('/api/v1/courses/featured-reels/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['page_size'], 5)
        self.assertEqual(response.data['results'][0]['title'], 'Reel')

    def test_search(self):
        TestDataFactory.create_course(title='Deep Learning')
        TestDataFactory.create_course(title='Statistics')
        response = self.client.get('/api/v1/courses/search/?query=deep')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['title'], 'Deep Learning')

    def test_search_matches_description(self):
        TestDataFactory.create_course(title='Statistics')
        response = self.client.get('/api/v1/courses/search/?query=LEARN')
        self.assertEqual(len(response.data), 1)

    def test_search_empty_query(self):
        TestDataFactory.create_course()
        response = self.client.get('/api/v1/courses/search/?query=%20')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])

    def test_admin_list(self):
        TestDataFactory.create_course()
        response = self.client.get('/api/v1/courses/admin/')
        self.assertEqual(len(response.data), 1)
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/courses/admin/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_replaces_videos(self):
        """Test a provided videos list replaces the existing set"""
        course = TestDataFactory.create_course()
        TestDataFactory.create_video(course, title='Old')
        response = self.client.put(f'/api/v1/courses/{course.id}/', {
            'videos': [{'title': 'New', 'url': 'https://cdn.test.com/videos/new.ogg'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([v['title'] for v in response.data['videos']], ['New'])
        self.assertEqual(course.videos.count(), 1)

    def test_update_keeps_videos_when_omitted(self):
        course = TestDataFactory.create_course()
        TestDataFactory.create_video(course, title='Keep')
        response = self.client.patch(f'/api/v1/courses/{course.id}/', {'price': '10.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['videos']), 1)
        course.refresh_from_db()
        self.assertEqual(course.price, Decimal('10.00'))

    def test_update_sale(self):
        course = TestDataFactory.create_course(price=Decimal('80.00'))
        response = self.client.patch(f'/api/v1/courses/{course.id}/',
                                     {'sale_enabled': True, 'sale_price': '20.00'}, format='json')
        self.assertEqual(response.data['effective_price'], '20.00')
        self.assertEqual(response.data['discount_percentage'], 75)

    def test_update_requires_admin(self):
        course = TestDataFactory.create_course()
        self.client.authenticate_user(self.user)
        response = self.client.patch(f'/api/v1/courses/{course.id}/', {'price': '1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_course(self):
        """Test deleting a course removes its videos and reviews"""
        course = TestDataFactory.create_course()
        TestDataFactory.create_video(course)
        TestDataFactory.create_review(self.user, course)
        response = self.client.delete(f'/api/v1/courses/{course.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Course removed.')
        self.assertFalse(Course.objects.filter(pk=course.pk).exists())
        self.assertEqual(Video.objects.count(), 0)
        self.assertFalse(Review.objects.filter(reviewable_type='Course', reviewable_id=course.pk).exists())

    def test_get_missing_course(self):
        response = self.client.get('/api/v1/courses/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
