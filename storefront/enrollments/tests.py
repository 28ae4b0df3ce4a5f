"""
Test suite for course enrollments and lesson progress
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from storefront.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from storefront.enrollments.models import Enrollment, LessonProgress


class EnrollmentProgressTests(TestCase):
    """Test progress percentage computation"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.course = TestDataFactory.create_course()

    def test_progress_against_course_videos(self):
        for priority in range(3):
            TestDataFactory.create_video(self.course, priority=priority)
        enrollment = TestDataFactory.create_enrollment(self.user, self.course)
        LessonProgress.objects.create(enrollment=enrollment, lesson_id='a', completed=True)
        LessonProgress.objects.create(enrollment=enrollment, lesson_id='b', completed=False)
        self.assertEqual(enrollment.recalculate_progress(), Decimal('33.33'))

    def test_progress_without_videos_uses_tracked_lessons(self):
        enrollment = TestDataFactory.create_enrollment(self.user, self.course)
        LessonProgress.objects.create(enrollment=enrollment, lesson_id='a', completed=True)
        LessonProgress.objects.create(enrollment=enrollment, lesson_id='b', completed=True)
        self.assertEqual(enrollment.recalculate_progress(), Decimal('100.00'))

    def test_progress_capped(self):
        TestDataFactory.create_video(self.course)
        enrollment = TestDataFactory.create_enrollment(self.user, self.course)
        for lesson_id in ('a', 'b'):
            LessonProgress.objects.create(enrollment=enrollment, lesson_id=lesson_id, completed=True)
        self.assertEqual(enrollment.recalculate_progress(), Decimal('100.00'))

    def test_no_lessons(self):
        enrollment = TestDataFactory.create_enrollment(self.user, self.course)
        self.assertEqual(enrollment.recalculate_progress(), Decimal('0.00'))


class EnrollmentAPITests(TestCase):
    """Test learner enrollment endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.course = TestDataFactory.create_course(price=Decimal('60.00'), sale_enabled=True,
                                                    sale_price=Decimal('45.00'))
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_enroll(self):
        """Test enrolling records the sale-resolved price"""
        response = self.client.post(f'/api/v1/enrollments/{self.course.id}/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['enrollment']['price_paid'], '45.00')
        self.assertEqual(response.data['enrollment']['status'], 'active')

    def test_enroll_twice(self):
        TestDataFactory.create_enrollment(self.user, self.course)
        response = self.client.post(f'/api/v1/enrollments/{self.course.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_enroll_missing_course(self):
        response = self.client.post('/api/v1/enrollments/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_enroll_requires_auth(self):
        response = APIClient().post(f'/api/v1/enrollments/{self.course.id}/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_unenroll(self):
        TestDataFactory.create_enrollment(self.user, self.course)
        response = self.client.delete(f'/api/v1/enrollments/{self.course.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Enrollment.objects.filter(user=self.user).exists())

    def test_unenroll_when_not_enrolled(self):
        response = self.client.delete(f'/api/v1/enrollments/{self.course.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_enrollment(self):
        TestDataFactory.create_enrollment(self.user, self.course)
        response = self.client.patch(f'/api/v1/enrollments/{self.course.id}/', {
            'status': 'paused',
            'notes': 'Back next week',
            'lessons_progress': [{'lesson_id': 'intro', 'watched_duration': 120, 'completed': True}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['enrollment']['status'], 'paused')
        self.assertEqual(len(response.data['enrollment']['lessons_progress']), 1)

    def test_update_rejects_progress_over_100(self):
        TestDataFactory.create_enrollment(self.user, self.course)
        response = self.client.patch(f'/api/v1/enrollments/{self.course.id}/', {'progress': '120'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_lesson_progress_upsert(self):
        """Test updating a lesson twice keeps one entry and recomputes progress"""
        TestDataFactory.create_video(self.course, priority=1)
        TestDataFactory.create_video(self.course, priority=2)
        enrollment = TestDataFactory.create_enrollment(self.user, self.course)
        url = f'/api/v1/enrollments/{self.course.id}/progress/'

        response = self.client.patch(url, {'lesson_id': 'v1', 'watched_duration': 30}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['enrollment']['progress'], '0.00')

        response = self.client.patch(url, {'lesson_id': 'v1', 'completed': True}, format='json')
        self.assertEqual(response.data['enrollment']['progress'], '50.00')
        lesson = LessonProgress.objects.get(enrollment=enrollment)
        self.assertEqual(lesson.watched_duration, 30)
        self.assertTrue(lesson.completed)

    def test_lesson_progress_requires_lesson_id(self):
        TestDataFactory.create_enrollment(self.user, self.course)
        response = self.client.patch(f'/api/v1/enrollments/{self.course.id}/progress/',
                                     {'completed': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_lesson_progress_not_enrolled(self):
        response = self.client.patch(f'/api/v1/enrollments/{self.course.id}/progress/',
                                     {'lesson_id': 'v1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_my_enrollments(self):
        TestDataFactory.create_enrollment(self.user, self.course)
        TestDataFactory.create_enrollment(TestDataFactory.create_user(), self.course)
        response = self.client.get('/api/v1/enrollments/my/')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['enrollments'][0]['course_detail']['title'], self.course.title)


class AdminEnrollmentAPITests(TestCase):
    """Test admin enrollment management"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.user = TestDataFactory.create_user()
        self.course = TestDataFactory.create_course()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_list(self):
        TestDataFactory.create_enrollment(self.user, self.course)
        response = self.client.get('/api/v1/enrollments/admin/')
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data'][0]['user_detail']['email'], self.user.email)

    def test_list_forbidden_for_users(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/enrollments/admin/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create(self):
        response = self.client.post('/api/v1/enrollments/admin/', {
            'user': self.user.id,
            'course': self.course.id,
            'payment_status': 'paid',
            'price_paid': '50.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['payment_status'], 'paid')
        self.assertTrue(Enrollment.objects.filter(user=self.user, course=self.course).exists())

    def test_create_duplicate(self):
        TestDataFactory.create_enrollment(self.user, self.course)
        response = self.client.post('/api/v1/enrollments/admin/', {
            'user': self.user.id, 'course': self.course.id
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_update_to_duplicate_pair(self):
        other_course = TestDataFactory.create_course()
        TestDataFactory.create_enrollment(self.user, self.course)
        enrollment = TestDataFactory.create_enrollment(self.user, other_course)
        response = self.client.put(f'/api/v1/enrollments/admin/{enrollment.id}/',
                                   {'course': self.course.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update(self):
        enrollment = TestDataFactory.create_enrollment(self.user, self.course)
        response = self.client.put(f'/api/v1/enrollments/admin/{enrollment.id}/',
                                   {'status': 'completed', 'progress': '100.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'completed')

    def test_delete(self):
        enrollment = TestDataFactory.create_enrollment(self.user, self.course)
        response = self.client.delete(f'/api/v1/enrollments/admin/{enrollment.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['id'], enrollment.id)
        self.assertFalse(Enrollment.objects.filter(pk=enrollment.pk).exists())
