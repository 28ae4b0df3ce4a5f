"""
Test suite for ads, the app theme and policy documents
"""
from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from storefront.content.models import Ad, Theme, Policy, DEFAULT_LIGHT_PALETTE, DEFAULT_DARK_PALETTE
from storefront.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class AdQuerySetTests(TestCase):

    def test_active_window(self):
        """Test open-ended and bounded windows"""
        now = timezone.now()
        always = TestDataFactory.create_ad(title='Always')
        current = TestDataFactory.create_ad(title='Current', start_date=now - timedelta(days=1),
                                            end_date=now + timedelta(days=1))
        TestDataFactory.create_ad(title='Expired', end_date=now - timedelta(hours=1))
        TestDataFactory.create_ad(title='Upcoming', start_date=now + timedelta(hours=1))

        self.assertEqual(set(Ad.objects.active()), {always, current})

    def test_active_at_given_time(self):
        now = timezone.now()
        ad = TestDataFactory.create_ad(start_date=now + timedelta(days=2))
        self.assertIn(ad, Ad.objects.active(at=now + timedelta(days=3)))


class AdAPITests(TestCase):
    """Test ad endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_public_list_is_active_and_prioritized(self):
        TestDataFactory.create_ad(title='Low', priority=1)
        TestDataFactory.create_ad(title='High', priority=9)
        TestDataFactory.create_ad(title='Old', end_date=timezone.now() - timedelta(days=1))
        response = APIClient().get('/api/v1/ads/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual([ad['title'] for ad in response.data['data']], ['High', 'Low'])

    def test_admin_can_list_all(self):
        TestDataFactory.create_ad(title='Old', end_date=timezone.now() - timedelta(days=1))
        response = self.client.get('/api/v1/ads/?all=true')
        self.assertEqual(len(response.data['data']), 1)

        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/ads/?all=true')
        self.assertEqual(len(response.data['data']), 0)

    def test_create_ad(self):
        response = self.client.post('/api/v1/ads/', {
            'image': 'https://cdn.test.com/images/sale.png',
            'title': 'Spring sale',
            'subtitle': 'Up to 50% off',
            'category': 'Sale',
            'template_id': 'sale',
            'priority': 3,
            'custom_styles': {'backgroundColor': '#FF0000'},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['custom_styles']['backgroundColor'], '#FF0000')

    def test_create_ad_invalid_window(self):
        now = timezone.now()
        response = self.client.post('/api/v1/ads/', {
            'image': 'https://cdn.test.com/images/sale.png',
            'title': 'Backwards',
            'subtitle': 'Ends before it starts',
            'category': 'Sale',
            'start_date': (now + timedelta(days=2)).isoformat(),
            'end_date': now.isoformat(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('end_date', response.data)

    def test_create_ad_requires_admin(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/v1/ads/', {'title': 'Nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_and_delete_ad(self):
        ad = TestDataFactory.create_ad(priority=1)
        response = self.client.patch(f'/api/v1/ads/{ad.id}/', {'priority': 7}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['priority'], 7)

        response = self.client.delete(f'/api/v1/ads/{ad.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Ad.objects.filter(pk=ad.pk).exists())


class ThemeAPITests(TestCase):
    """Test theme endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_get_creates_defaults(self):
        response = APIClient().get('/api/v1/theme/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['light'], DEFAULT_LIGHT_PALETTE)
        self.assertEqual(response.data['dark'], DEFAULT_DARK_PALETTE)
        self.assertEqual(Theme.objects.count(), 1)

    def test_update_one_palette(self):
        light = dict(DEFAULT_LIGHT_PALETTE, primaryColor='#123456')
        response = self.client.put('/api/v1/theme/', {'light': light}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['light']['primaryColor'], '#123456')
        self.assertEqual(response.data['dark'], DEFAULT_DARK_PALETTE)

    def test_update_incomplete_palette(self):
        response = self.client.put('/api/v1/theme/', {'dark': {'primaryColor': '#000000'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('dark', response.data)

    def test_defaults_not_shared_between_rows(self):
        theme = Theme.get_solo()
        theme.light['primaryColor'] = '#FFFFFF'
        self.assertEqual(DEFAULT_LIGHT_PALETTE['primaryColor'], '#0033CC')

    def test_update_requires_admin(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.put('/api/v1/theme/', {'light': DEFAULT_LIGHT_PALETTE}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class PolicyAPITests(TestCase):
    """Test privacy policy and terms endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_get_policy(self):
        TestDataFactory.create_policy('terms', 'Be nice.')
        response = APIClient().get('/api/v1/policies/terms/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['content'], 'Be nice.')

    def test_get_missing_policy(self):
        response = APIClient().get('/api/v1/policies/privacy/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unknown_policy_type(self):
        response = APIClient().get('/api/v1/policies/cookies/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_put_creates_then_updates(self):
        response = self.client.put('/api/v1/policies/privacy/', {'content': 'v1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.put('/api/v1/policies/privacy/', {'content': 'v2'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Policy.objects.get(policy_type='privacy').content, 'v2')

    def test_put_requires_content(self):
        response = self.client.put('/api/v1/policies/terms/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
