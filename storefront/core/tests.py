"""
Test suite for users, authentication, runtime config and audit logs
"""
import re
from datetime import timedelta
from io import StringIO
from unittest.mock import patch

from django.conf import settings
from django.core import mail
from django.core.cache import cache
from django.core.management import call_command, CommandError
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from storefront.core.models import User, Config, AuditLog
from storefront.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from storefront.core.throttles import OTPRateThrottle
from storefront.core.utils import parse_positive_int


class UserModelTests(TestCase):
    """Test User model helpers"""

    def setUp(self):
        self.user = TestDataFactory.create_user(email='model@test.com', name='Model User')

    def test_admin_role_is_admin(self):
        """Test role=admin grants admin access"""
        admin = TestDataFactory.create_admin()
        self.assertTrue(admin.is_admin)
        self.assertFalse(self.user.is_admin)

    def test_staff_is_admin(self):
        """Test Django staff users count as admins"""
        self.user.is_staff = True
        self.assertTrue(self.user.is_admin)

    def test_otp_roundtrip(self):
        """Test generated OTP validates and is stored hashed"""
        otp = self.user.generate_otp()
        self.assertEqual(len(otp), 6)
        self.assertNotEqual(self.user.otp_hash, otp)
        self.assertTrue(self.user.check_otp(otp))
        self.assertFalse(self.user.check_otp('000000' if otp != '000000' else '111111'))

    def test_expired_otp_rejected(self):
        """Test OTP past its expiry is rejected"""
        otp = self.user.generate_otp()
        self.user.otp_expires_at = timezone.now() - timedelta(seconds=1)
        self.assertFalse(self.user.check_otp(otp))

    def test_counters_never_negative(self):
        """Test decrementing a zero counter leaves it at zero"""
        self.user.decrement_purchases()
        self.user.decrement_reviews()
        self.assertEqual(self.user.purchases_count, 0)
        self.assertEqual(self.user.reviews_count, 0)

    def test_counters_increment(self):
        self.user.increment_purchases()
        self.user.increment_purchases()
        self.user.increment_reviews()
        self.assertEqual(self.user.purchases_count, 2)
        self.assertEqual(self.user.reviews_count, 1)


class AuthAPITests(TestCase):
    """Test registration, login and token endpoints"""

    def setUp(self):
        self.client = APIClient()

    def test_register(self):
        """Test registration returns user and tokens"""
        data = {'name': 'New User', 'email': 'new@test.com', 'password': 'secret123'}
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['email'], 'new@test.com')
        self.assertEqual(response.data['user']['role'], 'user')

    def test_register_cannot_grant_admin(self):
        """Test role in the registration payload is ignored"""
        data = {'name': 'Sneaky', 'email': 'sneaky@test.com', 'password': 'secret123', 'role': 'admin'}
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(email='sneaky@test.com').role, 'user')

    def test_register_duplicate_email(self):
        TestDataFactory.create_user(email='dup@test.com')
        data = {'name': 'Dup', 'email': 'dup@test.com', 'password': 'secret123'}
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_register_short_password(self):
        data = {'name': 'Short', 'email': 'short@test.com', 'password': '123'}
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_login_with_email(self):
        """Test login by email returns tokens and user data"""
        TestDataFactory.create_user(email='login@test.com', password='secret123')
        response = self.client.post('/api/v1/auth/login/',
                                    {'email': 'login@test.com', 'password': 'secret123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['user']['email'], 'login@test.com')

    def test_login_wrong_password(self):
        TestDataFactory.create_user(email='login2@test.com', password='secret123')
        response = self.client.post('/api/v1/auth/login/',
                                    {'email': 'login2@test.com', 'password': 'wrong'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_token(self):
        TestDataFactory.create_user(email='refresh@test.com', password='secret123')
        login = self.client.post('/api/v1/auth/login/',
                                 {'email': 'refresh@test.com', 'password': 'secret123'}, format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_refresh_token_of_deleted_user(self):
        """Test a refresh token stops working once its user is deleted"""
        user = TestDataFactory.create_user(email='gone@test.com', password='secret123')
        login = self.client.post('/api/v1/auth/login/',
                                 {'email': 'gone@test.com', 'password': 'secret123'}, format='json')
        user.delete()
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertNotIn('access', response.data)

    def test_verify_token(self):
        user = TestDataFactory.create_user()
        client = AuthenticatedAPIClient().authenticate_user(user)
        response = client.get('/api/v1/auth/verify-token/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['id'], user.id)

    def test_verify_token_unauthenticated(self):
        response = self.client.get('/api/v1/auth/verify-token/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class PasswordResetAPITests(TestCase):
    """Test the forgot-password / OTP / reset flow"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.user = TestDataFactory.create_user(email='reset@test.com', password='oldpass123')

    def _request_otp(self):
        response = self.client.post('/api/v1/auth/forgot-password/', {'email': 'reset@test.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 1)
        return re.search(r'\b(\d{6})\b', mail.outbox[0].body).group(1)

    def test_forgot_password_sends_email(self):
        """Test an OTP email is sent and only its hash is stored"""
        otp = self._request_otp()
        self.user.refresh_from_db()
        self.assertEqual(mail.outbox[0].to, ['reset@test.com'])
        self.assertNotEqual(self.user.otp_hash, otp)
        self.assertIsNotNone(self.user.otp_expires_at)

    def test_forgot_password_unknown_email(self):
        """Test unknown emails get the same response and no email"""
        response = self.client.post('/api/v1/auth/forgot-password/', {'email': 'nobody@test.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 0)

    def test_forgot_password_email_failure(self):
        with patch('storefront.core.views.send_mail', side_effect=OSError('smtp down')):
            response = self.client.post('/api/v1/auth/forgot-password/', {'email': 'reset@test.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    def test_verify_otp(self):
        otp = self._request_otp()
        response = self.client.post('/api/v1/auth/verify-otp/', {'email': 'reset@test.com', 'otp': otp}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_verify_wrong_otp(self):
        otp = self._request_otp()
        wrong = '000000' if otp != '000000' else '111111'
        response = self.client.post('/api/v1/auth/verify-otp/', {'email': 'reset@test.com', 'otp': wrong}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reset_password(self):
        """Test reset changes the password and consumes the OTP"""
        otp = self._request_otp()
        data = {'email': 'reset@test.com', 'otp': otp, 'new_password': 'newpass123'}
        response = self.client.post('/api/v1/auth/reset-password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('newpass123'))
        self.assertEqual(self.user.otp_hash, '')

        # OTP cannot be reused
        data['new_password'] = 'another123'
        response = self.client.post('/api/v1/auth/reset-password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(AuditLog.objects.filter(action='password_reset', object_id=str(self.user.id)).exists())

    def test_wrong_otp_attempts_discard_otp(self):
        """Test the OTP stops working after too many wrong guesses"""
        otp = self._request_otp()
        wrong = '000000' if otp != '000000' else '111111'
        for _ in range(settings.OTP_MAX_ATTEMPTS):
            response = self.client.post('/api/v1/auth/verify-otp/', {'email': 'reset@test.com', 'otp': wrong},
                                        format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        self.user.refresh_from_db()
        self.assertEqual(self.user.otp_hash, '')
        data = {'email': 'reset@test.com', 'otp': otp, 'new_password': 'newpass123'}
        response = self.client.post('/api/v1/auth/reset-password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('oldpass123'))

    def test_wrong_attempts_reset_by_new_otp(self):
        otp = self._request_otp()
        wrong = '000000' if otp != '000000' else '111111'
        self.client.post('/api/v1/auth/verify-otp/', {'email': 'reset@test.com', 'otp': wrong}, format='json')
        self.user.refresh_from_db()
        self.assertEqual(self.user.otp_attempts, 1)
        self.user.generate_otp()
        self.assertEqual(self.user.otp_attempts, 0)

    def test_otp_endpoints_throttled(self):
        """Test repeated OTP guesses from one client are rate limited"""
        limit = OTPRateThrottle().num_requests
        data = {'email': 'nobody@test.com', 'otp': '123456'}
        for _ in range(limit):
            response = self.client.post('/api/v1/auth/verify-otp/', data, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/auth/verify-otp/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        response = self.client.post('/api/v1/auth/reset-password/', dict(data, new_password='newpass123'),
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)


class UserAPITests(TestCase):
    """Test profile and admin user management endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(email='me@test.com', name='Me', password='secret123')
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_get_me(self):
        response = self.client.get('/api/v1/users/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'me@test.com')

    def test_update_me_keeps_role(self):
        """Test profile update cannot change role or counters"""
        data = {'name': 'Renamed', 'phone': '555-0100', 'role': 'admin', 'purchases_count': 99}
        response = self.client.put('/api/v1/users/me/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.name, 'Renamed')
        self.assertEqual(self.user.phone, '555-0100')
        self.assertEqual(self.user.role, 'user')
        self.assertEqual(self.user.purchases_count, 0)

    def test_delete_me_cascades(self):
        """Test deleting the account removes the user's reviews and orders"""
        product = TestDataFactory.create_product()
        TestDataFactory.create_review(self.user, product, rating=4)
        TestDataFactory.create_order(self.user, [product])

        response = self.client.delete('/api/v1/users/me/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=self.user.pk).exists())

        product.refresh_from_db()
        self.assertEqual(product.number_of_reviews, 0)

    def test_change_password(self):
        data = {'old_password': 'secret123', 'new_password': 'changed123'}
        response = self.client.post('/api/v1/users/change-password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('changed123'))

    def test_change_password_wrong_old(self):
        data = {'old_password': 'nope', 'new_password': 'changed123'}
        response = self.client.post('/api/v1/users/change-password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_user_list_requires_admin(self):
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_user_crud(self):
        """Test admin can list, create and delete users"""
        self.client.authenticate_user(self.admin)

        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

        data = {'name': 'Staff', 'email': 'staff@test.com', 'password': 'secret123', 'role': 'admin'}
        response = self.client.post('/api/v1/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], 'admin')

        response = self.client.delete(f'/api/v1/users/{self.user.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=self.user.pk).exists())


class ConfigAPITests(TestCase):
    """Test runtime config endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_admin_config_crud(self):
        response = self.client.post('/api/v1/config/', {'key': 'stripePublishableKey', 'value': 'pk_test_1'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        config_id = response.data['id']

        response = self.client.patch(f'/api/v1/config/{config_id}/', {'value': 'pk_test_2'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Config.get_value('stripePublishableKey'), 'pk_test_2')

        response = self.client.delete(f'/api/v1/config/{config_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_config_requires_admin(self):
        user = TestDataFactory.create_user()
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/config/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_stripe_publishable_key_public(self):
        """Test publishable key is readable without authentication"""
        TestDataFactory.create_config('stripePublishableKey', 'pk_live_abc')
        response = APIClient().get('/api/v1/config/stripe/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'publishableKey': 'pk_live_abc'})

    def test_stripe_publishable_key_missing(self):
        response = APIClient().get('/api/v1/config/stripe/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class AuditLogAPITests(TestCase):
    """Test audit log listing and pagination helpers"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        for i in range(3):
            AuditLog.objects.create(user=self.admin, action='create', model_name='Product', object_id=str(i))
        AuditLog.objects.create(user=self.admin, action='delete', model_name='Course', object_id='9')

    def test_list_paginated(self):
        response = self.client.get('/api/v1/audit-logs/?limit=2')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 4)
        self.assertEqual(len(response.data['results']), 2)
        self.assertEqual(response.data['total_pages'], 2)
        self.assertEqual(response.data['next'], 2)
        self.assertIsNone(response.data['previous'])

    def test_filter_by_action(self):
        response = self.client.get('/api/v1/audit-logs/?action=delete')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['model_name'], 'Course')

    def test_parse_positive_int(self):
        self.assertEqual(parse_positive_int('5', 1), 5)
        self.assertEqual(parse_positive_int('-2', 1), 1)
        self.assertEqual(parse_positive_int('abc', 7), 7)
        self.assertEqual(parse_positive_int(None, 3), 3)

    def test_paginate_out_of_range_page(self):
        """Test a page past the end returns the last page"""
        response = self.client.get('/api/v1/audit-logs/?limit=3&page=10')
        self.assertEqual(response.data['page'], 2)
        self.assertEqual(len(response.data['results']), 1)


class ManagementCommandTests(TestCase):
    """Test operator commands"""

    def test_create_admin(self):
        out = StringIO()
        call_command('create_admin', '--email', 'Boss@Test.com', '--password', 'secret123', stdout=out)
        user = User.objects.get(email='boss@test.com')
        self.assertTrue(user.is_admin)
        self.assertTrue(user.check_password('secret123'))
        self.assertIn('Created admin', out.getvalue())

    def test_create_admin_promotes_existing_user(self):
        user = TestDataFactory.create_user(email='promote@test.com')
        call_command('create_admin', '--email', 'promote@test.com', stdout=StringIO())
        user.refresh_from_db()
        self.assertEqual(user.role, 'admin')
        self.assertTrue(user.check_password('testpass123'))

    def test_create_admin_new_user_needs_password(self):
        with self.assertRaises(CommandError):
            call_command('create_admin', '--email', 'nobody@test.com', stdout=StringIO())

    def test_set_config_upserts(self):
        call_command('set_config', 'stripePrivateKey', 'sk_1', '--description', 'Payment key', stdout=StringIO())
        call_command('set_config', 'stripePrivateKey', 'sk_2', stdout=StringIO())
        entry = Config.objects.get(key='stripePrivateKey')
        self.assertEqual(entry.value, 'sk_2')
        self.assertEqual(entry.description, 'Payment key')
