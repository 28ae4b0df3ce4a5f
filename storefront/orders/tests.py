"""
Test suite for carts, payment intents, checkout and orders
"""
from decimal import Decimal
from unittest.mock import patch, MagicMock

import requests
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from storefront.core.models import AuditLog
from storefront.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from storefront.orders.models import Cart, CartItem, Order, OrderItem
from storefront.orders.payments import (
    PaymentError, create_payment_intent, retrieve_payment_intent, intent_id_from_client_secret,
    payment_mismatch
)


def provider_response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


class PaymentClientTests(TestCase):
    """Test the payment provider client"""

    @patch('storefront.orders.payments.requests.post')
    def test_create_intent_sends_cents(self, mock_post):
        mock_post.return_value = provider_response({'id': 'pi_1', 'client_secret': 'pi_1_secret_abc'})
        intent = create_payment_intent(Decimal('19.99'), 7, 'sk_test')

        self.assertEqual(intent['client_secret'], 'pi_1_secret_abc')
        _, kwargs = mock_post.call_args
        self.assertEqual(kwargs['data']['amount'], 1999)
        self.assertEqual(kwargs['data']['payment_method_types[]'], 'card')
        self.assertEqual(kwargs['data']['metadata[user_id]'], '7')
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer sk_test')

    @patch('storefront.orders.payments.requests.post')
    def test_create_intent_provider_error(self, mock_post):
        mock_post.return_value = provider_response({'error': {'message': 'Invalid API Key'}}, status_code=401)
        with self.assertRaises(PaymentError) as ctx:
            create_payment_intent(Decimal('5.00'), 1, 'sk_bad')
        self.assertEqual(str(ctx.exception), 'Invalid API Key')
        self.assertEqual(ctx.exception.status_code, 401)

    @patch('storefront.orders.payments.requests.post')
    def test_create_intent_network_error(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError('down')
        with self.assertRaises(PaymentError):
            create_payment_intent(Decimal('5.00'), 1, 'sk_test')

    @patch('storefront.orders.payments.requests.get')
    def test_retrieve_intent_by_client_secret(self, mock_get):
        mock_get.return_value = provider_response({'id': 'pi_42', 'status': 'succeeded'})
        intent = retrieve_payment_intent('pi_42_secret_xyz', 'sk_test')
        self.assertEqual(intent['status'], 'succeeded')
        self.assertTrue(mock_get.call_args[0][0].endswith('/payment_intents/pi_42'))

    def test_intent_id_from_client_secret(self):
        self.assertEqual(intent_id_from_client_secret('pi_9_secret_q'), 'pi_9')
        self.assertEqual(intent_id_from_client_secret('pi_9'), 'pi_9')

    def test_payment_mismatch(self):
        intent = {'amount': 1999, 'currency': 'USD', 'metadata': {'user_id': '7'}}
        self.assertIsNone(payment_mismatch(intent, Decimal('19.99'), 7))
        self.assertEqual(payment_mismatch(intent, Decimal('20.00'), 7), 'Payment amount does not match the cart total')
        self.assertEqual(payment_mismatch(intent, Decimal('19.99'), 8), 'Payment belongs to another user')
        self.assertEqual(payment_mismatch(intent, Decimal('19.99'), 7, currency='eur'),
                         'Payment currency does not match')
        self.assertEqual(payment_mismatch({'amount': 1999, 'currency': 'usd'}, Decimal('19.99'), 7),
                         'Payment belongs to another user')


class CartAPITests(TestCase):
    """Test cart endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(price=Decimal('40.00'), sale_enabled=True,
                                                      sale_price=Decimal('30.00'))
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_empty_cart(self):
        response = self.client.get('/api/v1/cart/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'], [])
        self.assertEqual(response.data['total_price'], '0.00')

    def test_add_item_uses_sale_price(self):
        response = self.client.post('/api/v1/cart/items/', {'product': self.product.id, 'quantity': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['item_count'], 2)
        self.assertEqual(response.data['total_price'], '60.00')
        self.assertEqual(response.data['items'][0]['discount_percentage'], 25)

    def test_add_existing_item_increments_quantity(self):
        self.client.post('/api/v1/cart/items/', {'product': self.product.id}, format='json')
        response = self.client.post('/api/v1/cart/items/', {'product': self.product.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(CartItem.objects.get(cart__user=self.user).quantity, 2)

    def test_add_unknown_product(self):
        response = self.client.post('/api/v1/cart/items/', {'product': 99999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_add_invalid_quantity(self):
        response = self.client.post('/api/v1/cart/items/', {'product': self.product.id, 'quantity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_and_remove_item(self):
        item = TestDataFactory.create_cart_item(self.user, self.product)
        response = self.client.patch(f'/api/v1/cart/items/{item.id}/', {'quantity': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_price'], '90.00')

        response = self.client.delete(f'/api/v1/cart/items/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'], [])

    def test_cannot_touch_other_users_item(self):
        other = TestDataFactory.create_user()
        item = TestDataFactory.create_cart_item(other, self.product)
        response = self.client.delete(f'/api/v1/cart/items/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(CartItem.objects.filter(pk=item.pk).exists())

    def test_clear_cart(self):
        TestDataFactory.create_cart_item(self.user, self.product)
        response = self.client.delete('/api/v1/cart/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Cart.objects.get(user=self.user).items.count(), 0)

    def test_cart_requires_auth(self):
        response = APIClient().get('/api/v1/cart/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class PaymentIntentAPITests(TestCase):
    """Test the create-payment-intent endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_missing_configuration(self):
        response = self.client.post('/api/v1/orders/create-payment-intent/', {'total_price': '10.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Stripe configuration not found')

    @patch('storefront.orders.payments.requests.post')
    def test_returns_client_secret(self, mock_post):
        TestDataFactory.create_config('stripePrivateKey', 'sk_test')
        mock_post.return_value = provider_response({'id': 'pi_5', 'client_secret': 'pi_5_secret_s'})
        response = self.client.post('/api/v1/orders/create-payment-intent/', {'total_price': '12.50'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['clientSecret'], 'pi_5_secret_s')
        self.assertEqual(mock_post.call_args[1]['data']['amount'], 1250)
        self.assertTrue(AuditLog.objects.filter(action='payment_intent', object_id='pi_5').exists())

    @patch('storefront.orders.payments.requests.post')
    def test_amount_defaults_to_cart_total(self, mock_post):
        TestDataFactory.create_config('stripePrivateKey', 'sk_test')
        TestDataFactory.create_cart_item(self.user, TestDataFactory.create_product(price=Decimal('15.00')), quantity=2)
        mock_post.return_value = provider_response({'id': 'pi_6', 'client_secret': 'pi_6_secret_s'})
        response = self.client.post('/api/v1/orders/create-payment-intent/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(mock_post.call_args[1]['data']['amount'], 3000)

    def test_empty_cart_without_amount(self):
        TestDataFactory.create_config('stripePrivateKey', 'sk_test')
        response = self.client.post('/api/v1/orders/create-payment-intent/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invalid_amount(self):
        TestDataFactory.create_config('stripePrivateKey', 'sk_test')
        response = self.client.post('/api/v1/orders/create-payment-intent/', {'total_price': 'abc'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @patch('storefront.orders.payments.requests.post')
    def test_provider_failure(self, mock_post):
        TestDataFactory.create_config('stripePrivateKey', 'sk_test')
        mock_post.return_value = provider_response({'error': {'message': 'Card declined'}}, status_code=402)
        response = self.client.post('/api/v1/orders/create-payment-intent/', {'total_price': '5.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['error'], 'Card declined')


class CheckoutAPITests(TestCase):
    """Test turning a cart into an order"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(price=Decimal('20.00'), sale_enabled=True,
                                                      sale_price=Decimal('15.00'))
        self.other_product = TestDataFactory.create_product(price=Decimal('10.00'))
        TestDataFactory.create_cart_item(self.user, self.product, quantity=2)
        TestDataFactory.create_cart_item(self.user, self.other_product)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def paid_intent(self, intent_id, amount=4000, currency='usd', user_id=None):
        return {
            'id': intent_id,
            'status': 'succeeded',
            'amount': amount,
            'currency': currency,
            'metadata': {'user_id': str(user_id or self.user.id)},
        }

    def test_checkout_without_payment(self):
        """Test checkout snapshots sale prices and clears the cart"""
        response = self.client.post('/api/v1/orders/checkout/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_price'], '40.00')
        self.assertFalse(response.data['is_paid'])
        self.assertEqual(response.data['status'], 'completed')
        self.assertEqual(len(response.data['order_items']), 2)

        sale_line = OrderItem.objects.get(product=self.product)
        self.assertEqual(sale_line.price, Decimal('15.00'))
        self.assertEqual(sale_line.quantity, 2)
        self.assertEqual(CartItem.objects.filter(cart__user=self.user).count(), 0)
        self.user.refresh_from_db()
        self.assertEqual(self.user.purchases_count, 1)
        self.assertTrue(AuditLog.objects.filter(action='checkout').exists())

    @patch('storefront.orders.payments.requests.get')
    def test_checkout_with_succeeded_payment(self, mock_get):
        TestDataFactory.create_config('stripePrivateKey', 'sk_test')
        mock_get.return_value = provider_response(self.paid_intent('pi_7'))
        response = self.client.post('/api/v1/orders/checkout/', {'client_secret': 'pi_7_secret_z'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_paid'])
        self.assertIsNotNone(response.data['paid_at'])
        self.assertEqual(response.data['payment_method'], 'card')
        self.assertEqual(response.data['payment_result']['id'], 'pi_7')
        self.assertEqual(Order.objects.get().payment_intent_id, 'pi_7')

    @patch('storefront.orders.payments.requests.get')
    def test_checkout_refused_when_amount_differs(self, mock_get):
        """Test a succeeded intent for another amount does not pay for the cart"""
        TestDataFactory.create_config('stripePrivateKey', 'sk_test')
        mock_get.return_value = provider_response(self.paid_intent('pi_9', amount=1))
        response = self.client.post('/api/v1/orders/checkout/', {'client_secret': 'pi_9_secret_z'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Payment amount does not match the cart total')
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(CartItem.objects.filter(cart__user=self.user).count(), 2)

    @patch('storefront.orders.payments.requests.get')
    def test_checkout_refused_when_currency_differs(self, mock_get):
        TestDataFactory.create_config('stripePrivateKey', 'sk_test')
        mock_get.return_value = provider_response(self.paid_intent('pi_10', currency='eur'))
        response = self.client.post('/api/v1/orders/checkout/', {'client_secret': 'pi_10_secret_z'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Order.objects.count(), 0)

    @patch('storefront.orders.payments.requests.get')
    def test_checkout_refused_for_another_users_intent(self, mock_get):
        TestDataFactory.create_config('stripePrivateKey', 'sk_test')
        mock_get.return_value = provider_response(self.paid_intent('pi_11', user_id=self.user.id + 1000))
        response = self.client.post('/api/v1/orders/checkout/', {'client_secret': 'pi_11_secret_z'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Payment belongs to another user')
        self.assertEqual(Order.objects.count(), 0)

    @patch('storefront.orders.payments.requests.get')
    def test_checkout_refuses_reused_intent(self, mock_get):
        """Test one succeeded intent pays for a single order only"""
        TestDataFactory.create_config('stripePrivateKey', 'sk_test')
        mock_get.return_value = provider_response(self.paid_intent('pi_12'))
        response = self.client.post('/api/v1/orders/checkout/', {'client_secret': 'pi_12_secret_z'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        TestDataFactory.create_cart_item(self.user, self.product, quantity=2)
        TestDataFactory.create_cart_item(self.user, self.other_product)
        response = self.client.post('/api/v1/orders/checkout/', {'client_secret': 'pi_12_secret_z'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Payment has already been used for another order')
        self.assertEqual(Order.objects.filter(is_paid=True).count(), 1)
        self.assertEqual(CartItem.objects.filter(cart__user=self.user).count(), 2)
        self.user.refresh_from_db()
        self.assertEqual(self.user.purchases_count, 1)

    def test_checkout_twice_creates_one_order(self):
        """Test a repeated submit of an already checked-out cart is refused"""
        first = self.client.post('/api/v1/orders/checkout/', {}, format='json')
        second = self.client.post('/api/v1/orders/checkout/', {}, format='json')
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Order.objects.count(), 1)
        self.user.refresh_from_db()
        self.assertEqual(self.user.purchases_count, 1)

    @patch('storefront.orders.payments.requests.get')
    def test_checkout_refused_when_payment_incomplete(self, mock_get):
        TestDataFactory.create_config('stripePrivateKey', 'sk_test')
        mock_get.return_value = provider_response({'id': 'pi_8', 'status': 'requires_payment_method'})
        response = self.client.post('/api/v1/orders/checkout/', {'client_secret': 'pi_8_secret_z'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['payment_status'], 'requires_payment_method')
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(CartItem.objects.filter(cart__user=self.user).count(), 2)

    def test_checkout_with_payment_but_no_configuration(self):
        response = self.client.post('/api/v1/orders/checkout/', {'client_secret': 'pi_1_secret_z'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_checkout_empty_cart(self):
        self.client.delete('/api/v1/cart/')
        response = self.client.post('/api/v1/orders/checkout/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class OrderAPITests(TestCase):
    """Test order endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_admin()
        self.product = TestDataFactory.create_product()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_order(self):
        response = self.client.post('/api/v1/orders/', {
            'order_items': [{
                'product': self.product.id,
                'exam_name': self.product.name,
                'price': '100.00',
                'quantity': 1,
            }],
            'total_price': '100.00',
            'payment_method': 'card',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user'], self.user.id)
        self.assertEqual(response.data['order_items'][0]['pdf_link'], self.product.pdf_link)
        self.user.refresh_from_db()
        self.assertEqual(self.user.purchases_count, 1)

    def test_create_order_without_items(self):
        response = self.client.post('/api/v1/orders/', {'order_items': [], 'total_price': '0.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('order_items', response.data)

    def test_list_orders_admin_only(self):
        TestDataFactory.create_order(self.user)
        response = self.client.get('/api/v1/orders/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['user_detail']['email'], self.user.email)

    def test_my_orders(self):
        TestDataFactory.create_order(self.user)
        TestDataFactory.create_order(self.admin)
        response = self.client.get('/api/v1/orders/my-orders/')
        self.assertEqual(len(response.data), 1)

    def test_order_detail_admin_only(self):
        order = TestDataFactory.create_order(self.user)
        response = self.client.get(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_order_decrements_purchases(self):
        order = TestDataFactory.create_order(self.user)
        self.user.increment_purchases()
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Order.objects.filter(pk=order.pk).exists())
        self.user.refresh_from_db()
        self.assertEqual(self.user.purchases_count, 0)

    def test_order_items_survive_product_deletion(self):
        order = TestDataFactory.create_order(self.user, products=[self.product])
        self.product.delete()
        item = order.items.get()
        self.assertIsNone(item.product)
        self.assertIsNone(item.pdf_link)
