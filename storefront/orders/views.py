import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from storefront.catalog.pricing import effective_price, to_decimal
from storefront.core.models import Config
from storefront.core.permissions import IsAdminRole
from storefront.core.utils import create_audit_log, paginate
from .models import Cart, CartItem, Order, OrderItem
from .payments import (
    PaymentError, SECRET_KEY_CONFIG, SUCCEEDED,
    create_payment_intent as provider_create_intent, retrieve_payment_intent,
    intent_id_from_client_secret, payment_mismatch
)
from .serializers import (
    CartSerializer, CartItemAddSerializer, CartItemUpdateSerializer, OrderSerializer
)

logger = logging.getLogger(__name__)


def _get_cart(user):
    cart, _ = Cart.objects.get_or_create(user=user)
    return cart


def _stripe_secret_key():
    return Config.get_value(SECRET_KEY_CONFIG)


def _order_queryset():
    return Order.objects.select_related('user').prefetch_related('items__product')


# Cart views
@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def cart_detail(request):
    """GET: current cart with sale-resolved total; DELETE: empty the cart"""
    cart = _get_cart(request.user)
    if request.method == 'DELETE':
        cart.items.all().delete()
        cart.save(update_fields=['updated_at'])
    return Response(CartSerializer(cart).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_item_add(request):
    """Add a product to the cart; an existing line has its quantity increased"""
    serializer = CartItemAddSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    product = serializer.validated_data['product']
    quantity = serializer.validated_data['quantity']
    cart = _get_cart(request.user)

    with transaction.atomic():
        item, created = CartItem.objects.select_for_update().get_or_create(
            cart=cart, product=product, defaults={'quantity': quantity}
        )
        if not created:
            item.quantity += quantity
            item.save(update_fields=['quantity'])
        cart.save(update_fields=['updated_at'])

    return Response(CartSerializer(cart).data, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def cart_item_detail(request, pk):
    cart = _get_cart(request.user)
    item = get_object_or_404(CartItem, pk=pk, cart=cart)

    if request.method == 'PATCH':
        serializer = CartItemUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        item.quantity = serializer.validated_data['quantity']
        item.save(update_fields=['quantity'])
    else:
        item.delete()

    cart.save(update_fields=['updated_at'])
    return Response(CartSerializer(cart).data)


# Payment views
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_payment_intent(request):
    """
    Create a card payment intent and return its client secret
    Without total_price, the amount is the current cart total.
    """
    secret_key = _stripe_secret_key()
    if not secret_key:
        return Response({'error': 'Stripe configuration not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.data.get('total_price') not in (None, ''):
        amount = to_decimal(request.data.get('total_price'), default=None)
        if amount is None or amount <= 0:
            return Response({'error': 'total_price must be a positive amount'}, status=status.HTTP_400_BAD_REQUEST)
    else:
        amount = _get_cart(request.user).total_price
        if amount <= 0:
            return Response({'error': 'Cart is empty'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        intent = provider_create_intent(amount, request.user.id, secret_key)
    except PaymentError as e:
        return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)

    create_audit_log(
        request=request,
        action='payment_intent',
        model_name='Order',
        object_id=intent.get('id') or 'unknown',
        changes={'amount': str(amount)}
    )
    return Response({'clientSecret': intent.get('client_secret')})


# Order views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """
    GET: all orders with their users (admin only, paginated)
    POST: record an order from client-supplied items
    """
    if request.method == 'GET':
        if not request.user.is_admin:
            return Response({'error': 'Admin access required.'}, status=status.HTTP_403_FORBIDDEN)
        return Response(paginate(request, _order_queryset().order_by('-created_at'), OrderSerializer))

    serializer = OrderSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        order = serializer.save(user=request.user)
        request.user.increment_purchases()

    create_audit_log(
        request=request,
        action='order_create',
        model_name='Order',
        object_id=str(order.id),
        object_name=f"Order #{order.id}",
        changes={'total_price': str(order.total_price), 'items': order.items.count()}
    )
    return Response(OrderSerializer(_order_queryset().get(pk=order.pk)).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def checkout(request):
    """
    Turn the current cart into an order

    The cart is locked and re-priced at current sale-resolved prices. When a client_secret
    from a confirmed payment sheet is sent, the payment intent must have succeeded for this
    cart total and this user, and must not have paid for an earlier order.
    """
    cart = _get_cart(request.user)
    if not cart.items.exists():
        return Response({'error': 'Cart is empty'}, status=status.HTTP_400_BAD_REQUEST)

    client_secret = request.data.get('client_secret')
    intent = None
    if client_secret:
        secret_key = _stripe_secret_key()
        if not secret_key:
            return Response({'error': 'Stripe configuration not found'}, status=status.HTTP_404_NOT_FOUND)
        try:
            intent = retrieve_payment_intent(client_secret, secret_key)
        except PaymentError as e:
            return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)

        if intent.get('status') != SUCCEEDED:
            logger.warning(f"Checkout refused for user {request.user.id}: payment intent status {intent.get('status')}")
            return Response(
                {'error': 'Payment has not been completed', 'payment_status': intent.get('status')},
                status=status.HTTP_400_BAD_REQUEST
            )

    with transaction.atomic():
        cart = Cart.objects.select_for_update().get(pk=cart.pk)
        cart_items = list(cart.items.select_related('product'))
        if not cart_items:
            return Response({'error': 'Cart is empty'}, status=status.HTTP_400_BAD_REQUEST)

        lines = [(item, effective_price(item.product)) for item in cart_items]
        total = sum((price * item.quantity for item, price in lines), to_decimal(0))

        is_paid = False
        payment_result = {}
        intent_id = None
        if intent is not None:
            intent_id = intent.get('id') or intent_id_from_client_secret(client_secret)
            mismatch = payment_mismatch(intent, total, request.user.id)
            if mismatch:
                logger.warning(f"Checkout refused for user {request.user.id}: {mismatch} (intent {intent_id})")
                return Response({'error': mismatch}, status=status.HTTP_400_BAD_REQUEST)
            if Order.objects.filter(payment_intent_id=intent_id).exists():
                logger.warning(f"Checkout refused for user {request.user.id}: intent {intent_id} already used")
                return Response({'error': 'Payment has already been used for another order'},
                                status=status.HTTP_400_BAD_REQUEST)
            is_paid = True
            payment_result = {
                'id': intent_id,
                'status': intent.get('status'),
                'amount': intent.get('amount'),
                'currency': intent.get('currency'),
            }

        order = Order.objects.create(
            user=request.user,
            total_price=total,
            payment_method=request.data.get('payment_method') or ('card' if client_secret else ''),
            is_paid=is_paid,
            paid_at=timezone.now() if is_paid else None,
            payment_result=payment_result,
            payment_intent_id=intent_id,
            status='completed',
        )
        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                product=item.product,
                exam_name=item.product.name,
                subject_name=item.product.subject_name,
                subject_code=item.product.subject_code,
                price=price,
                image=item.product.image,
                quantity=item.quantity,
            )
            for item, price in lines
        ])
        request.user.increment_purchases()
        cart.items.all().delete()

    create_audit_log(
        request=request,
        action='checkout',
        model_name='Order',
        object_id=str(order.id),
        object_name=f"Order #{order.id}",
        changes={'total_price': str(total), 'is_paid': is_paid, 'items': len(lines)}
    )
    logger.info(f"Checkout completed for user {request.user.id}: order {order.id}, total {total}")
    return Response(OrderSerializer(_order_queryset().get(pk=order.pk)).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_orders(request):
    orders = _order_queryset().filter(user=request.user).order_by('-created_at')
    return Response(OrderSerializer(orders, many=True).data)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAdminRole])
def order_detail(request, pk):
    """Retrieve or delete an order (admin); deleting decrements the owner's purchase count"""
    order = get_object_or_404(_order_queryset(), pk=pk)

    if request.method == 'GET':
        return Response(OrderSerializer(order).data)

    owner = order.user
    order_id = order.id
    with transaction.atomic():
        order.delete()
        owner.decrement_purchases()

    create_audit_log(
        request=request,
        action='order_delete',
        model_name='Order',
        object_id=str(order_id),
        object_name=f"Order #{order_id}",
        changes={'owner': owner.email}
    )
    return Response({'message': 'Order deleted successfully'}, status=status.HTTP_200_OK)
