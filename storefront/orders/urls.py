from django.urls import path
from .views import (
    cart_detail, cart_item_add, cart_item_detail,
    create_payment_intent, order_list_create, checkout, my_orders, order_detail
)

urlpatterns = [
    # Cart endpoints
    path('cart/', cart_detail, name='cart-detail'),
    path('cart/items/', cart_item_add, name='cart-item-add'),
    path('cart/items/<int:pk>/', cart_item_detail, name='cart-item-detail'),

    # Order endpoints
    path('orders/', order_list_create, name='order-list-create'),
    path('orders/create-payment-intent/', create_payment_intent, name='order-create-payment-intent'),
    path('orders/checkout/', checkout, name='order-checkout'),
    path('orders/my-orders/', my_orders, name='order-my-orders'),
    path('orders/<int:pk>/', order_detail, name='order-detail'),
]
