from django.urls import path
from .views import review_list_create, review_list_for_item, review_my_list, review_detail

urlpatterns = [
    path('reviews/', review_list_create, name='review-list-create'),
    path('reviews/my/', review_my_list, name='review-my-list'),
    path('reviews/<int:pk>/', review_detail, name='review-detail'),
    path('reviews/<str:reviewable_type>/<int:reviewable_id>/', review_list_for_item, name='review-list-for-item'),
]
