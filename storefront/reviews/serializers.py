from django.db import models
from rest_framework import serializers

from .models import Review
from .ratings import get_reviewable, load_reviewables, reviewable_summary


class ReviewListSerializer(serializers.ListSerializer):
    """Loads every review's product/course up front for the child serializer"""

    def to_representation(self, data):
        reviews = list(data.all() if isinstance(data, models.manager.BaseManager) else data)
        self.context['reviewables'] = load_reviewables(reviews)
        return super().to_representation(reviews)


class ReviewSerializer(serializers.ModelSerializer):
    user_detail = serializers.SerializerMethodField()
    reviewable = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = ['id', 'user', 'user_detail', 'reviewable_type', 'reviewable_id', 'reviewable',
                  'name', 'rating', 'comment', 'created_at', 'updated_at']
        read_only_fields = ['user', 'name', 'created_at', 'updated_at']
        list_serializer_class = ReviewListSerializer

    def get_user_detail(self, obj):
        user = obj.user
        return {
            'id': user.id,
            'name': user.name,
            'email': user.email,
            'profile_image': user.profile_image,
        }

    def get_reviewable(self, obj):
        # Fast path: targets preloaded for a list of reviews
        if 'reviewables' in self.context:
            reviewable = self.context['reviewables'].get((obj.reviewable_type, obj.reviewable_id))
        else:
            reviewable = get_reviewable(obj.reviewable_type, obj.reviewable_id)
        return reviewable_summary(obj.reviewable_type, reviewable)


class ReviewCreateSerializer(serializers.Serializer):
    reviewable_id = serializers.IntegerField(min_value=1)
    reviewable_type = serializers.CharField()
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField()


class ReviewUpdateSerializer(serializers.ModelSerializer):
    """Only rating and comment can change after creation"""

    class Meta:
        model = Review
        fields = ['rating', 'comment']
        extra_kwargs = {
            'rating': {'required': False},
            'comment': {'required': False},
        }
