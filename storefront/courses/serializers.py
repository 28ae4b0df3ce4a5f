from django.db import transaction
from rest_framework import serializers

from storefront.catalog.pricing import effective_price, discount_percentage
from storefront.core.cache_signals import suspend_cache_signals
from storefront.core.cache_utils import invalidate_courses_cache
from .models import Course, Video


class VideoSerializer(serializers.ModelSerializer):
    class Meta:
        model = Video
        fields = ['id', 'title', 'url', 'cover_image', 'description', 'duration', 'priority']


class CourseSerializer(serializers.ModelSerializer):
    """
    Full course with nested videos
    On write, a provided `videos` list replaces the course's whole video set
    """
    videos = VideoSerializer(many=True, required=False)
    video_url = serializers.SerializerMethodField()
    effective_price = serializers.SerializerMethodField()
    discount_percentage = serializers.SerializerMethodField()

    class Meta:
        model = Course
        fields = ['id', 'title', 'description', 'instructor', 'price', 'image', 'videos', 'video_url',
                  'rating', 'reviews', 'is_featured', 'short_video_link', 'difficulty_level', 'language',
                  'topics', 'total_duration', 'number_of_lectures', 'category', 'tags', 'requirements',
                  'what_you_will_learn', 'sale_enabled', 'sale_price', 'effective_price',
                  'discount_percentage', 'created_at', 'updated_at']
        read_only_fields = ['rating', 'reviews', 'created_at', 'updated_at']

    def get_video_url(self, obj):
        videos = list(obj.videos.all())
        return videos[0].url if videos else None

    def get_effective_price(self, obj):
        return str(effective_price(obj))

    def get_discount_percentage(self, obj):
        return discount_percentage(obj)

    def validate_topics(self, value):
        return self._validate_string_list(value)

    def validate_tags(self, value):
        return self._validate_string_list(value)

    def validate_requirements(self, value):
        return self._validate_string_list(value)

    def validate_what_you_will_learn(self, value):
        return self._validate_string_list(value)

    @staticmethod
    def _validate_string_list(value):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError('Expected a list of strings.')
        return value

    def validate(self, attrs):
        if self.context.get('force_featured'):
            attrs['is_featured'] = True
        is_featured = attrs.get('is_featured', self.instance.is_featured if self.instance else False)
        if not is_featured:
            # Only featured courses carry a reel
            attrs['short_video_link'] = ''
        return attrs

    def _replace_videos(self, course, videos_data):
        with suspend_cache_signals():
            course.videos.all().delete()
            Video.objects.bulk_create([
                Video(course=course, **video)
                for video in sorted(videos_data, key=lambda v: v.get('priority', 0))
            ])
        invalidate_courses_cache()

    @transaction.atomic
    def create(self, validated_data):
        videos_data = validated_data.pop('videos', [])
        course = Course.objects.create(**validated_data)
        if videos_data:
            self._replace_videos(course, videos_data)
        return course

    @transaction.atomic
    def update(self, instance, validated_data):
        videos_data = validated_data.pop('videos', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        if videos_data is not None:
            self._replace_videos(instance, videos_data)
        return instance


class FeaturedReelSerializer(serializers.ModelSerializer):
    """Lightweight shape for the featured reel carousel"""

    class Meta:
        model = Course
        fields = ['id', 'title', 'short_video_link', 'image', 'rating', 'reviews', 'difficulty_level',
                  'language', 'topics', 'total_duration', 'number_of_lectures', 'category', 'tags',
                  'sale_enabled', 'sale_price', 'price']


class CourseSearchSerializer(serializers.ModelSerializer):
    class Meta:
        model = Course
        fields = ['id', 'title', 'description', 'image', 'rating', 'reviews', 'is_featured',
                  'short_video_link', 'sale_enabled', 'sale_price', 'price']


class CourseSummarySerializer(serializers.ModelSerializer):
    """Compact course shape embedded in enrollments and reviews"""
    effective_price = serializers.SerializerMethodField()

    class Meta:
        model = Course
        fields = ['id', 'title', 'instructor', 'image', 'price', 'sale_enabled', 'sale_price',
                  'effective_price', 'difficulty_level', 'number_of_lectures']

    def get_effective_price(self, obj):
        return str(effective_price(obj))
