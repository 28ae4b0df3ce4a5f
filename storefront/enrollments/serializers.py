from rest_framework import serializers

from storefront.courses.serializers import CourseSummarySerializer
from .models import Enrollment, LessonProgress


class LessonProgressSerializer(serializers.ModelSerializer):
    class Meta:
        model = LessonProgress
        fields = ['lesson_id', 'watched_duration', 'completed', 'updated_at']
        read_only_fields = ['updated_at']


class EnrollmentSerializer(serializers.ModelSerializer):
    course_detail = CourseSummarySerializer(source='course', read_only=True)
    lessons_progress = LessonProgressSerializer(many=True, read_only=True)

    class Meta:
        model = Enrollment
        fields = ['id', 'user', 'course', 'course_detail', 'enrolled_at', 'payment_status', 'payment_method',
                  'transaction_id', 'price_paid', 'discount_code', 'progress', 'status', 'last_accessed',
                  'completion_date', 'certificate_url', 'lessons_progress', 'notes', 'created_at', 'updated_at']
        read_only_fields = ['user', 'course', 'enrolled_at', 'created_at', 'updated_at']


class EnrollmentUpdateSerializer(serializers.ModelSerializer):
    """Fields a learner may update on their own enrollment"""
    lessons_progress = LessonProgressSerializer(many=True, required=False)

    class Meta:
        model = Enrollment
        fields = ['progress', 'status', 'last_accessed', 'completion_date', 'certificate_url',
                  'lessons_progress', 'notes']

    def update(self, instance, validated_data):
        lessons = validated_data.pop('lessons_progress', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        if lessons is not None:
            instance.lessons_progress.all().delete()
            LessonProgress.objects.bulk_create([
                LessonProgress(enrollment=instance, **lesson) for lesson in lessons
            ])
        return instance


class AdminEnrollmentSerializer(EnrollmentUpdateSerializer):
    user_detail = serializers.SerializerMethodField()
    course_detail = CourseSummarySerializer(source='course', read_only=True)

    class Meta:
        model = Enrollment
        fields = ['id', 'user', 'user_detail', 'course', 'course_detail', 'enrolled_at', 'payment_status',
                  'payment_method', 'transaction_id', 'price_paid', 'discount_code', 'progress', 'status',
                  'last_accessed', 'completion_date', 'certificate_url', 'lessons_progress', 'notes',
                  'created_at', 'updated_at']
        read_only_fields = ['enrolled_at', 'created_at', 'updated_at']
        # Duplicates are reported by the view with a single message
        validators = []

    def get_user_detail(self, obj):
        return {'id': obj.user.id, 'name': obj.user.name, 'email': obj.user.email}

    def create(self, validated_data):
        lessons = validated_data.pop('lessons_progress', [])
        enrollment = Enrollment.objects.create(**validated_data)
        if lessons:
            LessonProgress.objects.bulk_create([
                LessonProgress(enrollment=enrollment, **lesson) for lesson in lessons
            ])
        return enrollment


class LessonProgressUpdateSerializer(serializers.Serializer):
    lesson_id = serializers.CharField(max_length=100)
    watched_duration = serializers.IntegerField(min_value=0, required=False)
    completed = serializers.BooleanField(required=False)
