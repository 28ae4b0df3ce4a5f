from rest_framework import serializers

from .models import Ad, Theme, Policy, PALETTE_KEYS


class AdSerializer(serializers.ModelSerializer):
    class Meta:
        model = Ad
        fields = ['id', 'image', 'title', 'subtitle', 'description', 'link', 'category', 'template_id',
                  'price', 'start_date', 'end_date', 'target_audience', 'cta_text', 'priority',
                  'card_design', 'promo_code', 'limited_offer', 'instructor', 'course_info', 'rating',
                  'original_price', 'sale_price', 'discount_percentage', 'sale_ends', 'event_date',
                  'event_location', 'custom_styles', 'ad_prod_type', 'ad_prod_id', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        start = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start and end and end < start:
            raise serializers.ValidationError({'end_date': 'End date must be after start date.'})
        return attrs


class ThemeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Theme
        fields = ['id', 'light', 'dark', 'updated_at']
        read_only_fields = ['updated_at']

    def _validate_palette(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('Palette must be an object.')
        missing = sorted(PALETTE_KEYS - set(value))
        if missing:
            raise serializers.ValidationError(f"Missing palette keys: {', '.join(missing)}")
        return value

    def validate_light(self, value):
        return self._validate_palette(value)

    def validate_dark(self, value):
        return self._validate_palette(value)


class PolicySerializer(serializers.ModelSerializer):
    class Meta:
        model = Policy
        fields = ['id', 'policy_type', 'content', 'updated_at']
        read_only_fields = ['policy_type', 'updated_at']
