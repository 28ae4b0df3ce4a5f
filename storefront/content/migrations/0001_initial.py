from django.db import migrations, models
import storefront.content.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Ad',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('image', models.URLField(max_length=500)),
                ('title', models.CharField(max_length=200)),
                ('subtitle', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, default='')),
                ('link', models.URLField(blank=True, default='', max_length=500)),
                ('category', models.CharField(max_length=100)),
                ('template_id', models.CharField(choices=[('promo', 'Promo'), ('newCourse', 'New course'), ('sale', 'Sale'), ('event', 'Event')], default='newCourse', max_length=20)),
                ('price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('start_date', models.DateTimeField(blank=True, null=True)),
                ('end_date', models.DateTimeField(blank=True, null=True)),
                ('target_audience', models.CharField(blank=True, default='', max_length=100)),
                ('cta_text', models.CharField(blank=True, default='', max_length=100)),
                ('priority', models.IntegerField(db_index=True, default=0)),
                ('card_design', models.CharField(default='basic', max_length=50)),
                ('promo_code', models.CharField(blank=True, default='', max_length=50)),
                ('limited_offer', models.BooleanField(default=False)),
                ('instructor', models.CharField(blank=True, default='', max_length=200)),
                ('course_info', models.CharField(blank=True, default='', max_length=255)),
                ('rating', models.DecimalField(blank=True, decimal_places=2, max_digits=3, null=True)),
                ('original_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('sale_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('discount_percentage', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('sale_ends', models.DateTimeField(blank=True, null=True)),
                ('event_date', models.DateTimeField(blank=True, null=True)),
                ('event_location', models.CharField(blank=True, default='', max_length=255)),
                ('custom_styles', models.JSONField(blank=True, default=dict)),
                ('ad_prod_type', models.CharField(choices=[('Product', 'Product'), ('Course', 'Course')], default='Product', max_length=10)),
                ('ad_prod_id', models.CharField(blank=True, default='', max_length=50)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'ads',
                'ordering': ['-priority', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Theme',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('light', models.JSONField(default=storefront.content.models.default_light_palette)),
                ('dark', models.JSONField(default=storefront.content.models.default_dark_palette)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'themes',
            },
        ),
        migrations.CreateModel(
            name='Policy',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('policy_type', models.CharField(choices=[('privacy', 'Privacy policy'), ('terms', 'Terms of service')], max_length=20, unique=True)),
                ('content', models.TextField()),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'policies',
                'verbose_name_plural': 'policies',
            },
        ),
    ]
