import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Course',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(db_index=True, max_length=200)),
                ('description', models.TextField()),
                ('instructor', models.CharField(max_length=200)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('image', models.URLField(max_length=500, validators=[django.core.validators.RegexValidator(message='Please enter a valid image URL.', regex='(?i)^https?://.*\\.(png|jpg|jpeg|gif|svg|webp)$')])),
                ('rating', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=3)),
                ('reviews', models.PositiveIntegerField(default=0)),
                ('is_featured', models.BooleanField(db_index=True, default=False)),
                ('short_video_link', models.URLField(blank=True, default='', max_length=500, validators=[django.core.validators.RegexValidator(message='Please enter a valid video URL.', regex='(?i)^https?://.*\\.(mp4|webm|ogg)$')])),
                ('difficulty_level', models.CharField(choices=[('Beginner', 'Beginner'), ('Intermediate', 'Intermediate'), ('Advanced', 'Advanced')], default='Beginner', max_length=20)),
                ('language', models.CharField(default='English', max_length=50)),
                ('topics', models.JSONField(blank=True, default=list)),
                ('total_duration', models.PositiveIntegerField(default=0)),
                ('number_of_lectures', models.PositiveIntegerField(default=0)),
                ('category', models.CharField(blank=True, default='', max_length=100)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('requirements', models.JSONField(blank=True, default=list)),
                ('what_you_will_learn', models.JSONField(blank=True, default=list)),
                ('sale_enabled', models.BooleanField(default=False)),
                ('sale_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'courses',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Video',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('url', models.URLField(max_length=500, validators=[django.core.validators.RegexValidator(message='Please enter a valid video URL.', regex='(?i)^https?://.*\\.(mp4|webm|ogg)$')])),
                ('cover_image', models.URLField(blank=True, default='', max_length=500, validators=[django.core.validators.RegexValidator(message='Please enter a valid image URL.', regex='(?i)^https?://.*\\.(png|jpg|jpeg|gif|svg|webp)$')])),
                ('description', models.TextField(blank=True, default='')),
                ('duration', models.PositiveIntegerField(default=0)),
                ('priority', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='videos', to='courses.course')),
            ],
            options={
                'db_table': 'videos',
                'ordering': ['priority', 'id'],
            },
        ),
    ]
