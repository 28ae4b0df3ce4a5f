import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, max_length=200)),
                ('subject_name', models.CharField(max_length=200)),
                ('subject_code', models.CharField(db_index=True, max_length=50)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('image', models.URLField(max_length=500, validators=[django.core.validators.RegexValidator(message='Please enter a valid image URL.', regex='(?i)^https?://.*\\.(png|jpg|jpeg|gif|svg|webp)$')])),
                ('description', models.TextField()),
                ('product_type', models.CharField(choices=[('certificate', 'Certificate'), ('notes', 'Notes'), ('exam', 'Exam')], db_index=True, max_length=20)),
                ('pdf_link', models.URLField(max_length=500, validators=[django.core.validators.RegexValidator(message='Please enter a valid PDF URL.', regex='(?i)^https?://.*\\.pdf$')])),
                ('ratings', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=3)),
                ('number_of_reviews', models.PositiveIntegerField(default=0)),
                ('sale_enabled', models.BooleanField(default=False)),
                ('sale_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'products',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Favourite',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='favourited_by', to='catalog.product')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='favourites', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'favourites',
                'ordering': ['-created_at'],
                'unique_together': {('user', 'product')},
            },
        ),
    ]
