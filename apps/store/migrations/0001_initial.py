# Generated manually for the store app

import uuid
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('classrooms', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='StoreItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True)),
                ('cost', models.PositiveIntegerField(validators=[MinValueValidator(1), MaxValueValidator(10000)])),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'store_items',
                'ordering': ['cost', 'name'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('cost__gt', 0)), name='check_store_item_cost_positive'),
                ],
            },
        ),
        migrations.CreateModel(
            name='InventoryEntry',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('is_equipped', models.BooleanField(default=False)),
                ('acquired_at', models.DateTimeField(auto_now_add=True)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='owners', to='store.storeitem')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='inventory', to='classrooms.student')),
            ],
            options={
                'db_table': 'student_inventory',
                'ordering': ['acquired_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('student', 'item'), name='unique_inventory_student_item'),
                ],
            },
        ),
    ]
