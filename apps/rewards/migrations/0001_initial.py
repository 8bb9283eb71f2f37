# Generated manually for the rewards app

import uuid
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('classrooms', '0001_initial'),
        ('currency', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='RewardSource',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('coins_earned', models.PositiveIntegerField()),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('processing', 'Processing'), ('completed', 'Completed'), ('failed', 'Failed')], default='pending', max_length=20)),
                ('attempts', models.PositiveIntegerField(default=0)),
                ('last_attempt_at', models.DateTimeField(blank=True, null=True)),
                ('next_attempt_at', models.DateTimeField(blank=True, null=True)),
                ('last_error', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reward_sources', to='classrooms.student')),
                ('transaction', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='reward_source', to='currency.currencytransaction')),
            ],
            options={
                'db_table': 'reward_sources',
                'ordering': ['created_at'],
                'indexes': [
                    models.Index(fields=['status', 'next_attempt_at'], name='reward_status_next_idx'),
                    models.Index(fields=['status', 'last_attempt_at'], name='reward_status_last_idx'),
                    models.Index(fields=['student', 'created_at'], name='reward_student_created_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(('status', 'completed'), _negated=True),
                            ('completed_at__isnull', False),
                            _connector='OR',
                        ),
                        name='check_completed_reward_has_timestamp',
                    ),
                ],
            },
        ),
    ]
