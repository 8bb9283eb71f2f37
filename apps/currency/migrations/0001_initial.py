# Generated manually for the currency app

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('classrooms', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='CurrencyTransaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount', models.IntegerField()),
                ('transaction_type', models.CharField(choices=[('earn', 'Earn'), ('spend', 'Spend'), ('grant', 'Grant'), ('deduct', 'Deduct')], max_length=10)),
                ('description', models.TextField(blank=True)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('actor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='currency_transactions', to=settings.AUTH_USER_MODEL)),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='currency_transactions', to='classrooms.student')),
            ],
            options={
                'db_table': 'currency_transactions',
                'ordering': ['created_at'],
                'indexes': [
                    models.Index(fields=['student', 'created_at'], name='ctx_student_created_idx'),
                    models.Index(fields=['transaction_type', 'created_at'], name='ctx_type_created_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(('amount__gt', 0), ('transaction_type__in', ['earn', 'grant'])),
                            models.Q(('amount__lt', 0), ('transaction_type__in', ['spend', 'deduct'])),
                            _connector='OR',
                        ),
                        name='check_transaction_amount_sign',
                    ),
                ],
            },
        ),
    ]
