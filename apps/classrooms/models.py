from django.db import models
import uuid


class Classroom(models.Model):
    """A teacher's class. Students belong to exactly one classroom."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    teacher = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='classrooms'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'classrooms'
        ordering = ['name']

    def __str__(self):
        return self.name


class Student(models.Model):
    """
    Student with a cached coin balance.

    ``currency_balance`` is a denormalized running total of the student's
    ledger rows. It is written only by
    ``apps.currency.services.atomic_update.update_balance``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    classroom = models.ForeignKey(
        Classroom,
        on_delete=models.CASCADE,
        related_name='students'
    )
    display_name = models.CharField(max_length=100)

    currency_balance = models.IntegerField(default=0, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'students'
        constraints = [
            models.CheckConstraint(
                condition=models.Q(currency_balance__gte=0),
                name='check_currency_balance_non_negative',
            ),
            models.UniqueConstraint(
                fields=['classroom', 'display_name'],
                name='unique_student_name_per_classroom',
            ),
        ]
        ordering = ['display_name']

    def save(self, *args, **kwargs):
        # Saving a loaded instance must not write back a stale balance
        if not self._state.adding:
            update_fields = kwargs.get('update_fields')
            if update_fields is None:
                update_fields = [
                    field.name for field in self._meta.concrete_fields
                    if not field.primary_key
                ]
            kwargs['update_fields'] = [
                name for name in update_fields if name != 'currency_balance'
            ]
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.display_name} ({self.currency_balance} coins)"
