from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
import uuid


MAX_ITEM_COST = 10000


class StoreItem(models.Model):
    """Catalog entry students can buy with coins."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    cost = models.PositiveIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(MAX_ITEM_COST)]
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'store_items'
        constraints = [
            models.CheckConstraint(
                condition=models.Q(cost__gt=0),
                name='check_store_item_cost_positive',
            ),
        ]
        ordering = ['cost', 'name']

    def __str__(self):
        return f"{self.name} ({self.cost} coins)"


class InventoryEntry(models.Model):
    """Ownership of one store item by one student."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student = models.ForeignKey(
        'classrooms.Student',
        on_delete=models.CASCADE,
        related_name='inventory'
    )
    item = models.ForeignKey(
        StoreItem,
        on_delete=models.PROTECT,
        related_name='owners'
    )
    is_equipped = models.BooleanField(default=False)
    acquired_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'student_inventory'
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'item'],
                name='unique_inventory_student_item',
            ),
        ]
        ordering = ['acquired_at']

    def __str__(self):
        return f"{self.student.display_name} owns {self.item.name}"
