from django.contrib import admin
from .models import Classroom, Student


class StudentInline(admin.TabularInline):
    model = Student
    extra = 0
    fields = ['display_name', 'currency_balance', 'created_at']
    readonly_fields = ['currency_balance', 'created_at']


@admin.register(Classroom)
class ClassroomAdmin(admin.ModelAdmin):
    list_display = ['name', 'teacher', 'created_at']
    search_fields = ['name', 'teacher__email']
    inlines = [StudentInline]


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    """
    Students are editable here except for their balance.

    Balances change only through ledger transactions; use the grant and
    deduct endpoints instead.
    """

    list_display = ['display_name', 'classroom', 'currency_balance', 'created_at']
    list_filter = ['classroom']
    search_fields = ['display_name', 'classroom__name']
    readonly_fields = ['currency_balance', 'created_at', 'updated_at']
