import pytest
from types import SimpleNamespace
from uuid import uuid4
from django.db import IntegrityError

from apps.classrooms.models import Student
from apps.classrooms.permissions import CanManageStudent, IsStaffUser, can_manage_student
from apps.currency.services import find_balance_divergences, grant_coins


def make_request(user):
    return SimpleNamespace(user=user)


def make_view(**kwargs):
    return SimpleNamespace(kwargs=kwargs)


@pytest.mark.django_db
class TestCanManageStudent:
    """Tests for CanManageStudent permission."""

    def test_owner_allowed(self, teacher, student):
        permission = CanManageStudent()
        assert permission.has_permission(make_request(teacher), make_view(student_id=student.id))

    def test_other_teacher_denied(self, other_teacher, student):
        permission = CanManageStudent()
        assert not permission.has_permission(make_request(other_teacher), make_view(student_id=student.id))

    def test_staff_allowed(self, staff, student):
        assert can_manage_student(staff, student)

    def test_unknown_student_passes_through(self, other_teacher):
        """The view answers 404 for unknown students."""
        permission = CanManageStudent()
        assert permission.has_permission(make_request(other_teacher), make_view(student_id=uuid4()))


@pytest.mark.django_db
class TestIsStaffUser:
    """Tests for IsStaffUser permission."""

    def test_staff(self, staff):
        assert IsStaffUser().has_permission(make_request(staff), make_view())

    def test_teacher(self, teacher):
        assert not IsStaffUser().has_permission(make_request(teacher), make_view())


@pytest.mark.django_db
class TestStudentConstraints:
    """Database constraints on students."""

    def test_negative_balance_rejected(self, student):
        with pytest.raises(IntegrityError):
            Student.objects.filter(id=student.id).update(currency_balance=-1)

    def test_duplicate_name_in_classroom_rejected(self, student):
        with pytest.raises(IntegrityError):
            Student.objects.create(classroom=student.classroom, display_name='Ralphie')


@pytest.mark.django_db
class TestStudentSave:
    """Saving a student never writes its cached balance."""

    def test_stale_instance_keeps_newer_balance(self, student):
        stale = Student.objects.get(id=student.id)
        grant_coins(student_id=student.id, amount=40)

        stale.display_name = 'Ralphie P.'
        stale.save()

        student.refresh_from_db()
        assert student.display_name == 'Ralphie P.'
        assert student.currency_balance == 40
        assert find_balance_divergences() == []

    def test_explicit_update_fields_drop_balance(self, student):
        stale = Student.objects.get(id=student.id)
        grant_coins(student_id=student.id, amount=15)

        stale.currency_balance = 999
        stale.save(update_fields=['currency_balance'])

        student.refresh_from_db()
        assert student.currency_balance == 15

    def test_new_student_starts_at_zero(self, student):
        other = Student(classroom=student.classroom, display_name='Wanda')
        other.save()

        other.refresh_from_db()
        assert other.currency_balance == 0
