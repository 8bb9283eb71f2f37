"""
Permission classes shared by every app that acts on a student.

A teacher may only touch students in classrooms they own. Staff users
(administrators) may act on any student.
"""
from rest_framework.permissions import BasePermission

from .models import Classroom, Student


def can_manage_student(user, student):
    """True when user is staff or teaches the student's classroom."""
    return user.is_staff or student.classroom.teacher_id == user.id


class CanManageStudent(BasePermission):
    """
    Allow access when the ``student_id`` URL kwarg names a student in one of
    the requesting teacher's classrooms.

    Unknown students pass this check so the view can answer 404 itself.
    """

    message = 'You can only manage students in your own classrooms.'

    def has_permission(self, request, view):
        if request.user.is_staff:
            return True

        student_id = view.kwargs.get('student_id')
        if student_id is None:
            return True

        try:
            student = Student.objects.select_related('classroom').get(id=student_id)
        except Student.DoesNotExist:
            return True

        return can_manage_student(request.user, student)


class CanManageClassroom(BasePermission):
    """
    Allow access when the ``classroom_id`` URL kwarg names a classroom the
    requesting teacher owns. Unknown classrooms pass so the view answers 404.
    """

    message = 'You can only view your own classrooms.'

    def has_permission(self, request, view):
        if request.user.is_staff:
            return True

        classroom_id = view.kwargs.get('classroom_id')
        if classroom_id is None:
            return True

        teacher_id = (
            Classroom.objects
            .filter(id=classroom_id)
            .values_list('teacher_id', flat=True)
            .first()
        )
        return teacher_id is None or teacher_id == request.user.id


class IsStaffUser(BasePermission):
    """Administrators only (manual review queues, audits)."""

    message = 'Administrator access required.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_staff)
