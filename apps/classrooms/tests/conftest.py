import pytest
from apps.accounts.models import User
from apps.classrooms.models import Classroom, Student


@pytest.fixture
def teacher(db):
    return User.objects.create_user(email='teacher@example.com', password='TestPass123!')


@pytest.fixture
def other_teacher(db):
    return User.objects.create_user(email='other@example.com', password='TestPass123!')


@pytest.fixture
def staff(db):
    return User.objects.create_user(email='staff@example.com', password='TestPass123!', is_staff=True)


@pytest.fixture
def student(teacher):
    classroom = Classroom.objects.create(name='Room 1', teacher=teacher)
    return Student.objects.create(classroom=classroom, display_name='Ralphie')
