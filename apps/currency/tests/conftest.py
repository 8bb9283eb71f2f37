import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.classrooms.models import Classroom, Student


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def ledger_teacher(db):
    """Create and return a teacher who owns a classroom."""
    return User.objects.create_user(
        email='teacher@example.com',
        password='TestPass123!',
        display_name='Ms Frizzle',
    )


@pytest.fixture
def other_teacher(db):
    """Create and return a teacher with no students."""
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        display_name='Mr Other',
    )


@pytest.fixture
def admin_user(db):
    """Create and return a staff user."""
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        is_staff=True,
    )


@pytest.fixture
def classroom(ledger_teacher):
    """Create a classroom owned by ledger_teacher."""
    return Classroom.objects.create(name='Room 42', teacher=ledger_teacher)


@pytest.fixture
def student(classroom):
    """Create a student with a zero balance."""
    return Student.objects.create(classroom=classroom, display_name='Arnold')


@pytest.fixture
def second_student(classroom):
    """Create another student in the same classroom."""
    return Student.objects.create(classroom=classroom, display_name='Wanda')


@pytest.fixture
def teacher_client(api_client, ledger_teacher):
    """Return API client authenticated as the owning teacher."""
    refresh = RefreshToken.for_user(ledger_teacher)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def other_teacher_client(api_client, other_teacher):
    """Return API client authenticated as a teacher of another classroom."""
    refresh = RefreshToken.for_user(other_teacher)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def admin_client(api_client, admin_user):
    """Return API client authenticated as staff."""
    refresh = RefreshToken.for_user(admin_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
