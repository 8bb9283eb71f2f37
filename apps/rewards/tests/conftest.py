import pytest
from unittest.mock import patch
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.classrooms.models import Classroom, Student
from apps.currency.exceptions import StorageUnavailableError
from apps.currency.services import update_balance
from apps.rewards.models import RewardSource
from apps.rewards.services import RecoveryTaskManager


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def reward_teacher(db):
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
def classroom(reward_teacher):
    """Create a classroom owned by reward_teacher."""
    return Classroom.objects.create(name='Room 42', teacher=reward_teacher)


@pytest.fixture
def student(classroom):
    """Create a student with a zero balance."""
    return Student.objects.create(classroom=classroom, display_name='Arnold')


@pytest.fixture
def second_student(classroom):
    """Create another student in the same classroom."""
    return Student.objects.create(classroom=classroom, display_name='Wanda')


@pytest.fixture
def teacher_client(api_client, reward_teacher):
    """Return API client authenticated as the owning teacher."""
    refresh = RefreshToken.for_user(reward_teacher)
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


@pytest.fixture
def reward_manager(settings):
    """Recovery manager with the default retry policy."""
    settings.REWARD_RECOVERY_MAX_ATTEMPTS = 3
    settings.REWARD_RECOVERY_BASE_DELAY_SECONDS = 5
    settings.REWARD_RECOVERY_STALE_AFTER_SECONDS = 300
    return RecoveryTaskManager()


@pytest.fixture
def pending_reward(student):
    """A 15 coin reward that has not been attempted yet."""
    return RewardSource.objects.create(student=student, coins_earned=15)


@pytest.fixture
def flaky_update_balance():
    """
    Patch the ledger writer used by grant_reward to fail with storage errors.

    ``failures`` is how many calls fail before the real writer runs; None
    fails forever.
    """
    real = update_balance

    def install(failures):
        calls = {'count': 0}

        def flaky(**kwargs):
            calls['count'] += 1
            if failures is None or calls['count'] <= failures:
                raise StorageUnavailableError('connection reset by peer')
            return real(**kwargs)

        return patch('apps.rewards.services.reward_processing.update_balance', side_effect=flaky)

    return install
