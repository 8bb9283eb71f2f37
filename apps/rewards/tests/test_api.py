import pytest
from io import StringIO
from datetime import timedelta
from uuid import uuid4
from django.core.management import call_command
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.currency.services import cached_balance
from apps.rewards.models import RewardSource, RewardStatus


@pytest.mark.django_db
class TestSubmitReward:
    """Tests for POST /api/rewards/"""

    def test_submit_creates_and_grants(self, teacher_client, student):
        url = reverse('rewards:submit')
        response = teacher_client.post(
            url, {'student': str(student.id), 'coins_earned': 15}, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == 'completed'
        assert response.data['transaction_id'] is not None
        assert cached_balance(student.id) == 15

    def test_redelivery_returns_200(self, teacher_client, student):
        url = reverse('rewards:submit')
        payload = {'student': str(student.id), 'coins_earned': 15, 'id': str(uuid4())}
        teacher_client.post(url, payload, format='json')

        response = teacher_client.post(url, payload, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == payload['id']
        assert cached_balance(student.id) == 15

    def test_conflicting_redelivery_is_409(self, teacher_client, student):
        url = reverse('rewards:submit')
        source_id = str(uuid4())
        teacher_client.post(
            url, {'student': str(student.id), 'coins_earned': 15, 'id': source_id}, format='json'
        )

        response = teacher_client.post(
            url, {'student': str(student.id), 'coins_earned': 50, 'id': source_id}, format='json'
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'reward_conflict'

    def test_negative_coins_rejected(self, teacher_client, student):
        url = reverse('rewards:submit')
        response = teacher_client.post(
            url, {'student': str(student.id), 'coins_earned': -3}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not RewardSource.objects.exists()

    def test_unknown_student(self, teacher_client):
        url = reverse('rewards:submit')
        response = teacher_client.post(
            url, {'student': str(uuid4()), 'coins_earned': 3}, format='json'
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'student_not_found'

    def test_other_teachers_student(self, other_teacher_client, student):
        url = reverse('rewards:submit')
        response = other_teacher_client.post(
            url, {'student': str(student.id), 'coins_earned': 3}, format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not RewardSource.objects.exists()


@pytest.mark.django_db
class TestRewardDetail:
    """Tests for GET /api/rewards/{id}/"""

    def test_owner_sees_reward(self, teacher_client, pending_reward):
        url = reverse('rewards:detail', kwargs={'source_id': pending_reward.id})
        response = teacher_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'pending'
        assert response.data['student_name'] == 'Arnold'

    def test_other_teacher_forbidden(self, other_teacher_client, pending_reward):
        url = reverse('rewards:detail', kwargs={'source_id': pending_reward.id})
        response = other_teacher_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unknown_reward(self, teacher_client):
        url = reverse('rewards:detail', kwargs={'source_id': uuid4()})
        response = teacher_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestManualReview:
    """Tests for the staff-only review endpoints."""

    @pytest.fixture
    def failed_reward(self, student):
        return RewardSource.objects.create(
            student=student,
            coins_earned=8,
            status=RewardStatus.FAILED,
            attempts=3,
            last_error='StorageUnavailableError: connection reset by peer',
        )

    def test_failed_list(self, admin_client, failed_reward, pending_reward):
        response = admin_client.get(reverse('rewards:failed'))

        assert response.status_code == status.HTTP_200_OK
        assert [row['id'] for row in response.data['results']] == [str(failed_reward.id)]

    def test_failed_list_staff_only(self, teacher_client, failed_reward):
        response = teacher_client.get(reverse('rewards:failed'))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_retry_grants(self, admin_client, failed_reward, student):
        url = reverse('rewards:retry', kwargs={'source_id': failed_reward.id})
        response = admin_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['granted'] is True
        assert response.data['duplicate'] is False
        assert cached_balance(student.id) == 8

        response = admin_client.post(url)
        assert response.data['duplicate'] is True
        assert cached_balance(student.id) == 8

    def test_retry_unknown_reward(self, admin_client):
        url = reverse('rewards:retry', kwargs={'source_id': uuid4()})
        response = admin_client.post(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'reward_not_found'

    def test_status_counts(self, admin_client, failed_reward, pending_reward):
        response = admin_client.get(reverse('rewards:status'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'pending': 1, 'processing': 0, 'completed': 0, 'failed': 1}


@pytest.mark.django_db
class TestRecoveryCommand:
    """Tests for manage.py run_recovery_sweep"""

    def test_once_sweeps(self, pending_reward, student, settings):
        settings.REWARD_RECOVERY_STALE_AFTER_SECONDS = 0
        RewardSource.objects.filter(id=pending_reward.id).update(
            created_at=timezone.now() - timedelta(minutes=1)
        )
        out = StringIO()

        call_command('run_recovery_sweep', '--once', stdout=out)

        assert 'Scanned 1: 1 completed, 0 rescheduled, 0 failed' in out.getvalue()
        assert cached_balance(student.id) == 15

    def test_once_with_reconcile(self, student):
        out = StringIO()

        call_command('run_recovery_sweep', '--once', '--reconcile', stdout=out)

        assert 'Scanned 0' in out.getvalue()
        assert 'Balances OK for 1 student(s)' in out.getvalue()
