import pytest
from uuid import uuid4
from django.urls import reverse
from rest_framework import status

from apps.currency.services import cached_balance, grant_coins
from apps.store.models import InventoryEntry
from apps.store.services import purchase


@pytest.mark.django_db
class TestCatalog:
    """Tests for GET /api/store/items/"""

    def test_lists_active_items(self, teacher_client, hat, cape, retired_item):
        url = reverse('store:catalog')
        response = teacher_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        names = {item['name'] for item in response.data}
        assert names == {'Wizard Hat', 'Cape'}


@pytest.mark.django_db
class TestPurchaseEndpoint:
    """Tests for POST /api/store/students/{id}/purchase/"""

    def test_purchase_success(self, teacher_client, student, hat):
        grant_coins(student_id=student.id, amount=100)

        url = reverse('store:purchase', kwargs={'student_id': student.id})
        response = teacher_client.post(url, {'item': str(hat.id)}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['success'] is True
        assert response.data['new_balance'] == 60
        assert response.data['item']['name'] == 'Wizard Hat'

    def test_purchase_insufficient_funds(self, teacher_client, student, hat):
        url = reverse('store:purchase', kwargs={'student_id': student.id})
        response = teacher_client.post(url, {'item': str(hat.id)}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'insufficient_funds'

    def test_purchase_already_owned(self, teacher_client, student, hat):
        grant_coins(student_id=student.id, amount=100)
        url = reverse('store:purchase', kwargs={'student_id': student.id})
        teacher_client.post(url, {'item': str(hat.id)}, format='json')

        response = teacher_client.post(url, {'item': str(hat.id)}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'already_owned'
        assert cached_balance(student.id) == 60

    def test_purchase_unknown_item(self, teacher_client, student):
        url = reverse('store:purchase', kwargs={'student_id': student.id})
        response = teacher_client.post(url, {'item': str(uuid4())}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'item_not_found'

    def test_purchase_other_teachers_student(self, other_teacher_client, student, hat):
        grant_coins(student_id=student.id, amount=100)
        url = reverse('store:purchase', kwargs={'student_id': student.id})
        response = other_teacher_client.post(url, {'item': str(hat.id)}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not InventoryEntry.objects.filter(student=student).exists()


@pytest.mark.django_db
class TestInventoryEndpoint:
    """Tests for GET /api/store/students/{id}/inventory/"""

    def test_inventory(self, teacher_client, student, hat):
        grant_coins(student_id=student.id, amount=100)
        teacher_client.post(
            reverse('store:purchase', kwargs={'student_id': student.id}),
            {'item': str(hat.id)},
            format='json',
        )

        response = teacher_client.get(reverse('store:inventory', kwargs={'student_id': student.id}))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['item']['name'] == 'Wizard Hat'

    def test_inventory_unknown_student(self, teacher_client):
        response = teacher_client.get(reverse('store:inventory', kwargs={'student_id': uuid4()}))

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestEquipEndpoint:
    """Tests for POST /api/store/students/{id}/inventory/{item}/equip/"""

    def test_equip_owned_item(self, teacher_client, student, hat):
        grant_coins(student_id=student.id, amount=100)
        purchase(student_id=student.id, item_id=hat.id)

        url = reverse('store:equip', kwargs={'student_id': student.id, 'item_id': hat.id})
        response = teacher_client.post(url, {'equipped': True}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_equipped'] is True
        assert InventoryEntry.objects.get(student=student, item=hat).is_equipped
        assert cached_balance(student.id) == 60

    def test_equip_item_not_owned(self, teacher_client, student, hat):
        url = reverse('store:equip', kwargs={'student_id': student.id, 'item_id': hat.id})
        response = teacher_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'not_owned'

    def test_equip_other_teachers_student(self, other_teacher_client, student, hat):
        grant_coins(student_id=student.id, amount=100)
        purchase(student_id=student.id, item_id=hat.id)

        url = reverse('store:equip', kwargs={'student_id': student.id, 'item_id': hat.id})
        response = other_teacher_client.post(url, {'equipped': True}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not InventoryEntry.objects.get(student=student, item=hat).is_equipped
