from django.urls import path
from . import views

app_name = 'store'

urlpatterns = [
    # GET  /api/store/items/                        - Items for sale
    # POST /api/store/students/{id}/purchase/       - Buy an item
    # GET  /api/store/students/{id}/inventory/      - Owned items
    # POST /api/store/students/{id}/inventory/{item}/equip/ - Equip or unequip
    path('items/', views.catalog, name='catalog'),
    path('students/<uuid:student_id>/purchase/', views.purchase_item, name='purchase'),
    path('students/<uuid:student_id>/inventory/', views.inventory, name='inventory'),
    path(
        'students/<uuid:student_id>/inventory/<uuid:item_id>/equip/',
        views.equip_item,
        name='equip',
    ),
]
