from django.urls import path
from . import views

app_name = 'currency'

urlpatterns = [
    # POST /api/currency/students/{id}/grant/    - Teacher gives coins
    # POST /api/currency/students/{id}/deduct/   - Teacher takes coins
    # GET  /api/currency/students/{id}/balance/  - Cached vs ledger balance
    # GET  /api/currency/students/{id}/history/  - Ledger rows, oldest first
    # GET  /api/currency/classrooms/{id}/history/ - Classroom ledger rows, oldest first
    path('students/<uuid:student_id>/grant/', views.grant, name='grant'),
    path('students/<uuid:student_id>/deduct/', views.deduct, name='deduct'),
    path('students/<uuid:student_id>/balance/', views.balance, name='balance'),
    path('students/<uuid:student_id>/history/', views.transaction_history, name='history'),
    path(
        'classrooms/<uuid:classroom_id>/history/',
        views.classroom_transaction_history,
        name='classroom-history',
    ),
]
