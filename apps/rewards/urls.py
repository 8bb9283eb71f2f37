from django.urls import path
from . import views

app_name = 'rewards'

urlpatterns = [
    # POST /api/rewards/                 - Record a quiz reward and grant it
    # GET  /api/rewards/failed/          - Manual review queue (staff)
    # GET  /api/rewards/status/          - Counts per status (staff)
    # GET  /api/rewards/{id}/            - Reward state
    # POST /api/rewards/{id}/retry/      - Grant after review (staff)
    path('', views.submit, name='submit'),
    path('failed/', views.failed_rewards, name='failed'),
    path('status/', views.recovery_status, name='status'),
    path('<uuid:source_id>/', views.reward_detail, name='detail'),
    path('<uuid:source_id>/retry/', views.retry_reward, name='retry'),
]
