from django.urls import path
from . import views

urlpatterns = [
    path('recipients/<int:recipient_id>/candidates/', views.find_candidates_view, name='matching-candidates'),
    path('recipients/<int:recipient_id>/allocate/', views.allocate_view, name='matching-allocate'),
    path('batch/run/', views.run_batch_allocation_view, name='matching-batch-run'),
]
