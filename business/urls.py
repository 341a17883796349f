from django.urls import path
from . import views

app_name = 'business'

urlpatterns = [
    path('signup/', views.EntitySignupView.as_view(), name='signup'),
    path('me/', views.MyBusinessView.as_view(), name='my-business'),
    path('me/branches/', views.BranchListView.as_view(), name='branch-list'),
    path('me/branches/<str:branch_id>/', views.BranchDetailView.as_view(), name='branch-detail'),
    path('me/branches/<str:branch_id>/media/', views.upload_branch_media, name='branch-media-upload'),

    path('salesperson/entities/', views.SalespersonEntityView.as_view(), name='salesperson-entities'),

    path('admin/', views.AdminBusinessListView.as_view(), name='admin-business-list'),
    path('admin/pending/', views.pending_businesses, name='admin-pending-businesses'),
    path('admin/<str:business_id>/approve/', views.approve_business, name='admin-approve-business'),
    path('admin/<str:business_id>/reject/', views.reject_business, name='admin-reject-business'),
    path('admin/<str:business_id>/toggle-status/', views.toggle_business_status, name='admin-toggle-business-status'),
]
