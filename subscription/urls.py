from django.urls import path
from . import views

app_name = 'subscription'

urlpatterns = [
    path('plans/', views.SubscriptionPlanListView.as_view(), name='plan-list'),
    path('plans/<str:plan_id>/', views.SubscriptionPlanDetailView.as_view(), name='plan-detail'),
    path('request/', views.request_subscription, name='request-subscription'),
    path('me/', views.my_subscription, name='my-subscription'),
    path('me/cancel/', views.cancel_my_subscription, name='cancel-subscription'),

    path('sponsorships/', views.SponsorshipListView.as_view(), name='sponsorship-list'),
    path('sponsorships/request/', views.request_sponsorship, name='request-sponsorship'),

    path('admin/requests/', views.admin_subscription_requests, name='admin-subscription-requests'),
    path('admin/requests/<str:request_id>/process/', views.admin_process_subscription_request, name='admin-process-subscription-request'),
    path('admin/sponsorship-requests/', views.admin_sponsorship_requests, name='admin-sponsorship-requests'),
    path('admin/sponsorship-requests/<str:request_id>/process/', views.admin_process_sponsorship_request, name='admin-process-sponsorship-request'),
]
