from django.urls import path
from . import views

app_name = 'referral'

urlpatterns = [
    path('apply/', views.apply_referral_code, name='apply'),
    path('me/', views.my_referrals, name='my-referrals'),
    path('admin/', views.ReferralListView.as_view(), name='admin-referral-list'),
    path('vouchers/', views.VoucherListView.as_view(), name='voucher-list'),
    path('vouchers/mine/', views.my_vouchers, name='my-vouchers'),
    path('vouchers/<str:voucher_id>/buy/', views.buy_voucher, name='buy-voucher'),
]
