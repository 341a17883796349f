from django.urls import path
from . import views

app_name = 'wallet'

urlpatterns = [
    path('admin/summary/', views.wallet_summary, name='admin-wallet-summary'),
    path('admin/transactions/', views.WalletTransactionListView.as_view(), name='admin-wallet-transactions'),
    path('admin/commissions/', views.CommissionListView.as_view(), name='admin-commissions'),
    path('admin/commissions/<str:commission_id>/mark-paid/', views.mark_commission_paid, name='admin-mark-commission-paid'),
    path('salesperson/commissions/', views.salesperson_commissions, name='salesperson-commissions'),
    path('sales-manager/commissions/', views.sales_manager_commissions, name='sales-manager-commissions'),
]
