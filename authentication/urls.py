from django.urls import path
from . import views

app_name = 'auth'

urlpatterns = [
    path('register/', views.UserRegistrationView.as_view(), name='register'),
    path('login/', views.login_view, name='login'),
    path('logout/', views.logout_view, name='logout'),
    path('token/refresh/', views.RefreshTokenView.as_view(), name='token-refresh'),
    path('profile/', views.UserProfileView.as_view(), name='profile'),
    path('check-role/', views.check_user_role_view, name='check-role'),
    path('forgot-password/', views.admin_forgot_password, name='forgot-password'),
    path('reset-password/', views.admin_reset_password, name='reset-password'),

    path('admin/access-roles/', views.access_roles_view, name='admin-access-roles'),
    path('admin/users/', views.AdminUserListView.as_view(), name='admin-users-list'),
    path('admin/users/<str:user_id>/activate/', views.admin_activate_user, name='admin-activate-user'),
    path('admin/users/<str:user_id>/deactivate/', views.admin_deactivate_user, name='admin-deactivate-user'),
    path('admin/managers/create/', views.ManagerCreateView.as_view(), name='admin-create-manager'),
    path('admin/sales-managers/create/', views.SalesManagerCreateView.as_view(), name='admin-create-sales-manager'),

    path('salespersons/create/', views.SalespersonCreateView.as_view(), name='create-salesperson'),
    path('sales-manager/salespersons/', views.sales_manager_salespersons, name='sales-manager-salespersons'),
]
