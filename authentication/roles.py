"""Role Resolver.

Each role kind answers ``has_capability``. A caller is resolved to exactly one
role per request; anything unrecognised resolves to ``DeniedRole``.
"""
import os

BUSINESS_MANAGEMENT = 'business_management'
FINANCIAL_DASHBOARD_REVENUE = 'financial_dashboard_revenue'
USER_MANAGEMENT = 'user_management'
REFERRAL_PROGRAM_MONITORING = 'referral_program_monitoring'

CAPABILITIES = (
    BUSINESS_MANAGEMENT,
    FINANCIAL_DASHBOARD_REVENUE,
    USER_MANAGEMENT,
    REFERRAL_PROGRAM_MONITORING,
)

CAPABILITY_LABELS = {
    BUSINESS_MANAGEMENT: 'Approve and manage businesses',
    FINANCIAL_DASHBOARD_REVENUE: 'View revenue and commissions',
    USER_MANAGEMENT: 'Manage user accounts',
    REFERRAL_PROGRAM_MONITORING: 'Monitor the referral program',
}


class Role:
    name = None

    def __init__(self, user=None):
        self.user = user

    def has_capability(self, capability):
        return False

    @property
    def capabilities(self):
        return [c for c in CAPABILITIES if self.has_capability(c)]

    def __repr__(self):
        return f'<{self.__class__.__name__}>'


class DeniedRole(Role):
    name = 'denied'


class SuperAdminRole(Role):
    name = 'super_admin'

    def has_capability(self, capability):
        return True


class AdminRole(Role):
    name = 'admin'

    def has_capability(self, capability):
        return capability in CAPABILITIES


class GrantedRole(Role):
    """Capabilities come from the account's ``roles_access`` list."""

    def __init__(self, user=None):
        super().__init__(user)
        self.granted = frozenset(getattr(user, 'roles_access', None) or [])

    def has_capability(self, capability):
        return capability in self.granted


class ManagerRole(GrantedRole):
    name = 'manager'


class SalesManagerRole(GrantedRole):
    name = 'sales_manager'


class SalespersonRole(Role):
    name = 'salesperson'


class EntityRole(Role):
    name = 'entity'


class UserRole(Role):
    name = 'user'


ROLE_CLASSES = {
    'ADMIN': AdminRole,
    'MANAGER': ManagerRole,
    'SALES_MANAGER': SalesManagerRole,
    'SALESPERSON': SalespersonRole,
    'COMPANY': EntityRole,
    'WHOLESALER': EntityRole,
    'SERVICE_PROVIDER': EntityRole,
    'USER': UserRole,
}


def super_admin_email():
    return os.getenv('SUPER_ADMIN_EMAIL', '').strip().lower()


def resolve_role(user):
    if user is None or not getattr(user, 'is_authenticated', False):
        return DeniedRole()
    if not user.is_active:
        return DeniedRole(user)

    configured = super_admin_email()
    if configured and (user.email or '').lower() == configured:
        return SuperAdminRole(user)
    if user.is_superuser:
        return SuperAdminRole(user)

    role_class = ROLE_CLASSES.get(user.role, DeniedRole)
    return role_class(user)


def authorize(user, capability):
    return resolve_role(user).has_capability(capability)
