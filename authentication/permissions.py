from rest_framework import permissions

from .roles import resolve_role, SuperAdminRole


def get_request_role(request):
    role = getattr(request, '_resolved_role', None)
    if role is None:
        role = resolve_role(request.user)
        request._resolved_role = role
    return role


class IsAdmin(permissions.BasePermission):
    def has_permission(self, request, view):
        return request.user and request.user.is_authenticated and (
            request.user.is_admin or isinstance(get_request_role(request), SuperAdminRole)
        )


class IsSalesManager(permissions.BasePermission):
    def has_permission(self, request, view):
        return request.user and request.user.is_authenticated and request.user.is_sales_manager


class IsSalesperson(permissions.BasePermission):
    def has_permission(self, request, view):
        return request.user and request.user.is_authenticated and request.user.is_salesperson


class IsSalesManagerOrAdmin(permissions.BasePermission):
    def has_permission(self, request, view):
        return IsAdmin().has_permission(request, view) or IsSalesManager().has_permission(request, view)


class IsEntityOwner(permissions.BasePermission):
    """Restricts access to company, wholesaler and service provider accounts"""
    def has_permission(self, request, view):
        return request.user and request.user.is_authenticated and request.user.is_entity


def HasCapability(capability):
    class CapabilityPermission(permissions.BasePermission):
        message = f'You do not have the {capability} capability.'

        def has_permission(self, request, view):
            if not (request.user and request.user.is_authenticated):
                return False
            return get_request_role(request).has_capability(capability)

    CapabilityPermission.__name__ = f'HasCapability_{capability}'
    return CapabilityPermission
