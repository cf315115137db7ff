from rest_framework import permissions


class IsMenuAdmin(permissions.BasePermission):
    """
    Only staff users (menu administrators) may use the endpoint.

    Applies to: PromotionViewSet.
    """
    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and (request.user.is_staff or request.user.is_superuser)
        )


class IsMenuAdminOrReadOnly(permissions.BasePermission):
    """
    Read access for any authenticated user, writes for staff only.

    Applies to: ProductViewSet (cashiers browse the catalog, admins maintain it).
    """
    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user.is_staff or request.user.is_superuser)
