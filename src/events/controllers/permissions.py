from django.http import HttpRequest
from ninja_extra import ControllerBase
from ninja_extra.permissions import BasePermission

from accounts.models import EventdeskUser


class HasRole(BasePermission):
    """Allow authenticated users holding one of the given roles."""

    message = "You do not have the required role for this action."

    def __init__(self, *roles: EventdeskUser.Role) -> None:
        """Store the allowed roles."""
        self.roles = roles

    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        """Check the role of the authenticated user."""
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, "role", None) in self.roles)


IsParticipant = HasRole(EventdeskUser.Role.PARTICIPANT)
IsOrganizer = HasRole(EventdeskUser.Role.ORGANIZER)
