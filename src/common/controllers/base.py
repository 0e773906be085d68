import typing as t

from ninja_extra import ControllerBase

from accounts.models import EventdeskUser


class UserAwareController(ControllerBase):
    def user(self) -> EventdeskUser:
        """Get the authenticated user for this request."""
        return t.cast(EventdeskUser, self.context.request.user)  # type: ignore[union-attr]
