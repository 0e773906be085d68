import re
import typing as t
import uuid

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class EventdeskUserQueryset(models.QuerySet["EventdeskUser"]):
    """Queryset for EventdeskUser."""

    def organizers(self) -> t.Self:
        """Users allowed to own events."""
        return self.filter(role=EventdeskUser.Role.ORGANIZER)

    def participants(self) -> t.Self:
        """Users allowed to register for events."""
        return self.filter(role=EventdeskUser.Role.PARTICIPANT)


class EventdeskUserManager(UserManager["EventdeskUser"]):
    def get_queryset(self) -> EventdeskUserQueryset:
        """Get queryset for EventdeskUser."""
        return EventdeskUserQueryset(self.model, using=self._db)


class EventdeskUser(AbstractUser):
    class Role(models.TextChoices):
        PARTICIPANT = "participant", "Participant"
        ORGANIZER = "organizer", "Organizer"
        ADMIN = "admin", "Admin"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.PARTICIPANT, db_index=True)
    preferred_name = models.CharField(max_length=255, blank=True, help_text="Preferred name")
    organizer_name = models.CharField(max_length=255, blank=True, help_text="Public name of an organizing club")
    contact_number = models.CharField(max_length=20, blank=True)

    objects = EventdeskUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]

    @property
    def is_participant(self) -> bool:
        return self.role == self.Role.PARTICIPANT

    @property
    def is_organizer(self) -> bool:
        return self.role == self.Role.ORGANIZER

    @property
    def display_name(self) -> str:
        """Display name."""
        return self.get_display_name()

    def get_display_name(self) -> str:
        """Returns the organizer name, preferred name or full name, falling back to the username."""
        if self.is_organizer and self.organizer_name:
            return self.organizer_name
        return (
            self.preferred_name or self.get_full_name() or re.sub(r"(\W|_)+", " ", self.username.split("@")[0]).title()
        )
