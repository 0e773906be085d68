import typing as t
from datetime import datetime
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from common.models import TimeStampedModel

if t.TYPE_CHECKING:
    from accounts.models import EventdeskUser


class EventQuerySet(models.QuerySet["Event"]):
    def organized_by(self, user: "EventdeskUser") -> t.Self:
        """Return the events owned by the given organizer."""
        return self.filter(organizer=user)


class Event(TimeStampedModel):
    class Kind(models.TextChoices):
        NORMAL = "normal", "Normal"
        TEAM = "team", "Team"
        MERCHANDISE = "merchandise", "Merchandise"

    organizer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="organized_events")
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")
    location = models.CharField(max_length=255, blank=True, default="")
    kind = models.CharField(max_length=20, choices=Kind.choices, default=Kind.NORMAL, db_index=True)
    start = models.DateTimeField(null=True, blank=True)
    end = models.DateTimeField(null=True, blank=True)
    registration_limit = models.PositiveIntegerField(
        null=True, blank=True, help_text="Maximum number of admitted registrations. Empty means unlimited."
    )
    registration_deadline = models.DateTimeField(null=True, blank=True)
    registrations_closed = models.BooleanField(default=False)
    registration_fee = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00"), validators=[MinValueValidator(Decimal("0"))]
    )
    registered_participants = models.ManyToManyField(
        settings.AUTH_USER_MODEL, related_name="joined_events", blank=True
    )

    objects = EventQuerySet.as_manager()

    class Meta:
        ordering = ["-start", "name"]

    def __str__(self) -> str:
        return self.name

    @property
    def is_merchandise(self) -> bool:
        return self.kind == self.Kind.MERCHANDISE

    def is_registration_open(self, now: datetime | None = None) -> bool:
        """Whether the event still accepts registrations."""
        if self.registrations_closed:
            return False
        if self.registration_deadline is None:
            return True
        return (now or timezone.now()) <= self.registration_deadline


class MerchandiseVariant(TimeStampedModel):
    """A purchasable variant of a merchandise event (e.g. a T-shirt size and colour)."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="variants")
    name = models.CharField(max_length=150)
    size = models.CharField(max_length=20, blank=True, default="")
    color = models.CharField(max_length=50, blank=True, default="")
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal("0"))])
    stock = models.PositiveIntegerField(default=0)
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ["position", "created_at"]
        constraints = [
            models.CheckConstraint(condition=Q(stock__gte=0), name="merchandise_variant_stock_non_negative"),
        ]

    def __str__(self) -> str:
        label = " / ".join(part for part in (self.name, self.size, self.color) if part)
        return f"{label} ({self.stock} left)"
