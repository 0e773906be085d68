import typing as t
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from common.models import TimeStampedModel

from .event import Event, MerchandiseVariant

if t.TYPE_CHECKING:
    from accounts.models import EventdeskUser


class RegistrationQuerySet(models.QuerySet["Registration"]):
    def admitted(self) -> t.Self:
        """Registrations that hold a capacity slot."""
        return self.filter(status__in=Registration.ADMITTED_STATUSES)

    def for_participant(self, user: "EventdeskUser") -> t.Self:
        return self.filter(participant=user)

    def with_items(self) -> t.Self:
        return self.select_related("event", "participant").prefetch_related("items__variant")

    def awaiting_payment_review(self) -> t.Self:
        """Registrations with an uploaded proof and a payment status."""
        return self.exclude(payment_proof="").filter(payment_status__isnull=False)


class Registration(TimeStampedModel):
    class Status(models.TextChoices):
        REGISTERED = "registered", "Registered"
        WAITLISTED = "waitlisted", "Waitlisted"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"
        REJECTED = "rejected", "Rejected"

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    class AttendanceMethod(models.TextChoices):
        CAMERA_SCAN = "camera_scan", "Camera scan"
        IMAGE_UPLOAD = "image_upload", "Image upload"
        MANUAL = "manual", "Manual"

    ADMITTED_STATUSES = (Status.REGISTERED, Status.COMPLETED)
    CLOSED_STATUSES = (Status.CANCELLED, Status.REJECTED)

    participant = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="registrations")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registrations")
    ticket_id = models.CharField(max_length=64, unique=True, editable=False)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.REGISTERED, db_index=True)
    team_name = models.CharField(max_length=150, blank=True, default="")
    custom_form_data = models.JSONField(default=dict, blank=True)

    # credential
    credential_payload = models.TextField(blank=True, default="")
    qr_code = models.TextField(blank=True, default="", help_text="PNG data URL of the encoded credential.")
    email_sent = models.BooleanField(default=False)

    # payment review, merchandise events only
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, null=True, blank=True, db_index=True
    )
    payment_proof = models.TextField(blank=True, default="", help_text="Opaque object storage reference.")
    payment_remarks = models.TextField(blank=True, default="")
    payment_approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    payment_approved_at = models.DateTimeField(null=True, blank=True)
    amount_paid = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    # attendance
    attended = models.BooleanField(default=False)
    attendance_marked_at = models.DateTimeField(null=True, blank=True)
    attendance_marked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    attendance_method = models.CharField(max_length=20, choices=AttendanceMethod.choices, blank=True, default="")
    attendance_notes = models.TextField(blank=True, default="")

    objects = RegistrationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["participant", "event"], name="unique_registration_per_participant"),
        ]

    def __str__(self) -> str:
        return f"{self.ticket_id} ({self.status})"

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Validate fields, leaving uniqueness to the database.

        Concurrent inserts must fail on the constraints, so the check-then-insert
        done by ``validate_unique`` is skipped here.
        """
        self.full_clean(validate_unique=False, validate_constraints=False)
        models.Model.save(self, *args, **kwargs)

    @property
    def has_credential(self) -> bool:
        return bool(self.credential_payload)

    @property
    def requires_payment(self) -> bool:
        """Merchandise orders wait for an approved payment before a credential is issued."""
        return self.event.is_merchandise and self.payment_status != self.PaymentStatus.APPROVED

    def order_total(self) -> Decimal:
        return sum((item.line_total for item in self.items.all()), Decimal("0.00"))


class RegistrationItem(TimeStampedModel):
    """A merchandise line item selected at registration time."""

    registration = models.ForeignKey(Registration, on_delete=models.CASCADE, related_name="items")
    variant = models.ForeignKey(MerchandiseVariant, on_delete=models.PROTECT, related_name="line_items")
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ["position"]

    def __str__(self) -> str:
        return f"{self.quantity} x {self.variant.name}"

    @property
    def line_total(self) -> Decimal:
        return self.variant.price * self.quantity
