import typing as t
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from ninja import Field, ModelSchema, Schema
from pydantic import StringConstraints, field_validator

from accounts.schema import MinimalUserSchema, ParticipantContactSchema
from events.models import Event, MerchandiseVariant, Registration, RegistrationItem


class MinimalEventSchema(ModelSchema):
    class Meta:
        model = Event
        fields = ["id", "name", "kind", "start", "end", "location"]


class VariantSchema(ModelSchema):
    class Meta:
        model = MerchandiseVariant
        fields = ["id", "name", "size", "color", "price"]


class RegistrationItemSchema(ModelSchema):
    variant: VariantSchema
    line_total: Decimal

    class Meta:
        model = RegistrationItem
        fields = ["quantity"]


class RegistrationSchema(ModelSchema):
    """A participant's own registration."""

    event: MinimalEventSchema
    items: list[RegistrationItemSchema]
    requires_payment: bool
    has_payment_proof: bool

    class Meta:
        model = Registration
        fields = [
            "id",
            "ticket_id",
            "status",
            "payment_status",
            "team_name",
            "custom_form_data",
            "qr_code",
            "amount_paid",
            "payment_remarks",
            "attended",
            "attendance_marked_at",
            "created_at",
        ]

    @staticmethod
    def resolve_items(obj: Registration) -> list[RegistrationItem]:
        return list(obj.items.all())

    @staticmethod
    def resolve_has_payment_proof(obj: Registration) -> bool:
        return bool(obj.payment_proof)


class OrganizerRegistrationSchema(ModelSchema):
    """A registration as seen by the event's organizer."""

    participant: ParticipantContactSchema
    items: list[RegistrationItemSchema]
    has_payment_proof: bool

    class Meta:
        model = Registration
        fields = [
            "id",
            "ticket_id",
            "status",
            "payment_status",
            "team_name",
            "custom_form_data",
            "amount_paid",
            "payment_remarks",
            "payment_approved_at",
            "attended",
            "attendance_marked_at",
            "attendance_method",
            "attendance_notes",
            "email_sent",
            "created_at",
        ]

    @staticmethod
    def resolve_items(obj: Registration) -> list[RegistrationItem]:
        return list(obj.items.all())

    @staticmethod
    def resolve_has_payment_proof(obj: Registration) -> bool:
        return bool(obj.payment_proof)


class SelectionItemSchema(Schema):
    variant_id: UUID
    quantity: int = Field(1, ge=1, le=100)


class RegisterSchema(Schema):
    event_id: UUID
    team_name: t.Annotated[str, StringConstraints(strip_whitespace=True, max_length=150)] = ""
    custom_form_data: dict[str, t.Any] = Field(default_factory=dict)
    merchandise_selection: list[SelectionItemSchema] = Field(default_factory=list)


class RegisterResponseSchema(Schema):
    registration: RegistrationSchema
    message: str


class PaymentProofSchema(Schema):
    payment_proof: str = Field(..., min_length=1, description="Base64 image, optionally as a data URL.")


class PaymentProofURLSchema(Schema):
    url: str
    type: t.Literal["signed-url", "embedded"]
    expires_in: int | None = None


class PaymentDecisionSchema(Schema):
    action: t.Literal["approve", "reject"]
    remarks: t.Annotated[str, StringConstraints(strip_whitespace=True, max_length=1000)] | None = None


class ScanSchema(Schema):
    qr_data: str = Field(..., min_length=1, max_length=4096)
    method: t.Literal["camera_scan", "image_upload"] = "camera_scan"


class ScanResultSchema(Schema):
    ticket_id: str
    participant: MinimalUserSchema
    event: MinimalEventSchema
    attended: bool
    attendance_marked_at: datetime | None
    attendance_method: str


class AttendanceOverrideSchema(Schema):
    attended: bool
    notes: t.Annotated[str, StringConstraints(strip_whitespace=True, max_length=1000)] | None = None

    @field_validator("notes")
    @classmethod
    def empty_notes_to_none(cls, value: str | None) -> str | None:
        return value or None
