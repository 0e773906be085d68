from ninja import ModelSchema

from .models import EventdeskUser


class MinimalUserSchema(ModelSchema):
    display_name: str

    class Meta:
        model = EventdeskUser
        fields = ["id", "email", "first_name", "last_name"]


class ParticipantContactSchema(ModelSchema):
    """Participant details shown to the organizer of an event."""

    display_name: str

    class Meta:
        model = EventdeskUser
        fields = ["id", "email", "first_name", "last_name", "contact_number"]
