import base64
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from accounts.models import EventdeskUser
from events.models import Event, MerchandiseVariant, Registration
from events.service import payment_service, registration_service
from events.service.stock_ledger import Selection

PROOF_PAYLOAD = "data:image/png;base64," + base64.b64encode(b"\x89PNG\r\n\x1a\nreceipt").decode()


@pytest.fixture
def event(organizer: EventdeskUser) -> Event:
    return Event.objects.create(
        organizer=organizer,
        name="Robotics Workshop",
        kind=Event.Kind.NORMAL,
        location="Lab 3",
        start=timezone.now() + timedelta(days=7),
        registration_deadline=timezone.now() + timedelta(days=6),
        registration_fee=Decimal("5.00"),
    )


@pytest.fixture
def limited_event(organizer: EventdeskUser) -> Event:
    return Event.objects.create(organizer=organizer, name="Hackathon", kind=Event.Kind.TEAM, registration_limit=2)


@pytest.fixture
def merch_event(organizer: EventdeskUser) -> Event:
    return Event.objects.create(organizer=organizer, name="Club Merch", kind=Event.Kind.MERCHANDISE)


@pytest.fixture
def tshirt(merch_event: Event) -> MerchandiseVariant:
    return MerchandiseVariant.objects.create(
        event=merch_event, name="T-Shirt", size="M", color="Black", price=Decimal("15.00"), stock=1, position=0
    )


@pytest.fixture
def hoodie(merch_event: Event) -> MerchandiseVariant:
    return MerchandiseVariant.objects.create(
        event=merch_event, name="Hoodie", size="L", price=Decimal("30.00"), stock=5, position=1
    )


@pytest.fixture
def registration(participant: EventdeskUser, event: Event) -> Registration:
    """A registered participant holding an issued credential."""
    return registration_service.register(participant, event.pk)


@pytest.fixture
def merch_order(participant: EventdeskUser, merch_event: Event, tshirt: MerchandiseVariant) -> Registration:
    """A merchandise order for one T-shirt, without payment proof yet."""
    return registration_service.register(participant, merch_event.pk, selection=[Selection(tshirt.pk, 1)])


@pytest.fixture
def pending_order(merch_order: Registration, participant: EventdeskUser) -> Registration:
    """A merchandise order whose payment proof awaits review."""
    return payment_service.submit_proof(merch_order.pk, participant, PROOF_PAYLOAD)
