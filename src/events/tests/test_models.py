from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.utils import timezone

from accounts.models import EventdeskUser
from events.models import Event, MerchandiseVariant, Registration

pytestmark = pytest.mark.django_db


class TestEvent:
    def test_registration_open_without_deadline(self, limited_event: Event) -> None:
        assert limited_event.is_registration_open() is True

    def test_registration_open_until_deadline(self, event: Event) -> None:
        deadline = event.registration_deadline
        assert deadline is not None

        assert event.is_registration_open(deadline) is True
        assert event.is_registration_open(deadline + timedelta(seconds=1)) is False

    def test_closed_flag_wins(self, event: Event) -> None:
        event.registrations_closed = True

        assert event.is_registration_open(timezone.now()) is False

    def test_organized_by(self, event: Event, organizer: EventdeskUser, other_organizer: EventdeskUser) -> None:
        assert list(Event.objects.organized_by(organizer)) == [event]
        assert list(Event.objects.organized_by(other_organizer)) == []

    def test_negative_fee_is_rejected(self, organizer: EventdeskUser) -> None:
        with pytest.raises(ValidationError):
            Event.objects.create(organizer=organizer, name="Bad", registration_fee=Decimal("-1.00"))


class TestMerchandiseVariant:
    def test_stock_cannot_go_negative(self, tshirt: MerchandiseVariant) -> None:
        with pytest.raises(IntegrityError):
            MerchandiseVariant.objects.filter(pk=tshirt.pk).update(stock=-1)


class TestRegistration:
    def test_one_registration_per_participant(self, registration: Registration) -> None:
        with pytest.raises(IntegrityError):
            Registration.objects.create(
                participant=registration.participant, event=registration.event, ticket_id="TKT-0-SECOND000"
            )

    def test_order_total(self, merch_order: Registration, hoodie: MerchandiseVariant) -> None:
        merch_order.items.create(variant=hoodie, quantity=2, position=1)

        assert merch_order.order_total() == Decimal("75.00")

    def test_requires_payment(self, merch_order: Registration, registration: Registration) -> None:
        assert merch_order.requires_payment is True
        assert registration.requires_payment is False

        merch_order.payment_status = Registration.PaymentStatus.APPROVED
        assert merch_order.requires_payment is False

    def test_queryset_helpers(
        self, registration: Registration, pending_order: Registration, participant: EventdeskUser
    ) -> None:
        assert set(Registration.objects.admitted()) == {registration, pending_order}
        assert list(Registration.objects.awaiting_payment_review()) == [pending_order]
        assert set(Registration.objects.for_participant(participant)) == {registration, pending_order}
