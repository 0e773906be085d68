import typing as t

import orjson
import pytest
from django.test.client import Client
from django.urls import reverse

from events.models import Event, MerchandiseVariant, Registration
from events.tests.conftest import PROOF_PAYLOAD

pytestmark = pytest.mark.django_db


def post_json(client: Client, url: str, data: dict[str, t.Any]) -> t.Any:
    return client.post(url, data=orjson.dumps(data), content_type="application/json")


class TestRegister:
    def test_register_for_event(self, participant_client: Client, event: Event) -> None:
        response = post_json(
            participant_client,
            reverse("api:register"),
            {"event_id": str(event.pk), "custom_form_data": {"tshirt": "M"}},
        )

        assert response.status_code == 201, response.content
        data = response.json()
        assert data["message"] == "Registration successful. Your ticket has been issued."
        registration = data["registration"]
        assert registration["status"] == "registered"
        assert registration["event"]["id"] == str(event.pk)
        assert registration["custom_form_data"] == {"tshirt": "M"}
        assert registration["qr_code"].startswith("data:image/png;base64,")
        assert registration["requires_payment"] is False
        assert registration["ticket_id"].startswith("TKT-")

    def test_waitlisted(self, participant_client: Client, limited_event: Event) -> None:
        limited_event.registration_limit = 0
        limited_event.save()

        response = post_json(
            participant_client, reverse("api:register"), {"event_id": str(limited_event.pk), "team_name": " Bots "}
        )

        assert response.status_code == 201
        assert response.json()["message"] == "The event is full. You have been added to the waitlist."
        assert response.json()["registration"]["team_name"] == "Bots"

    def test_merchandise_order(
        self,
        participant_client: Client,
        merch_event: Event,
        tshirt: MerchandiseVariant,
        hoodie: MerchandiseVariant,
    ) -> None:
        response = post_json(
            participant_client,
            reverse("api:register"),
            {
                "event_id": str(merch_event.pk),
                "merchandise_selection": [
                    {"variant_id": str(tshirt.pk), "quantity": 1},
                    {"variant_id": str(hoodie.pk), "quantity": 2},
                ],
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Order placed. Upload your payment proof to complete the purchase."
        assert data["registration"]["requires_payment"] is True
        assert data["registration"]["qr_code"] == ""
        assert [item["quantity"] for item in data["registration"]["items"]] == [1, 2]
        assert [item["variant"]["name"] for item in data["registration"]["items"]] == ["T-Shirt", "Hoodie"]

    def test_insufficient_stock(
        self, participant_client: Client, merch_event: Event, tshirt: MerchandiseVariant
    ) -> None:
        selection = [{"variant_id": str(tshirt.pk), "quantity": 3}]
        response = post_json(
            participant_client,
            reverse("api:register"),
            {"event_id": str(merch_event.pk), "merchandise_selection": selection},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "insufficient_stock"
        assert response.json()["available"] == 1

    def test_duplicate(self, participant_client: Client, registration: Registration) -> None:
        response = post_json(participant_client, reverse("api:register"), {"event_id": str(registration.event_id)})

        assert response.status_code == 400
        assert response.json()["error"] == "duplicate_registration"

    def test_unknown_event(self, participant_client: Client) -> None:
        response = post_json(
            participant_client, reverse("api:register"), {"event_id": "00000000-0000-0000-0000-000000000000"}
        )

        assert response.status_code == 404
        assert response.json()["error"] == "event_not_found"

    def test_organizers_cannot_register(self, organizer_client: Client, event: Event) -> None:
        response = post_json(organizer_client, reverse("api:register"), {"event_id": str(event.pk)})

        assert response.status_code == 403

    def test_anonymous(self, client: Client, event: Event) -> None:
        response = post_json(client, reverse("api:register"), {"event_id": str(event.pk)})

        assert response.status_code == 401


class TestReadEndpoints:
    def test_my_registrations(self, participant_client: Client, registration: Registration) -> None:
        response = participant_client.get(reverse("api:my_registrations"))

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [str(registration.pk)]

    def test_by_ticket(self, participant_client: Client, registration: Registration) -> None:
        response = participant_client.get(
            reverse("api:registration_by_ticket", kwargs={"ticket_id": registration.ticket_id})
        )

        assert response.status_code == 200
        assert response.json()["id"] == str(registration.pk)

    def test_by_ticket_of_someone_else(self, other_participant_client: Client, registration: Registration) -> None:
        response = other_participant_client.get(
            reverse("api:registration_by_ticket", kwargs={"ticket_id": registration.ticket_id})
        )

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"


class TestCancel:
    def test_cancel(self, participant_client: Client, registration: Registration) -> None:
        response = participant_client.post(
            reverse("api:cancel_registration", kwargs={"registration_id": registration.pk})
        )

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    def test_cancel_twice(self, participant_client: Client, registration: Registration) -> None:
        url = reverse("api:cancel_registration", kwargs={"registration_id": registration.pk})
        participant_client.post(url)

        response = participant_client.post(url)

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_status"

    def test_cancel_someone_elses(self, other_participant_client: Client, registration: Registration) -> None:
        response = other_participant_client.post(
            reverse("api:cancel_registration", kwargs={"registration_id": registration.pk})
        )

        assert response.status_code == 403


class TestPaymentProof:
    def test_submit(self, participant_client: Client, merch_order: Registration) -> None:
        response = post_json(
            participant_client,
            reverse("api:submit_payment_proof", kwargs={"registration_id": merch_order.pk}),
            {"payment_proof": PROOF_PAYLOAD},
        )

        assert response.status_code == 200
        assert response.json()["payment_status"] == "pending"
        assert response.json()["has_payment_proof"] is True

    def test_submit_garbage(self, participant_client: Client, merch_order: Registration) -> None:
        response = post_json(
            participant_client,
            reverse("api:submit_payment_proof", kwargs={"registration_id": merch_order.pk}),
            {"payment_proof": "%%%not-base64%%%"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_payment_proof"

    def test_submit_for_normal_event(self, participant_client: Client, registration: Registration) -> None:
        response = post_json(
            participant_client,
            reverse("api:submit_payment_proof", kwargs={"registration_id": registration.pk}),
            {"payment_proof": PROOF_PAYLOAD},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "wrong_event_type"

    def test_proof_url_for_owner(self, participant_client: Client, pending_order: Registration) -> None:
        response = participant_client.get(
            reverse("api:payment_proof_url", kwargs={"registration_id": pending_order.pk})
        )

        assert response.status_code == 200
        data = response.json()
        assert data["type"] == "signed-url"
        assert pending_order.payment_proof in data["url"]
        assert data["expires_in"] > 0

    def test_proof_url_for_organizer(self, organizer_client: Client, pending_order: Registration) -> None:
        response = organizer_client.get(reverse("api:payment_proof_url", kwargs={"registration_id": pending_order.pk}))

        assert response.status_code == 200

    def test_proof_url_for_stranger(self, other_organizer_client: Client, pending_order: Registration) -> None:
        response = other_organizer_client.get(
            reverse("api:payment_proof_url", kwargs={"registration_id": pending_order.pk})
        )

        assert response.status_code == 403
