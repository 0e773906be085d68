"""Tests for the proxy-facing media validation endpoint."""

import pytest
from django.test import Client
from freezegun import freeze_time

from common.signing import sign, signed_url

PROOF = "protected/payment-proofs/proof.png"
VALIDATE_URL = f"/api/media/validate/{PROOF}"


def as_validation_request(url: str) -> str:
    return url.replace("/media/", "/api/media/validate/", 1)


@pytest.mark.django_db
class TestMediaValidationController:
    def test_signed_link_is_accepted(self, client: Client) -> None:
        response = client.get(as_validation_request(signed_url(PROOF, expires_in=900)))

        assert response.status_code == 200

    def test_expired_link_is_refused(self, client: Client) -> None:
        with freeze_time("2025-05-01 12:00:00") as frozen:
            url = as_validation_request(signed_url(PROOF, expires_in=60))
            frozen.tick(120)

            response = client.get(url)

        assert response.status_code == 401

    def test_signature_for_another_file_is_refused(self, client: Client) -> None:
        other = signed_url("protected/payment-proofs/other.png", expires_in=900)
        query = other.split("?", 1)[1]

        response = client.get(f"{VALIDATE_URL}?{query}")

        assert response.status_code == 401

    def test_forged_signature_is_refused(self, client: Client) -> None:
        response = client.get(f"{VALIDATE_URL}?exp=4102444800&sig={sign('/media/' + PROOF, 4102444799)}")

        assert response.status_code == 401

    @pytest.mark.parametrize("query", ["", "?sig=abc123", "?exp=4102444800"])
    def test_missing_parameters_are_refused(self, client: Client, query: str) -> None:
        response = client.get(f"{VALIDATE_URL}{query}")

        assert response.status_code == 401
