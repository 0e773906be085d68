"""Tests for signed media links."""

import time
from urllib.parse import parse_qs, urlsplit

import pytest
from freezegun import freeze_time

from common.signing import DEFAULT_TTL, SIGNATURE_LENGTH, is_protected_path, is_valid, media_path, sign, signed_url

PROOF = "protected/payment-proofs/proof.png"
PROOF_PATH = "/media/protected/payment-proofs/proof.png"


def split_signed(url: str) -> tuple[str, str, str]:
    parts = urlsplit(url)
    query = parse_qs(parts.query)
    return parts.path, query["exp"][0], query["sig"][0]


def test_media_path() -> None:
    assert media_path(PROOF) == PROOF_PATH
    assert media_path("/" + PROOF) == PROOF_PATH


def test_signature_shape() -> None:
    sig = sign(PROOF_PATH, 1_900_000_000)

    assert len(sig) == SIGNATURE_LENGTH
    assert set(sig) <= set("0123456789abcdef")
    assert sig == sign(PROOF_PATH, 1_900_000_000)
    assert sig != sign(PROOF_PATH + "x", 1_900_000_000)
    assert sig != sign(PROOF_PATH, 1_900_000_001)


def test_signed_url_validates() -> None:
    path, exp, sig = split_signed(signed_url(PROOF, expires_in=900))

    assert path == PROOF_PATH
    assert is_valid(path, exp, sig) is True
    assert is_valid(path.replace("proof", "other"), exp, sig) is False


def test_default_ttl() -> None:
    with freeze_time("2025-05-01 12:00:00"):
        _, exp, _ = split_signed(signed_url(PROOF))

        assert int(exp) == int(time.time()) + DEFAULT_TTL


def test_link_expires() -> None:
    with freeze_time("2025-05-01 12:00:00") as frozen:
        path, exp, sig = split_signed(signed_url(PROOF, expires_in=60))
        assert is_valid(path, exp, sig) is True

        frozen.tick(61)

        assert is_valid(path, exp, sig) is False


def test_extended_expiry_is_rejected() -> None:
    path, exp, sig = split_signed(signed_url(PROOF, expires_in=60))

    assert is_valid(path, str(int(exp) + 86400), sig) is False


@pytest.mark.parametrize(
    "exp,sig",
    [(None, "abcd"), ("1900000000", None), ("", "abcd"), ("soon", "abcd"), ("1900000000", "")],
)
def test_missing_or_malformed_parameters(exp: str | None, sig: str | None) -> None:
    assert is_valid(PROOF_PATH, exp, sig) is False


def test_is_protected_path() -> None:
    assert is_protected_path(PROOF) is True
    assert is_protected_path("public/receipts/proof.png") is False
    assert is_protected_path("") is False
