"""test_models.py: Unit tests for the accounts models."""

import pytest

from accounts.models import EventdeskUser, EventdeskUserQueryset

pytestmark = pytest.mark.django_db


def test_user_creation_with_default_values() -> None:
    """A new user is a participant unless told otherwise."""
    user = EventdeskUser.objects.create_user(username="test_user", password="password")
    assert user.role == EventdeskUser.Role.PARTICIPANT
    assert user.is_participant is True
    assert user.is_organizer is False


def test_manager_get_queryset() -> None:
    """EventdeskUserManager.get_queryset() returns an EventdeskUserQueryset."""
    queryset = EventdeskUser.objects.get_queryset()
    assert isinstance(queryset, EventdeskUserQueryset)


def test_queryset_role_filters() -> None:
    organizer = EventdeskUser.objects.create_user(username="club", role=EventdeskUser.Role.ORGANIZER)
    participant = EventdeskUser.objects.create_user(username="student")

    assert list(EventdeskUser.objects.get_queryset().organizers()) == [organizer]
    assert list(EventdeskUser.objects.get_queryset().participants()) == [participant]


def test_get_display_name_with_preferred_name() -> None:
    user = EventdeskUser.objects.create_user(
        username="test_user", first_name="John", last_name="Doe", preferred_name="Johnny", password="password"
    )
    assert user.get_display_name() == "Johnny"


def test_get_display_name_without_preferred_name() -> None:
    user = EventdeskUser.objects.create_user(username="test_user", first_name="John", last_name="Doe")
    assert user.get_display_name() == "John Doe"


def test_get_display_name_falls_back_to_username() -> None:
    user = EventdeskUser.objects.create_user(username="jane_smith@example.com", first_name="", last_name="")
    assert user.get_display_name() == "Jane Smith"


def test_organizer_display_name_prefers_organizer_name() -> None:
    user = EventdeskUser.objects.create_user(
        username="club",
        first_name="Ada",
        last_name="Lovelace",
        role=EventdeskUser.Role.ORGANIZER,
        organizer_name="Robotics Club",
    )
    assert user.display_name == "Robotics Club"
