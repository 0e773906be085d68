"""Project-wide fixtures."""

import secrets
import string
import typing as t

import faker
import pytest
from django.test.client import Client
from ninja_jwt.tokens import RefreshToken

from accounts.models import EventdeskUser
from eventdesk.celery import app as celery_app


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> t.Iterator[None]:
    """Enable Celery eager mode for tests so tasks execute synchronously."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True
    previous = (celery_app.conf.task_always_eager, celery_app.conf.task_eager_propagates)
    celery_app.conf.task_always_eager = True
    celery_app.conf.task_eager_propagates = True
    yield
    celery_app.conf.task_always_eager, celery_app.conf.task_eager_propagates = previous


@pytest.fixture(autouse=True)
def test_storage_and_email(settings: t.Any, tmp_path: t.Any) -> None:
    """Keep uploads in memory and deliver mail to the real recipient in the locmem outbox."""
    settings.STORAGES = {
        **settings.STORAGES,
        "default": {"BACKEND": "django.core.files.storage.InMemoryStorage"},
    }
    settings.MEDIA_ROOT = str(tmp_path)
    settings.LIVE_EMAILS = True
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"


class EventdeskUserFactory:
    """Factory for creating EventdeskUser instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> EventdeskUser:
        username = kwargs.pop("username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)))
        email = kwargs.pop("email", f"{username}@user.test")
        password = kwargs.pop("password", "password")
        first_name = kwargs.pop("first_name", self.fake.first_name())
        last_name = kwargs.pop("last_name", self.fake.last_name())
        return EventdeskUser.objects.create_user(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> EventdeskUser:
        return self.create_user(**kwargs)


@pytest.fixture
def user_factory() -> EventdeskUserFactory:
    return EventdeskUserFactory()


@pytest.fixture
def participant(user_factory: EventdeskUserFactory) -> EventdeskUser:
    return user_factory(username="participant", role=EventdeskUser.Role.PARTICIPANT)


@pytest.fixture
def other_participant(user_factory: EventdeskUserFactory) -> EventdeskUser:
    return user_factory(username="other_participant", role=EventdeskUser.Role.PARTICIPANT)


@pytest.fixture
def organizer(user_factory: EventdeskUserFactory) -> EventdeskUser:
    return user_factory(username="organizer", role=EventdeskUser.Role.ORGANIZER, organizer_name="Robotics Club")


@pytest.fixture
def other_organizer(user_factory: EventdeskUserFactory) -> EventdeskUser:
    return user_factory(username="other_organizer", role=EventdeskUser.Role.ORGANIZER, organizer_name="Chess Club")


def client_for(user: EventdeskUser) -> Client:
    """API client authenticated with a JWT access token for ``user``."""
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]


@pytest.fixture
def participant_client(participant: EventdeskUser) -> Client:
    return client_for(participant)


@pytest.fixture
def other_participant_client(other_participant: EventdeskUser) -> Client:
    return client_for(other_participant)


@pytest.fixture
def organizer_client(organizer: EventdeskUser) -> Client:
    return client_for(organizer)


@pytest.fixture
def other_organizer_client(other_organizer: EventdeskUser) -> Client:
    return client_for(other_organizer)
