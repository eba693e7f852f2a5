from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from twilio.rest import Client

from .config import get_settings
from .models import STATE_FIELDS, ApplicationState

logger = logging.getLogger(__name__)


class ApplicationProvider(Protocol):
    """The three calls the reconciler needs from a provider binding."""

    def create(self, fields: Mapping[str, Any]) -> ApplicationState: ...

    def update(self, sid: str | None, fields: Mapping[str, Any]) -> ApplicationState: ...

    def remove(self, sid: str | None) -> None: ...


def get_twilio_client() -> Client:
    settings = get_settings()

    if not settings.twilio_account_sid or not settings.twilio_auth_token:
        raise RuntimeError(
            "Twilio credentials are not configured (TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN)"
        )

    return Client(settings.twilio_account_sid, settings.twilio_auth_token)


def to_state(instance: Any) -> ApplicationState:
    """
    Convert a Twilio ApplicationInstance into an ApplicationState.

    Attributes the instance does not carry (Twilio never echoes `auth_token`)
    are left unset.
    """
    return ApplicationState(**{name: getattr(instance, name, None) for name in STATE_FIELDS})


class TwilioApplicationProvider:
    """ApplicationProvider backed by the Twilio REST API."""

    def __init__(self, client: Client | None = None) -> None:
        self._client = client

    @property
    def client(self) -> Client:
        # Built lazily so a noop deploy never needs credentials.
        if self._client is None:
            self._client = get_twilio_client()
        return self._client

    def create(self, fields: Mapping[str, Any]) -> ApplicationState:
        instance = self.client.applications.create(**fields)
        logger.debug("Twilio created application %s", instance.sid)
        return to_state(instance)

    def update(self, sid: str | None, fields: Mapping[str, Any]) -> ApplicationState:
        instance = self.client.applications(sid).update(**fields)
        logger.debug("Twilio updated application %s", sid)
        return to_state(instance)

    def remove(self, sid: str | None) -> None:
        self.client.applications(sid).delete()
        logger.debug("Twilio deleted application %s", sid)
