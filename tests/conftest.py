from __future__ import annotations

from collections.abc import Generator, Mapping
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from twilio_app.models import DESIRED_FIELDS, ApplicationInputs, ApplicationState
from twilio_app.state import Base

# Every attribute echoed back as its own (camelCase) name, sid "sid" etc.
PROVIDER_RESPONSE: dict[str, Any] = {
    "accountSid": "accountSid",
    "apiVersion": "apiVersion",
    "authToken": "authToken",
    "dateCreated": "dateCreated",
    "dateUpdated": "dateUpdated",
    "friendlyName": "friendlyName",
    "messageStatusCallback": "messageStatusCallback",
    "sid": "sid",
    "smsFallbackMethod": "smsFallbackMethod",
    "smsFallbackUrl": "smsFallbackUrl",
    "smsMethod": "smsMethod",
    "smsStatusCallback": "smsStatusCallback",
    "smsUrl": "smsUrl",
    "statusCallback": "statusCallback",
    "statusCallbackMethod": "statusCallbackMethod",
    "uri": "uri",
    "voiceCallerIdLookup": "voiceCallerIdLookup",
    "voiceFallbackMethod": "voiceFallbackMethod",
    "voiceFallbackUrl": "voiceFallbackUrl",
    "voiceMethod": "voiceMethod",
    "voiceUrl": "voiceUrl",
}


class FakeProvider:
    """Provider that records calls and answers with PROVIDER_RESPONSE."""

    def __init__(self, error: Exception | None = None) -> None:
        self.created: list[dict[str, Any]] = []
        self.updated: list[tuple[str | None, dict[str, Any]]] = []
        self.removed: list[str | None] = []
        self.error = error

    @property
    def calls(self) -> int:
        return len(self.created) + len(self.updated) + len(self.removed)

    def create(self, fields: Mapping[str, Any]) -> ApplicationState:
        self.created.append(dict(fields))
        if self.error is not None:
            raise self.error
        return ApplicationState.model_validate(PROVIDER_RESPONSE)

    def update(self, sid: str | None, fields: Mapping[str, Any]) -> ApplicationState:
        self.updated.append((sid, dict(fields)))
        if self.error is not None:
            raise self.error
        return ApplicationState.model_validate(PROVIDER_RESPONSE)

    def remove(self, sid: str | None) -> None:
        self.removed.append(sid)
        if self.error is not None:
            raise self.error


def hello_fields() -> dict[str, Any]:
    """friendly_name 'hello', every other desired field 'foo'."""
    fields: dict[str, Any] = {name: "foo" for name in DESIRED_FIELDS}
    fields["friendly_name"] = "hello"
    return fields


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def inputs() -> ApplicationInputs:
    return ApplicationInputs(**hello_fields())


@pytest.fixture
def session_factory(tmp_path: Path) -> sessionmaker[Session]:
    engine = create_engine(
        f"sqlite:///{tmp_path / 'state.db'}", connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
