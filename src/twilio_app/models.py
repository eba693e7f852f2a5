from __future__ import annotations

from datetime import datetime
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Fields the caller controls. Only the ones set on the inputs are sent to Twilio
# and compared when deciding whether a deployed application is up to date.
DESIRED_FIELDS: Final[tuple[str, ...]] = (
    "friendly_name",
    "api_version",
    "voice_url",
    "voice_method",
    "voice_fallback_url",
    "voice_fallback_method",
    "status_callback",
    "status_callback_method",
    "voice_caller_id_lookup",
    "sms_url",
    "sms_method",
    "sms_fallback_url",
    "sms_fallback_method",
    "sms_status_callback",
    "message_status_callback",
)

# Attributes assigned by Twilio and echoed back on create/update.
PROVIDER_FIELDS: Final[tuple[str, ...]] = (
    "sid",
    "account_sid",
    "auth_token",
    "date_created",
    "date_updated",
    "uri",
)

STATE_FIELDS: Final[tuple[str, ...]] = PROVIDER_FIELDS + DESIRED_FIELDS


def coerce_flag(value: Any) -> Any:
    """Twilio echoes voice_caller_id_lookup as a bool; accept "true"/"false" too."""
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return value


class ApplicationInputs(BaseModel):
    """Desired state of a Twilio Application."""

    # Accept both `friendlyName` (deployment files) and `friendly_name`.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    friendly_name: str
    api_version: str | None = None
    voice_url: str | None = None
    voice_method: str | None = None
    voice_fallback_url: str | None = None
    voice_fallback_method: str | None = None
    status_callback: str | None = None
    status_callback_method: str | None = None
    voice_caller_id_lookup: bool | str | None = None
    sms_url: str | None = None
    sms_method: str | None = None
    sms_fallback_url: str | None = None
    sms_fallback_method: str | None = None
    sms_status_callback: str | None = None
    message_status_callback: str | None = None

    @field_validator("voice_caller_id_lookup", mode="before")
    @classmethod
    def coerce_caller_id_lookup(cls, value: Any) -> Any:
        return coerce_flag(value)

    def field_set(self) -> dict[str, Any]:
        """Keyword arguments for the provider: every desired field that is set."""
        fields: dict[str, Any] = {}
        for name in DESIRED_FIELDS:
            value = getattr(self, name)
            if value is not None:
                fields[name] = value
        return fields


class ApplicationState(BaseModel):
    """
    Last known state of a managed application.

    An empty instance stands for a previous run that never completed;
    `sid` is only set once Twilio has accepted a create or update.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sid: str | None = None
    account_sid: str | None = None
    auth_token: str | None = None
    # Twilio returns datetimes; try that first so they survive a JSON round trip.
    date_created: datetime | str | None = Field(default=None, union_mode="left_to_right")
    date_updated: datetime | str | None = Field(default=None, union_mode="left_to_right")
    uri: str | None = None

    friendly_name: str | None = None
    api_version: str | None = None
    voice_url: str | None = None
    voice_method: str | None = None
    voice_fallback_url: str | None = None
    voice_fallback_method: str | None = None
    status_callback: str | None = None
    status_callback_method: str | None = None
    voice_caller_id_lookup: bool | str | None = None
    sms_url: str | None = None
    sms_method: str | None = None
    sms_fallback_url: str | None = None
    sms_fallback_method: str | None = None
    sms_status_callback: str | None = None
    message_status_callback: str | None = None

    @field_validator("voice_caller_id_lookup", mode="before")
    @classmethod
    def coerce_caller_id_lookup(cls, value: Any) -> Any:
        return coerce_flag(value)

    @property
    def exists(self) -> bool:
        return self.sid is not None

    def matches(self, inputs: ApplicationInputs) -> bool:
        """
        True if every field set on `inputs` already has the stored value.

        Unset inputs are neither sent nor compared, so Twilio defaults echoed
        back for them never count as a change. `sid` is not compared.
        """
        return all(getattr(self, name) == value for name, value in inputs.field_set().items())

    def apply(self, resource: ApplicationState) -> None:
        """Copy every attribute the provider returned onto this state, in place."""
        for name in STATE_FIELDS:
            value = getattr(resource, name)
            if value is not None:
                setattr(self, name, value)
