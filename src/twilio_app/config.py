from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel


class Settings(BaseModel):
    # Where the last known application state is kept between runs.
    # Default: sqlite file in the project root (twilio_app.db)
    database_url: str = os.getenv(
        "DATABASE_URL",
        f"sqlite:///{(Path(__file__).resolve().parents[2] / 'twilio_app.db')}",
    )

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # --- Twilio credentials ---
    twilio_account_sid: str | None = os.getenv("TWILIO_ACCOUNT_SID")
    twilio_auth_token: str | None = os.getenv("TWILIO_AUTH_TOKEN")

    # Required by the HTTP surface; unset means every request is refused.
    admin_token: str | None = os.getenv("ADMIN_TOKEN")


@lru_cache
def get_settings() -> Settings:
    return Settings()
