from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from twilio.base.exceptions import TwilioRestException

from . import service
from .config import get_settings
from .models import ApplicationInputs
from .provider import ApplicationProvider, TwilioApplicationProvider
from .state import SessionLocal, init_db, load_state

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: make sure the state table exists
    init_db()
    yield


app = FastAPI(title="twilio-app", version="0.1.0", lifespan=lifespan)


# --- Admin protection ---


def verify_admin(request: Request) -> None:
    """
    Every route changes (or reveals) a live Twilio account, so all of them
    require an X-Admin-Token header that matches the ADMIN_TOKEN setting.
    """
    admin_token = get_settings().admin_token
    if not admin_token:
        # Misconfiguration; refuse rather than expose the account.
        raise HTTPException(status_code=500, detail="ADMIN_TOKEN not configured")

    header_token = request.headers.get("X-Admin-Token")
    if header_token is None:
        raise HTTPException(status_code=401, detail="Missing admin token")
    if header_token != admin_token:
        raise HTTPException(status_code=403, detail="Invalid admin token")


# --- Dependencies ---


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_provider() -> ApplicationProvider:
    return TwilioApplicationProvider()


def provider_error(exc: TwilioRestException) -> HTTPException:
    logger.warning("Twilio rejected the request: %s", exc.msg)
    return HTTPException(status_code=502, detail=f"Twilio error: {exc.msg}")


# --- Routes ---


@app.put("/applications/{name}", dependencies=[Depends(verify_admin)])
def deploy_application(
    name: str,
    inputs: ApplicationInputs,
    db: Session = Depends(get_db),
    provider: ApplicationProvider = Depends(get_provider),
) -> JSONResponse:
    """
    Create or update the application stored under `name`.

    Accepts JSON with camelCase or snake_case keys:

      { "friendlyName": "ivr", "voiceUrl": "https://example.com/voice" }
    """
    try:
        result = service.deploy(db=db, name=name, inputs=inputs, provider=provider)
    except TwilioRestException as exc:
        raise provider_error(exc) from exc

    return JSONResponse(
        {
            "status": "ok",
            "action": result.action,
            "state": result.state.model_dump(mode="json", exclude_none=True),
        }
    )


@app.get("/applications/{name}", dependencies=[Depends(verify_admin)])
def show_application(name: str, db: Session = Depends(get_db)) -> JSONResponse:
    state = load_state(db, name)
    if state is None:
        raise HTTPException(status_code=404, detail=f"No application named {name!r}")
    return JSONResponse(state.model_dump(mode="json", exclude_none=True))


@app.delete("/applications/{name}", dependencies=[Depends(verify_admin)])
def remove_application(
    name: str,
    db: Session = Depends(get_db),
    provider: ApplicationProvider = Depends(get_provider),
) -> JSONResponse:
    try:
        removed = service.remove(db=db, name=name, provider=provider)
    except TwilioRestException as exc:
        raise provider_error(exc) from exc

    if not removed:
        raise HTTPException(status_code=404, detail=f"No application named {name!r}")
    return JSONResponse({"status": "ok", "removed": name})
