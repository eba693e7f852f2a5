"""
Reconciliation of a single Twilio Application.

Desired inputs are compared with the last stored state (never with live
Twilio state) and at most one provider call is made per invocation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from .models import ApplicationInputs, ApplicationState
from .provider import ApplicationProvider

logger = logging.getLogger(__name__)

Action = Literal["noop", "create", "update"]


@dataclass
class ReconcileResult:
    """Which call was made and the stored state it produced."""

    action: Action
    state: ApplicationState


def plan(desired: ApplicationInputs, stored: ApplicationState | None) -> Action:
    """Decide which provider call, if any, brings `stored` in line with `desired`."""
    if stored is not None and stored.matches(desired):
        return "noop"
    if stored is None or not stored.exists:
        return "create"
    return "update"


class ApplicationReconciler:
    def __init__(self, provider: ApplicationProvider) -> None:
        self.provider = provider

    def converge(
        self, desired: ApplicationInputs, stored: ApplicationState | None
    ) -> ReconcileResult:
        """
        Converge on `desired`, reporting the action taken.

        - noop: `stored` is returned untouched
        - create: the provider response replaces the stored state
        - update: the provider response is merged into `stored` in place

        Provider errors propagate as raised.
        """
        action = plan(desired, stored)

        if stored is not None and action == "noop":
            logger.debug("Application %r unchanged, nothing to do", desired.friendly_name)
            return ReconcileResult(action=action, state=stored)

        if stored is not None and action == "update":
            logger.info("Updating application %s (%r)", stored.sid, desired.friendly_name)
            updated = self.provider.update(stored.sid, desired.field_set())
            stored.apply(updated)
            return ReconcileResult(action=action, state=stored)

        logger.info("Creating application %r", desired.friendly_name)
        created = self.provider.create(desired.field_set())
        state = ApplicationState()
        state.apply(created)
        return ReconcileResult(action="create", state=state)

    def reconcile(
        self, desired: ApplicationInputs, stored: ApplicationState | None
    ) -> ApplicationState:
        """Converge on `desired` and return the new stored state."""
        return self.converge(desired, stored).state

    def remove(self, stored: ApplicationState) -> None:
        """Delete the application addressed by `stored.sid`."""
        logger.info("Removing application %s", stored.sid)
        self.provider.remove(stored.sid)
