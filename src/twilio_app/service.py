from __future__ import annotations

from sqlalchemy.orm import Session

from .models import ApplicationInputs
from .provider import ApplicationProvider
from .reconciler import ApplicationReconciler, ReconcileResult
from .state import clear_state, load_state, save_state


def deploy(
    db: Session, name: str, inputs: ApplicationInputs, provider: ApplicationProvider
) -> ReconcileResult:
    """
    Bring the application stored under `name` in line with `inputs`:
    - loads the last stored state
    - reconciles it (at most one Twilio call)
    - saves the resulting state unless nothing changed
    """
    stored = load_state(db, name)

    result = ApplicationReconciler(provider).converge(inputs, stored)
    if result.action != "noop":
        save_state(db, name, result.state)

    return result


def remove(db: Session, name: str, provider: ApplicationProvider) -> bool:
    """
    Delete the application stored under `name` and forget its state.

    Returns False (and calls nothing) when no state is stored.
    """
    stored = load_state(db, name)
    if stored is None:
        return False

    ApplicationReconciler(provider).remove(stored)
    clear_state(db, name)
    return True
