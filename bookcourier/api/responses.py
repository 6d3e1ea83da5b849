"""
Response shaping shared by the routers.
"""

from __future__ import annotations

from typing import Any

from bookcourier.core.errors import UpdateOutcome


def outcome_response(outcome: UpdateOutcome) -> dict[str, Any]:
    """``success`` is true only for an applied update; ``outcome`` says why."""
    return {"success": outcome.succeeded, "outcome": outcome.value}
