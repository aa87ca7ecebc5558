"""Health endpoint."""
from __future__ import annotations

from fastapi import APIRouter

from ... import __version__
from ..schemas.responses import HealthResponse
from ..state import EngineState

router = APIRouter(tags=["Health"])

# Shared engine state (set by main.py)
engine: EngineState = None


def set_engine(state: EngineState) -> None:
    global engine
    engine = state


@router.get("/health", response_model=HealthResponse)
def health():
    """Liveness check with the reference data in use."""
    return HealthResponse(
        status="ok",
        version=__version__,
        award_table_version=engine.award_table.version,
        award_table_entries=len(engine.award_table),
        policies_configured=[p.value for p in engine.policy_configuration.policies],
    )
