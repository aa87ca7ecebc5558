"""
ClaimJourney API

Thin JSON surface over the eligibility and journey engine.

Endpoints:
    GET  /health                   - Liveness and reference data versions
    POST /eligibility              - Classify an answer snapshot
    POST /journeys/{journey}/slugs - Page sequence for an answer snapshot

Environment:
    CJ_LOG_LEVEL           - Log level (default INFO)
    CJ_AWARD_TABLE_PATH    - Award table pack (default: packaged table)
    CJ_POLICY_CONFIG_PATH  - Policy configuration pack (default: packaged)
    CJ_DOCS_ENABLED        - Serve /docs and /openapi.json (default true)
"""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..configuration import EngineSettings
from ..engine import EvaluatorRegistry
from ..exceptions import ClaimJourneyError, JourneyValidationError
from ..packs import (
    DEFAULT_AWARD_TABLE_PATH,
    DEFAULT_POLICY_CONFIGURATION_PATH,
    load_award_table,
    load_policy_configurations,
)
from .routes import eligibility, health, journeys
from .state import EngineState

# =============================================================================
# Configuration
# =============================================================================

CJ_LOG_LEVEL = os.getenv("CJ_LOG_LEVEL", "INFO")
CJ_AWARD_TABLE_PATH = os.getenv("CJ_AWARD_TABLE_PATH", str(DEFAULT_AWARD_TABLE_PATH))
CJ_POLICY_CONFIG_PATH = os.getenv("CJ_POLICY_CONFIG_PATH", str(DEFAULT_POLICY_CONFIGURATION_PATH))
CJ_DOCS_ENABLED = os.getenv("CJ_DOCS_ENABLED", "true").lower() in {"1", "true", "yes"}


# =============================================================================
# Logging Setup (Structured JSON)
# =============================================================================

class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Add extra fields if present
        if hasattr(record, "claim_id"):
            log_entry["claim_id"] = record.claim_id
        if hasattr(record, "error_code"):
            log_entry["error_code"] = record.error_code
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(level: str = CJ_LOG_LEVEL) -> logging.Logger:
    """Send the claimjourney logger to stderr as JSON lines."""
    logger = logging.getLogger("claimjourney")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
    return logger


logger = configure_logging()


# =============================================================================
# Application Factory
# =============================================================================

def load_engine_state(
    award_table_path: str = CJ_AWARD_TABLE_PATH,
    policy_config_path: str = CJ_POLICY_CONFIG_PATH,
) -> EngineState:
    """Load reference packs and build the shared engine objects."""
    award_table = load_award_table(award_table_path)
    configurations = load_policy_configurations(policy_config_path)
    settings = EngineSettings.from_award_table(
        award_table,
        final_policy_year=configurations.final_policy_year,
        claim_timeout_minutes=configurations.claim_timeout_minutes,
    )
    return EngineState(
        award_table=award_table,
        evaluators=EvaluatorRegistry(award_table, settings),
        policy_configuration=configurations.provider,
    )


def create_app(state: Optional[EngineState] = None, docs_enabled: bool = CJ_DOCS_ENABLED) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        state: Engine objects to serve; loaded from the configured packs if omitted
        docs_enabled: Whether to serve the interactive docs
    """
    state = state or load_engine_state()

    app = FastAPI(
        title="ClaimJourney API",
        description="Eligibility and journey engine for teacher payment claims.",
        version=__version__,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )

    @app.exception_handler(ClaimJourneyError)
    async def claim_journey_error_handler(request: Request, exc: ClaimJourneyError):
        status_code = 422 if isinstance(exc, JourneyValidationError) else 500
        log = logger.info if status_code == 422 else logger.error
        log(str(exc), extra={"error_code": exc.code})
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(
            status_code=422,
            content={"code": "CJ_VALIDATION_ERROR", "message": str(exc)},
        )

    for module in (health, eligibility, journeys):
        module.set_engine(state)
        app.include_router(module.router)

    logger.info(
        "ClaimJourney API ready (award table %s, %d entries)",
        state.award_table.version, len(state.award_table),
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
