"""Journey page sequence endpoint."""
from __future__ import annotations

from fastapi import APIRouter

from ...engine import slug_sequence_for
from ...models import JourneyType
from ..schemas.requests import AnswersRequest
from ..schemas.responses import SlugsResponse
from ..state import EngineState

router = APIRouter(prefix="/journeys", tags=["Journeys"])

# Shared engine state (set by main.py)
engine: EngineState = None


def set_engine(state: EngineState) -> None:
    global engine
    engine = state


@router.post("/{journey}/slugs", response_model=SlugsResponse)
def journey_slugs(journey: JourneyType, request: AnswersRequest):
    """
    Ordered pages of a journey for an answer snapshot.

    With current_slug set, the neighbouring pages are returned too.
    """
    aggregate = engine.build_aggregate(request, journey)
    sequence = slug_sequence_for(aggregate)

    response = SlugsResponse(
        journey=journey.value,
        status=aggregate.eligibility_status().value,
        slugs=sequence.slugs(),
    )
    if request.current_slug:
        response.current_slug = request.current_slug
        response.next_slug = sequence.next_slug(request.current_slug)
        response.previous_slug = sequence.previous_slug(request.current_slug)
    return response
