"""
ClaimJourney External Interfaces

The engine is pure computation. Everything it needs from the outside world
(configuration, persistence, school lookup, notification delivery) comes in
through the protocols below, so the host application can plug in its own
database, directory service and mailer.

In-memory implementations are provided for tests and for running the engine
standalone.
"""
from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import (
    Any,
    Iterable,
    Iterator,
    MutableMapping,
    Optional,
    Protocol,
    runtime_checkable,
)

from .configuration import DEFAULT_CLAIM_TIMEOUT_MINUTES
from .models import AcademicYear, ClaimRecord, MessageType, Policy, School

logger = logging.getLogger(__name__)


# =============================================================================
# Protocols
# =============================================================================

@runtime_checkable
class PolicyConfigurationProvider(Protocol):
    """Source of the academic year each policy currently accepts claims for."""

    def current_academic_year(self, policy: Policy) -> Optional[AcademicYear]:
        """
        Current claim year for a policy.

        Returns:
            The academic year, or None if the policy is not configured
        """
        ...


@runtime_checkable
class ClaimStore(Protocol):
    """
    Persistence for claim records.

    transaction() must make everything done inside it all-or-nothing: when
    the block raises, the store is left as it was on entry.
    """

    def add(self, claim: ClaimRecord) -> None:
        ...

    def get(self, claim_id: str) -> Optional[ClaimRecord]:
        ...

    def save(self, claim: ClaimRecord) -> bool:
        """Persist a claim; False if it could not be saved."""
        ...

    def delete(self, claim_id: str) -> None:
        ...

    def claims_for(self, claim_ids: Iterable[str]) -> list[ClaimRecord]:
        ...

    def transaction(self) -> Any:
        """Context manager scoping an atomic unit of work."""
        ...


@runtime_checkable
class SchoolDirectory(Protocol):
    """Lookup of schools and their eligibility flags."""

    def get(self, school_id: str) -> Optional[School]:
        ...


@runtime_checkable
class NotificationSender(Protocol):
    """Delivery of named messages (email / SMS) to a recipient."""

    def send(
        self,
        recipient: str,
        message_type: MessageType,
        personalisation: dict[str, Any],
    ) -> None:
        ...


# =============================================================================
# In-Memory Implementations
# =============================================================================

class InMemoryClaimStore:
    """
    ClaimStore keeping copies of records in a dict.

    Records are copied on the way in and out, like a database round trip, so
    a caller mutating a record does not change what is stored until it is
    saved.
    """

    def __init__(self, claims: Iterable[ClaimRecord] = ()):
        self._claims: dict[str, ClaimRecord] = {}
        for claim in claims:
            self.add(claim)

    def add(self, claim: ClaimRecord) -> None:
        self._claims[claim.id] = copy.deepcopy(claim)
        claim.eligibility.mark_clean()

    def get(self, claim_id: str) -> Optional[ClaimRecord]:
        claim = self._claims.get(claim_id)
        return copy.deepcopy(claim) if claim is not None else None

    def save(self, claim: ClaimRecord) -> bool:
        self._claims[claim.id] = copy.deepcopy(claim)
        claim.eligibility.mark_clean()
        return True

    def delete(self, claim_id: str) -> None:
        self._claims.pop(claim_id, None)

    def claims_for(self, claim_ids: Iterable[str]) -> list[ClaimRecord]:
        found = (self.get(claim_id) for claim_id in claim_ids)
        return [claim for claim in found if claim is not None]

    def __contains__(self, claim_id: object) -> bool:
        return claim_id in self._claims

    def __len__(self) -> int:
        return len(self._claims)

    @contextmanager
    def transaction(self) -> Iterator[InMemoryClaimStore]:
        snapshot = dict(self._claims)
        try:
            yield self
        except Exception:
            self._claims = snapshot
            logger.debug("Claim store transaction rolled back")
            raise


class InMemorySchoolDirectory:
    """SchoolDirectory over a fixed set of schools."""

    def __init__(self, schools: Iterable[School] = ()):
        self._schools = {school.id: school for school in schools}

    def get(self, school_id: str) -> Optional[School]:
        return self._schools.get(school_id)

    def add(self, school: School) -> None:
        self._schools[school.id] = school


@dataclass
class SentNotification:
    """A message handed to RecordingNotificationSender."""
    recipient: str
    message_type: MessageType
    personalisation: dict[str, Any] = field(default_factory=dict)


class RecordingNotificationSender:
    """NotificationSender that records messages instead of delivering them."""

    def __init__(self) -> None:
        self.sent: list[SentNotification] = []

    def send(
        self,
        recipient: str,
        message_type: MessageType,
        personalisation: dict[str, Any],
    ) -> None:
        self.sent.append(SentNotification(recipient, message_type, dict(personalisation)))

    def sent_of_type(self, message_type: MessageType) -> list[SentNotification]:
        return [n for n in self.sent if n.message_type == message_type]


# =============================================================================
# Claim Session Timeout
# =============================================================================

# Session keys owned by an in-progress claim
CLAIM_SESSION_KEYS = (
    "claim_id",
    "selected_claim_policy",
    "claim_postcode",
    "claim_address_line_1",
    "no_address_selected",
    "reminder_id",
    "slugs",
    "bank_validation_attempt_count",
)


def claim_session_timed_out(
    last_seen_at: Optional[datetime],
    now: datetime,
    timeout_minutes: int = DEFAULT_CLAIM_TIMEOUT_MINUTES,
) -> bool:
    """Whether a claim session idle since last_seen_at has expired."""
    if last_seen_at is None:
        return False
    return last_seen_at < now - timedelta(minutes=timeout_minutes)


def clear_claim_session(session: MutableMapping[str, Any]) -> list[str]:
    """
    Drop every claim key from a caller-owned session.

    Returns:
        The keys that were present and removed
    """
    removed = [key for key in CLAIM_SESSION_KEYS if key in session]
    for key in removed:
        del session[key]
    return removed
