"""
ClaimJourney Decision Model

An admin's approve/reject decision on a submitted claim.

Decisions are an audit trail: a recorded decision is never edited. Undoing
one appends a new row with undone=True that points at the decision it
supersedes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from ..exceptions import DecisionReadOnlyError
from .enums import DecisionResult, RejectedReason


@dataclass(frozen=True)
class Decision:
    """
    A recorded decision.

    Attributes:
        id: Unique identifier
        claim_id: Claim the decision applies to
        result: Approved or rejected
        rejected_reasons: Reasons selected when rejecting
        notes: Free-text note
        created_by: Admin user ID, None for automated decisions
        created_at: When the decision was recorded
        undone: True on a row that undoes an earlier decision
        supersedes_id: Decision undone by this row
    """
    id: str
    claim_id: str
    result: DecisionResult
    rejected_reasons: frozenset[RejectedReason] = frozenset()
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    undone: bool = False
    supersedes_id: Optional[str] = None

    @classmethod
    def create(
        cls,
        claim_id: str,
        result: DecisionResult,
        rejected_reasons: frozenset[RejectedReason] = frozenset(),
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Decision:
        """Factory method to create a new Decision."""
        # Reasons only mean something on a rejection
        if result != DecisionResult.REJECTED:
            rejected_reasons = frozenset()
        return cls(
            id=str(uuid4()),
            claim_id=claim_id,
            result=result,
            rejected_reasons=frozenset(rejected_reasons),
            notes=notes,
            created_by=created_by,
            created_at=created_at or datetime.now(timezone.utc),
        )

    def undo(
        self,
        created_by: Optional[str] = None,
        notes: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Decision:
        """New row recording that this decision was undone."""
        return Decision(
            id=str(uuid4()),
            claim_id=self.claim_id,
            result=self.result,
            rejected_reasons=self.rejected_reasons,
            notes=notes,
            created_by=created_by,
            created_at=created_at or datetime.now(timezone.utc),
            undone=True,
            supersedes_id=self.id,
        )

    def amend(self, **changes: Any) -> Decision:
        """
        Recorded decisions cannot be edited.

        Raises:
            DecisionReadOnlyError: Always; supersede with undo() instead
        """
        raise DecisionReadOnlyError(
            message="Decisions are read-only; undo and record a new decision instead",
            details={"decision_id": self.id, "attributes": sorted(changes)},
            claim_id=self.claim_id,
        )

    @property
    def approved(self) -> bool:
        return self.result == DecisionResult.APPROVED

    @property
    def rejected(self) -> bool:
        return self.result == DecisionResult.REJECTED

    @property
    def automated(self) -> bool:
        return self.created_by is None

    def rejected_reasons_hash(self) -> dict[str, str]:
        """Every reason as "1"/"0", the shape exported in admin reports."""
        return {
            f"reason_{reason.value}": "1" if reason in self.rejected_reasons else "0"
            for reason in RejectedReason
        }

    def number_of_days_since_claim_submitted(self, submitted_at: datetime) -> int:
        return (self.created_at.date() - submitted_at.date()).days

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "claim_id": self.claim_id,
            "result": self.result.value,
            "rejected_reasons": sorted(r.value for r in self.rejected_reasons),
            "notes": self.notes,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
            "undone": self.undone,
            "supersedes_id": self.supersedes_id,
        }
