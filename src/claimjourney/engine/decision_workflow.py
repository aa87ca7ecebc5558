"""
ClaimJourney Decision Workflow

Admin approve / reject / undo on submitted claims.

Decisions form an append-only audit trail on the claim: a transition either
appends exactly one Decision or raises without touching the claim.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from ..exceptions import DecisionNotUndoableError, DecisionValidationError
from ..models import ClaimRecord, Decision, DecisionResult, RejectedReason

logger = logging.getLogger(__name__)


# =============================================================================
# Claim Predicates
# =============================================================================

def approvable(claim: ClaimRecord) -> bool:
    """Submitted, not held, undecided and not yet paid."""
    return (
        claim.submitted
        and not claim.held
        and claim.active_decision is None
        and not claim.payrolled
    )


def rejectable(claim: ClaimRecord) -> bool:
    return approvable(claim)


def decision_undoable(claim: ClaimRecord) -> bool:
    """An active decision exists and the claim has not been paid."""
    return claim.active_decision is not None and claim.payment_id is None


# =============================================================================
# Workflow
# =============================================================================

class DecisionWorkflow:
    """
    Records decisions on claims.

    Usage:
        workflow = DecisionWorkflow()
        workflow.approve(claim, created_by="admin-1")
        workflow.reject(claim, {RejectedReason.DUPLICATE}, created_by="admin-1")
        workflow.undo(claim, created_by="admin-1", notes="Approved in error")
    """

    def approve(
        self,
        claim: ClaimRecord,
        created_by: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Decision:
        """
        Approve a claim.

        Raises:
            DecisionValidationError: If the claim cannot be approved or an
                automated decision has no notes
        """
        if not approvable(claim):
            raise DecisionValidationError(
                message="This claim cannot be approved",
                claim_id=claim.id,
            )
        self._require_notes_if_automated(claim, created_by, notes)

        decision = Decision.create(
            claim_id=claim.id,
            result=DecisionResult.APPROVED,
            notes=notes,
            created_by=created_by,
            created_at=now,
        )
        return self._record(claim, decision)

    def reject(
        self,
        claim: ClaimRecord,
        reasons: Iterable[RejectedReason],
        created_by: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Decision:
        """
        Reject a claim.

        Raises:
            DecisionValidationError: If the claim cannot be rejected, no
                reason is given, or notes are missing where required
        """
        if not rejectable(claim):
            raise DecisionValidationError(
                message="This claim cannot be rejected",
                claim_id=claim.id,
            )

        reasons = frozenset(RejectedReason(r) for r in reasons)
        if not reasons:
            raise DecisionValidationError(
                message="At least one reason is required",
                details={"attribute": "rejected_reasons"},
                claim_id=claim.id,
            )
        if RejectedReason.OTHER in reasons and not notes:
            raise DecisionValidationError(
                message="You must enter a reason for rejecting this claim in the decision note",
                details={"attribute": "notes"},
                claim_id=claim.id,
            )
        self._require_notes_if_automated(claim, created_by, notes)

        decision = Decision.create(
            claim_id=claim.id,
            result=DecisionResult.REJECTED,
            rejected_reasons=reasons,
            notes=notes,
            created_by=created_by,
            created_at=now,
        )
        return self._record(claim, decision)

    def undo(
        self,
        claim: ClaimRecord,
        created_by: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Decision:
        """
        Undo the active decision.

        Raises:
            DecisionNotUndoableError: If there is no active decision or the
                claim has been paid
        """
        if not decision_undoable(claim):
            raise DecisionNotUndoableError(
                message="This claim cannot have its decision undone",
                details={"payment_id": claim.payment_id},
                claim_id=claim.id,
            )

        undone = claim.active_decision.undo(created_by=created_by, notes=notes, created_at=now)
        return self._record(claim, undone)

    @staticmethod
    def _require_notes_if_automated(
        claim: ClaimRecord,
        created_by: Optional[str],
        notes: Optional[str],
    ) -> None:
        if created_by is None and not notes:
            raise DecisionValidationError(
                message="You must add a note when the decision is automated",
                details={"attribute": "notes"},
                claim_id=claim.id,
            )

    @staticmethod
    def _record(claim: ClaimRecord, decision: Decision) -> Decision:
        claim.decisions.append(decision)
        action = "undone" if decision.undone else decision.result.value
        logger.info(
            "Decision %s on claim %s: %s by %s",
            decision.id, claim.reference, action, decision.created_by or "automation",
        )
        return decision
