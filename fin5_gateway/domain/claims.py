"""
Insurance claim lifecycle.

A claim is filed against an active policy and starts PENDING. The provider's
decision moves it once: an approval is paid out immediately (PAID), a
rejection records the reason (REJECTED). Decided claims are final.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from fin5_gateway.domain.exceptions import InvalidClaimTransitionError, PolicyNotActiveError
from fin5_gateway.domain.models import ClaimStatus
from fin5_gateway.domain.validation import to_optional_number

ACTIVE_POLICY_STATUS = "ACTIVE"
DEFAULT_REJECTION_REASON = "Claim rejected based on policy terms"


@dataclass(frozen=True)
class ClaimDecision:
    status: ClaimStatus
    processed_at: datetime
    payout_amount: Optional[float] = None
    paid_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None


def ensure_claimable(policy_status: str) -> None:
    if (policy_status or "").upper() != ACTIVE_POLICY_STATUS:
        raise PolicyNotActiveError(f"Policy is {policy_status or 'unknown'}, claims need an active policy")


def decide_claim(
    current_status: ClaimStatus | str,
    claim_amount: float,
    approved: bool,
    payout_amount: Any = None,
    rejection_reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ClaimDecision:
    """
    Approve or reject a pending claim.

    Approval pays payout_amount, or the full claim amount when no positive
    payout is given. Raises InvalidClaimTransitionError unless the claim is
    still pending.
    """
    status = ClaimStatus(current_status)
    if status is not ClaimStatus.PENDING:
        raise InvalidClaimTransitionError(f"Claim is already {status.value}")

    decided_at = now or datetime.utcnow()
    if not approved:
        return ClaimDecision(
            status=ClaimStatus.REJECTED,
            processed_at=decided_at,
            rejection_reason=rejection_reason or DEFAULT_REJECTION_REASON,
        )

    payout = to_optional_number(payout_amount)
    if payout is None or payout <= 0:
        payout = claim_amount
    return ClaimDecision(status=ClaimStatus.PAID, processed_at=decided_at, payout_amount=payout, paid_at=decided_at)
