"""Pending payouts and payout amount calculation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional


class PayoutStatus(Enum):
    PENDING = "Pending"
    PENDING_APPROVAL = "PendingApproval"
    READY = "Ready"
    EXECUTED = "Executed"
    REJECTED = "Rejected"
    EXPIRED = "Expired"


@dataclass
class PendingPayout:
    """A triggered payout waiting for approval or execution."""

    MAX_POLICY_ID_LENGTH: ClassVar[int] = 32
    MAX_ORACLE_DATA_LENGTH: ClassVar[int] = 256
    MAX_REJECTION_REASON_LENGTH: ClassVar[int] = 128

    policy_id: str
    amount: int
    timestamp: int
    beneficiary: str
    expires_at: int
    priority: int = 0
    status: PayoutStatus = PayoutStatus.PENDING
    trigger_oracle_data: bytes = b""
    severity_score: int = 0
    approval_timestamp: Optional[int] = None
    approved_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    bump: int = 0

    @staticmethod
    def space() -> int:
        """Bytes reserved for a pending payout account."""
        return (
            8  # discriminator
            + 4 + PendingPayout.MAX_POLICY_ID_LENGTH  # policy_id
            + 8  # amount
            + 8  # timestamp
            + 1  # priority
            + 1  # status
            + 32  # beneficiary
            + 4 + PendingPayout.MAX_ORACLE_DATA_LENGTH  # trigger_oracle_data
            + 1  # severity_score
            + 1 + 8  # approval_timestamp
            + 1 + 32  # approved_by
            + 8  # expires_at
            + 1 + 4 + PendingPayout.MAX_REJECTION_REASON_LENGTH  # rejection_reason
            + 1  # bump
        )

    def is_expired(self, current_timestamp: int) -> bool:
        return current_timestamp > self.expires_at

    def requires_approval(self) -> bool:
        return self.status is PayoutStatus.PENDING_APPROVAL

    def is_ready_for_execution(self) -> bool:
        return self.status is PayoutStatus.READY


@dataclass
class PayoutCalculationData:
    """Inputs to the payout amount formula."""

    coverage_amount: int
    deductible: int
    severity_percentage: int
    max_payout: int
    insurance_type: str = ""

    def calculate_payout(self) -> int:
        """Coverage scaled by severity, less the deductible, capped at max_payout."""
        payout = self.coverage_amount * self.severity_percentage // 100
        if payout <= self.deductible:
            return 0
        return min(payout - self.deductible, self.max_payout)