"""Payout instructions: triggering, approving and executing payouts, and the payout queue."""

from __future__ import annotations

import copy
import math
from collections.abc import MutableMapping, Sequence
from dataclasses import dataclass

from siglab.constants import DEFAULT_PUBKEY
from siglab.errors import ErrorCode, require
from siglab.events import PayoutApproved, PayoutExecuted, PayoutTriggered
from siglab.state.master_contract import MasterInsuranceContract
from siglab.state.payout import PayoutCalculationData, PayoutStatus, PendingPayout
from siglab.state.policy import (
    ComparisonOperator,
    InsuranceType,
    Policy,
    PolicyStatus,
    TriggerConditions,
)

PAYOUT_EXPIRY_SECONDS = 24 * 60 * 60
EQUALITY_TOLERANCE = 0.01

_BASE_PRIORITY = {
    InsuranceType.WEATHER: 70,
    InsuranceType.EARTHQUAKE: 90,
    InsuranceType.FLIGHT: 60,
    InsuranceType.CROP: 80,
    InsuranceType.CUSTOM: 50,
}

_FINAL_STATUSES = frozenset(
    {PayoutStatus.EXECUTED, PayoutStatus.REJECTED, PayoutStatus.EXPIRED}
)


@dataclass
class QueueStatistics:
    """Summary of the pending payout queue for monitoring."""

    total_count: int
    ready_count: int
    pending_approval_count: int
    expired_count: int
    total_amount: int
    oldest_timestamp: int


def evaluate_trigger_conditions(conditions: TriggerConditions, oracle_value: int) -> bool:
    """Whether ``oracle_value`` satisfies the policy's trigger condition."""
    value = float(oracle_value)
    threshold = conditions.threshold_value
    operator = conditions.comparison_operator
    if operator is ComparisonOperator.GREATER_THAN:
        return value > threshold
    if operator is ComparisonOperator.LESS_THAN:
        return value < threshold
    if operator is ComparisonOperator.EQUALS:
        return abs(value - threshold) < EQUALITY_TOLERANCE
    return abs(value - threshold) >= EQUALITY_TOLERANCE


def calculate_severity_percentage(conditions: TriggerConditions, oracle_value: int) -> int:
    """Relative deviation of the value from the threshold, in percent, 0 to 100."""
    threshold = conditions.threshold_value
    difference = abs(float(oracle_value) - threshold)
    try:
        scaled = difference / threshold * 100.0
    except ZeroDivisionError:
        return 100
    if math.isnan(scaled):
        return 100
    return int(max(0.0, min(scaled, 100.0)))


def calculate_priority(insurance_type: InsuranceType, severity: int) -> int:
    """Base priority of the insurance type plus up to 25 points for severity."""
    return min(_BASE_PRIORITY[insurance_type] + severity // 4, 100)


def trigger_payout(
    master_contract: MasterInsuranceContract,
    policy: Policy,
    beneficiary: str,
    policy_id: str,
    oracle_value: int,
    now: int,
) -> tuple[PendingPayout, PayoutTriggered]:
    """Open a pending payout for a policy whose trigger condition is met."""
    require(policy.status is PolicyStatus.ACTIVE, ErrorCode.POLICY_NOT_ACTIVE)
    require(policy.end_date > now, ErrorCode.POLICY_EXPIRED)
    require(
        master_contract.treasury_account != DEFAULT_PUBKEY,
        ErrorCode.INVALID_ADMIN_OPERATION,
    )

    waiting_period = policy.waiting_period_hours * 3600
    require(now - policy.start_date >= waiting_period, ErrorCode.CLAIM_PERIOD_EXPIRED)

    require(
        evaluate_trigger_conditions(policy.trigger_conditions, oracle_value),
        ErrorCode.PAYOUT_CONDITIONS_NOT_MET,
    )

    calculation = PayoutCalculationData(
        coverage_amount=policy.coverage_amount,
        deductible=policy.deductible,
        severity_percentage=calculate_severity_percentage(
            policy.trigger_conditions, oracle_value
        ),
        max_payout=policy.max_payout_per_incident,
        insurance_type=policy.insurance_type.value,
    )
    amount = calculation.calculate_payout()
    require(amount > 0, ErrorCode.INVALID_CLAIM_AMOUNT)

    approval_threshold = master_contract.total_premiums_collected // 10
    status = (
        PayoutStatus.PENDING_APPROVAL if amount > approval_threshold else PayoutStatus.READY
    )

    pending = PendingPayout(
        policy_id=policy_id,
        amount=amount,
        timestamp=now,
        beneficiary=beneficiary,
        expires_at=now + PAYOUT_EXPIRY_SECONDS,
        priority=calculate_priority(policy.insurance_type, calculation.severity_percentage),
        status=status,
        trigger_oracle_data=oracle_value.to_bytes(8, "little"),
        severity_score=calculation.severity_percentage,
    )

    policy.status = PolicyStatus.PENDING_PAYOUT
    policy.updated_at = now

    event = PayoutTriggered(
        policy_id=policy_id,
        beneficiary=beneficiary,
        amount=amount,
        oracle_value=oracle_value,
        timestamp=now,
    )
    return pending, event


def execute_payout(
    master_contract: MasterInsuranceContract,
    policy: Policy,
    pending_payout: PendingPayout,
    beneficiary: str,
    treasury_account: str,
    balances: MutableMapping[str, int],
    now: int,
) -> PayoutExecuted:
    """Move a ready payout from the treasury to the beneficiary.

    ``balances`` maps account keys to lamports and is updated in place. The
    pending payout is closed, which is recorded by marking it executed.
    """
    require(
        pending_payout.status is PayoutStatus.READY, ErrorCode.PAYOUT_CONDITIONS_NOT_MET
    )
    require(pending_payout.beneficiary == beneficiary, ErrorCode.UNAUTHORIZED)
    require(
        treasury_account == master_contract.treasury_account,
        ErrorCode.INVALID_ADMIN_OPERATION,
    )
    require(not pending_payout.is_expired(now), ErrorCode.CLAIM_PERIOD_EXPIRED)

    amount = pending_payout.amount
    require(balances.get(treasury_account, 0) >= amount, ErrorCode.INSUFFICIENT_TREASURY)

    balances[treasury_account] = balances.get(treasury_account, 0) - amount
    balances[beneficiary] = balances.get(beneficiary, 0) + amount

    policy.status = PolicyStatus.PAID_OUT
    policy.updated_at = now
    master_contract.total_payouts_disbursed += amount
    master_contract.updated_at = now
    pending_payout.status = PayoutStatus.EXECUTED

    return PayoutExecuted(
        policy_id=pending_payout.policy_id,
        beneficiary=pending_payout.beneficiary,
        amount=amount,
        transaction_signature="executed",
        timestamp=now,
    )


def approve_payout(
    master_contract: MasterInsuranceContract,
    pending_payout: PendingPayout,
    admin: str,
    now: int,
) -> PayoutApproved:
    """Approve a payout awaiting approval so that it can be executed."""
    require(
        pending_payout.status is PayoutStatus.PENDING_APPROVAL,
        ErrorCode.PAYOUT_CONDITIONS_NOT_MET,
    )
    require(master_contract.authority == admin, ErrorCode.UNAUTHORIZED)
    require(not pending_payout.is_expired(now), ErrorCode.CLAIM_PERIOD_EXPIRED)

    pending_payout.status = PayoutStatus.READY
    pending_payout.approval_timestamp = now
    pending_payout.approved_by = admin

    return PayoutApproved(
        policy_id=pending_payout.policy_id,
        admin=admin,
        amount=pending_payout.amount,
        timestamp=now,
    )


def add_to_payout_queue(pending_payout: PendingPayout, current_timestamp: int) -> None:
    """Check that a payout may join the queue."""
    require(pending_payout.amount > 0, ErrorCode.INVALID_CLAIM_AMOUNT)
    require(
        not pending_payout.is_expired(current_timestamp), ErrorCode.CLAIM_PERIOD_EXPIRED
    )


def get_next_payout_batch(
    pending_payouts: Sequence[PendingPayout], batch_size: int, current_timestamp: int
) -> list[PendingPayout]:
    """Copies of up to ``batch_size`` ready, unexpired payouts, highest priority then oldest first."""
    ready = [
        copy.copy(payout)
        for payout in pending_payouts
        if payout.is_ready_for_execution() and not payout.is_expired(current_timestamp)
    ]
    ready.sort(key=lambda payout: (-payout.priority, payout.timestamp))
    return ready[:batch_size]


def remove_from_queue(pending_payout: PendingPayout) -> None:
    """Check that a payout has reached a final state and may leave the queue."""
    require(
        pending_payout.status in _FINAL_STATUSES, ErrorCode.PAYOUT_CONDITIONS_NOT_MET
    )


def validate_queue_health(queue_size: int, max_queue_size: int, current_timestamp: int) -> None:
    """Refuse a queue that has reached its size limit."""
    require(queue_size < max_queue_size, ErrorCode.INVALID_ADMIN_OPERATION)


def cleanup_expired_payouts(
    pending_payouts: list[PendingPayout], current_timestamp: int
) -> int:
    """Drop expired payouts from the list in place and return how many were dropped."""
    before = len(pending_payouts)
    pending_payouts[:] = [
        payout for payout in pending_payouts if not payout.is_expired(current_timestamp)
    ]
    return before - len(pending_payouts)


def get_queue_statistics(
    pending_payouts: Sequence[PendingPayout], current_timestamp: int
) -> QueueStatistics:
    return QueueStatistics(
        total_count=len(pending_payouts),
        ready_count=sum(1 for p in pending_payouts if p.is_ready_for_execution()),
        pending_approval_count=sum(1 for p in pending_payouts if p.requires_approval()),
        expired_count=sum(1 for p in pending_payouts if p.is_expired(current_timestamp)),
        total_amount=sum(p.amount for p in pending_payouts),
        oldest_timestamp=min(
            (p.timestamp for p in pending_payouts), default=current_timestamp
        ),
    )