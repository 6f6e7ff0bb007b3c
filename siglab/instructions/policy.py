"""Policy instructions: creating policies and collecting premiums."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from siglab.constants import MAX_COVERAGE_AMOUNT, MIN_PREMIUM_AMOUNT
from siglab.errors import ErrorCode, require
from siglab.state.master_contract import MasterInsuranceContract
from siglab.state.policy import (
    InsuranceType,
    OracleConfig,
    Policy,
    PolicyStatus,
    PremiumFrequency,
    TriggerConditions,
)
from siglab.utils import require_not_paused, require_sufficient_premium

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86_400
MAX_POLICY_DURATION_DAYS = 365
_U64_MAX = 2**64 - 1


@dataclass
class CreatePolicyParams:
    """Terms requested for a new policy."""

    insurance_type: InsuranceType
    coverage_amount: int
    premium_amount: int
    deductible: int
    policy_duration_days: int
    trigger_conditions: TriggerConditions
    oracle_config: OracleConfig
    risk_assessment_score: int
    max_payout_per_incident: int
    waiting_period_hours: int = 0
    premium_payment_frequency: PremiumFrequency = PremiumFrequency.MONTHLY
    auto_renewal: bool = False
    metadata: str = ""


def create_policy(
    master_contract: MasterInsuranceContract,
    policy_holder: str,
    params: CreatePolicyParams,
    now: int,
) -> Policy:
    """Validate the terms and issue an active policy to ``policy_holder``."""
    require_not_paused(master_contract.is_paused)
    require(
        0 < params.coverage_amount <= MAX_COVERAGE_AMOUNT,
        ErrorCode.COVERAGE_EXCEEDS_MAXIMUM,
    )
    require_sufficient_premium(params.premium_amount, MIN_PREMIUM_AMOUNT)
    require(params.deductible <= params.coverage_amount, ErrorCode.INVALID_PARAMETERS)
    require(
        0 < params.policy_duration_days <= MAX_POLICY_DURATION_DAYS,
        ErrorCode.INVALID_PARAMETERS,
    )
    require(params.risk_assessment_score <= 100, ErrorCode.INVALID_PARAMETERS)
    require(
        params.max_payout_per_incident <= params.coverage_amount,
        ErrorCode.INVALID_PARAMETERS,
    )

    policy = Policy(
        id=f"POL-{now}-{master_contract.active_policies_count}",
        user=policy_holder,
        insurance_type=params.insurance_type,
        coverage_amount=params.coverage_amount,
        premium_amount=params.premium_amount,
        deductible=params.deductible,
        start_date=now,
        end_date=now + params.policy_duration_days * SECONDS_PER_DAY,
        trigger_conditions=params.trigger_conditions,
        oracle_config=params.oracle_config,
        status=PolicyStatus.ACTIVE,
        last_premium_paid=now,
        risk_assessment_score=params.risk_assessment_score,
        max_payout_per_incident=params.max_payout_per_incident,
        waiting_period_hours=params.waiting_period_hours,
        premium_payment_frequency=params.premium_payment_frequency,
        auto_renewal=params.auto_renewal,
        metadata=params.metadata,
        created_at=now,
        updated_at=now,
    )

    master_contract.active_policies_count += 1
    master_contract.updated_at = now
    logger.info("Policy created with ID: %s for user: %s", policy.id, policy_holder)
    return policy


def pay_premium(
    master_contract: MasterInsuranceContract,
    policy: Policy,
    payer: str,
    amount: int,
    now: int,
) -> None:
    """Record a premium payment by the policy holder."""
    require_not_paused(master_contract.is_paused)
    require(policy.status is PolicyStatus.ACTIVE, ErrorCode.POLICY_NOT_ACTIVE)
    require(now <= policy.end_date, ErrorCode.POLICY_EXPIRED)
    require(amount >= policy.premium_amount, ErrorCode.INSUFFICIENT_PREMIUM)
    require(payer == policy.user, ErrorCode.UNAUTHORIZED)

    new_total = master_contract.total_premiums_collected + amount
    require(new_total <= _U64_MAX, ErrorCode.MATH_OVERFLOW)

    policy.last_premium_paid = now
    policy.updated_at = now
    master_contract.total_premiums_collected = new_total
    master_contract.updated_at = now
    logger.info("Premium paid: %d lamports for policy: %s", amount, policy.id)