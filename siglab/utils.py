"""Guard helpers shared by the instructions, and validation of common invariants."""

from __future__ import annotations

import logging
from typing import Union

from siglab.errors import ErrorCode, InsuranceError, require
from siglab.state.policy import PolicyStatus

logger = logging.getLogger(__name__)

_U64_MAX = 2**64 - 1


def require_authorized(condition: object) -> None:
    require(condition, ErrorCode.UNAUTHORIZED)


def require_solvency(treasury_balance: int, required_reserves: int) -> None:
    require(treasury_balance >= required_reserves, ErrorCode.SOLVENCY_CHECK_FAILED)


def require_valid_oracle_data(
    oracle_timestamp: int, current_time: int, staleness_threshold: int
) -> None:
    require(
        current_time - oracle_timestamp <= staleness_threshold,
        ErrorCode.ORACLE_DATA_STALE,
    )


def require_policy_active(policy_status: PolicyStatus) -> None:
    require(policy_status is PolicyStatus.ACTIVE, ErrorCode.POLICY_NOT_ACTIVE)


def require_not_paused(is_paused: bool) -> None:
    require(not is_paused, ErrorCode.CONTRACT_PAUSED)


def require_sufficient_premium(premium_amount: int, minimum_premium: int) -> None:
    require(premium_amount >= minimum_premium, ErrorCode.INSUFFICIENT_PREMIUM)


def log_error_with_context(
    error: Union[ErrorCode, InsuranceError], context: str, details: str
) -> None:
    """Log an error together with where it happened and why."""
    code = error.code if isinstance(error, InsuranceError) else error
    logger.error("Error: %s | Context: %s | Details: %s", code.name, context, details)


def validate_treasury_balance(
    treasury_balance: int, required_amount: int, reserve_ratio: int
) -> None:
    """Check that paying ``required_amount`` leaves the percentage reserve intact."""
    require(treasury_balance >= required_amount, ErrorCode.INSUFFICIENT_TREASURY)
    product = treasury_balance * reserve_ratio
    require(product <= _U64_MAX, ErrorCode.MATH_OVERFLOW)
    required_reserves = product // 100
    require(
        treasury_balance - required_amount >= required_reserves,
        ErrorCode.RESERVE_RATIO_BELOW_MINIMUM,
    )


def validate_oracle_freshness(
    oracle_timestamp: int, current_timestamp: int, staleness_threshold: int
) -> None:
    require(
        current_timestamp - oracle_timestamp <= staleness_threshold,
        ErrorCode.ORACLE_DATA_STALE,
    )


def validate_policy_claim_eligibility(
    policy_end_date: int, policy_status: PolicyStatus, current_timestamp: int
) -> None:
    """A claim needs an active policy that has not yet ended."""
    require(policy_status is PolicyStatus.ACTIVE, ErrorCode.POLICY_NOT_ACTIVE)
    require(current_timestamp <= policy_end_date, ErrorCode.POLICY_EXPIRED)