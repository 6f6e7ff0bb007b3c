"""Treasury instructions: setup, deposits, withdrawals and solvency checks."""

from __future__ import annotations

from siglab.errors import ErrorCode, require
from siglab.events import TreasuryWithdrawn
from siglab.state.treasury import FULL_RATIO_BPS, TokenType, Treasury, WithdrawalReason


def _refresh(treasury: Treasury, now: int) -> None:
    treasury.current_reserve_ratio = treasury.calculate_reserve_ratio()
    treasury.last_update_timestamp = now


def initialize_treasury(admin: str, minimum_reserve_ratio: int, now: int) -> Treasury:
    """Create the treasury; the minimum ratio is in basis points, 10% to 50%."""
    require(1000 <= minimum_reserve_ratio <= 5000, ErrorCode.INVALID_INPUT)
    return Treasury(
        authority=admin,
        current_reserve_ratio=FULL_RATIO_BPS,
        minimum_reserve_ratio=minimum_reserve_ratio,
        last_update_timestamp=now,
        created_at=now,
    )


def deposit_funds(treasury: Treasury, amount: int, token_type: TokenType, now: int) -> None:
    require(amount > 0, ErrorCode.INVALID_INPUT)
    if token_type is TokenType.USDC:
        treasury.total_usdc_balance += amount
    else:
        treasury.total_sol_balance += amount
    treasury.deposit_count += 1
    _refresh(treasury, now)


def withdraw_funds(
    treasury: Treasury,
    admin: str,
    amount: int,
    token_type: TokenType,
    reason: WithdrawalReason,
    now: int,
) -> TreasuryWithdrawn:
    """Withdraw funds; admin withdrawals may not dip into the required reserves."""
    require(treasury.authority == admin, ErrorCode.UNAUTHORIZED)
    require(amount > 0, ErrorCode.INVALID_INPUT)
    balance = (
        treasury.total_usdc_balance if token_type is TokenType.USDC else treasury.total_sol_balance
    )
    require(balance >= amount, ErrorCode.INSUFFICIENT_TREASURY)
    if reason is WithdrawalReason.ADMIN_WITHDRAWAL:
        require(amount <= treasury.available_liquidity(), ErrorCode.RESERVE_RATIO_VIOLATION)

    if token_type is TokenType.USDC:
        treasury.total_usdc_balance -= amount
    else:
        treasury.total_sol_balance -= amount
    treasury.withdrawal_count += 1
    _refresh(treasury, now)
    return TreasuryWithdrawn(admin=admin, amount=amount, timestamp=now)


def update_treasury_balance(treasury: Treasury, now: int) -> None:
    _refresh(treasury, now)


def validate_treasury_solvency(treasury: Treasury, additional_exposure: int) -> None:
    """Check the balance still covers reserves once ``additional_exposure`` is added."""
    new_exposure = treasury.total_coverage_exposure + additional_exposure
    if new_exposure > 0:
        required = new_exposure * treasury.minimum_reserve_ratio // FULL_RATIO_BPS
        require(treasury.total_balance >= required, ErrorCode.SOLVENCY_CHECK_FAILED)


def process_premium_payment(treasury: Treasury, amount: int, is_usdc: bool, timestamp: int) -> None:
    treasury.record_premium(amount, is_usdc, timestamp)


def process_payout_disbursement(
    treasury: Treasury, amount: int, is_usdc: bool, timestamp: int
) -> None:
    treasury.record_payout(amount, is_usdc, timestamp)