import pytest

from siglab.errors import ErrorCode, InsuranceError
from siglab.events import TreasuryWithdrawn
from siglab.instructions.treasury import (
    deposit_funds,
    initialize_treasury,
    process_payout_disbursement,
    process_premium_payment,
    update_treasury_balance,
    validate_treasury_solvency,
    withdraw_funds,
)
from siglab.state.treasury import TokenType, WithdrawalReason

ADMIN = "admin-key"


def make_treasury(ratio=2000, now=10):
    return initialize_treasury(ADMIN, ratio, now)


def test_initialize_treasury_fields():
    treasury = make_treasury(ratio=2500, now=42)
    assert treasury.authority == ADMIN
    assert treasury.minimum_reserve_ratio == 2500
    assert treasury.current_reserve_ratio == 10000
    assert treasury.total_balance == 0
    assert treasury.created_at == 42
    assert treasury.last_update_timestamp == 42


@pytest.mark.parametrize("ratio", [999, 5001])
def test_initialize_treasury_rejects_ratio(ratio):
    with pytest.raises(InsuranceError) as excinfo:
        initialize_treasury(ADMIN, ratio, 0)
    assert excinfo.value.code is ErrorCode.INVALID_INPUT


def test_deposit_funds_per_token():
    treasury = make_treasury()
    deposit_funds(treasury, 300, TokenType.USDC, 20)
    deposit_funds(treasury, 200, TokenType.SOL, 21)
    assert treasury.total_usdc_balance == 300
    assert treasury.total_sol_balance == 200
    assert treasury.deposit_count == 2
    assert treasury.last_update_timestamp == 21


def test_deposit_zero_rejected():
    treasury = make_treasury()
    with pytest.raises(InsuranceError) as excinfo:
        deposit_funds(treasury, 0, TokenType.SOL, 1)
    assert excinfo.value.code is ErrorCode.INVALID_INPUT


def test_withdraw_then_deposit_round_trip():
    treasury = make_treasury()
    deposit_funds(treasury, 500, TokenType.SOL, 1)
    event = withdraw_funds(treasury, ADMIN, 500, TokenType.SOL, WithdrawalReason.ADMIN_WITHDRAWAL, 2)
    assert event == TreasuryWithdrawn(admin=ADMIN, amount=500, timestamp=2)
    assert treasury.total_sol_balance == 0
    assert treasury.withdrawal_count == 1


def test_withdraw_unauthorized():
    treasury = make_treasury()
    deposit_funds(treasury, 500, TokenType.SOL, 1)
    with pytest.raises(InsuranceError) as excinfo:
        withdraw_funds(treasury, "intruder", 1, TokenType.SOL, WithdrawalReason.POLICY_PAYOUT, 2)
    assert excinfo.value.code is ErrorCode.UNAUTHORIZED


def test_withdraw_more_than_balance():
    treasury = make_treasury()
    deposit_funds(treasury, 100, TokenType.USDC, 1)
    with pytest.raises(InsuranceError) as excinfo:
        withdraw_funds(treasury, ADMIN, 101, TokenType.USDC, WithdrawalReason.POLICY_PAYOUT, 2)
    assert excinfo.value.code is ErrorCode.INSUFFICIENT_TREASURY


def test_admin_withdrawal_limited_by_liquidity_but_payout_is_not():
    treasury = make_treasury(ratio=5000)
    deposit_funds(treasury, 1000, TokenType.USDC, 1)
    treasury.total_coverage_exposure = 1000
    with pytest.raises(InsuranceError) as excinfo:
        withdraw_funds(treasury, ADMIN, 600, TokenType.USDC, WithdrawalReason.ADMIN_WITHDRAWAL, 2)
    assert excinfo.value.code is ErrorCode.RESERVE_RATIO_VIOLATION
    withdraw_funds(treasury, ADMIN, 600, TokenType.USDC, WithdrawalReason.POLICY_PAYOUT, 3)
    assert treasury.total_usdc_balance == 400
    assert treasury.current_reserve_ratio == treasury.calculate_reserve_ratio()


def test_update_treasury_balance_refreshes_ratio():
    treasury = make_treasury()
    deposit_funds(treasury, 100, TokenType.SOL, 1)
    treasury.total_coverage_exposure = 400
    update_treasury_balance(treasury, 99)
    assert treasury.current_reserve_ratio == treasury.calculate_reserve_ratio()
    assert treasury.current_reserve_ratio < 10000
    assert treasury.last_update_timestamp == 99


def test_validate_treasury_solvency():
    treasury = make_treasury(ratio=2000)
    deposit_funds(treasury, 100, TokenType.SOL, 1)
    validate_treasury_solvency(treasury, 500)
    with pytest.raises(InsuranceError) as excinfo:
        validate_treasury_solvency(treasury, 501 * 2)
    assert excinfo.value.code is ErrorCode.SOLVENCY_CHECK_FAILED
    assert treasury.total_coverage_exposure == 0


def test_premium_and_payout_processing():
    treasury = make_treasury()
    process_premium_payment(treasury, 700, True, 5)
    assert treasury.total_usdc_balance == 700
    assert treasury.total_premiums_collected_usdc == 700
    process_payout_disbursement(treasury, 300, True, 6)
    assert treasury.total_usdc_balance == 400
    assert treasury.total_payouts_disbursed_usdc == 300
    with pytest.raises(InsuranceError) as excinfo:
        process_payout_disbursement(treasury, 1, False, 7)
    assert excinfo.value.code is ErrorCode.INSUFFICIENT_TREASURY