import pytest

from siglab.state.payout import PayoutCalculationData, PayoutStatus, PendingPayout


def _payout(**overrides):
    values = dict(
        policy_id="POL-1-0",
        amount=500,
        timestamp=1_000,
        beneficiary="beneficiary-key",
        expires_at=2_000,
    )
    values.update(overrides)
    return PendingPayout(**values)


def test_space_is_fixed():
    assert PendingPayout.space() == 539


def test_space_covers_variable_fields():
    assert PendingPayout.space() > (
        PendingPayout.MAX_POLICY_ID_LENGTH
        + PendingPayout.MAX_ORACLE_DATA_LENGTH
        + PendingPayout.MAX_REJECTION_REASON_LENGTH
    )


def test_not_expired_at_expiry_instant():
    payout = _payout()
    assert payout.is_expired(2_000) is False
    assert payout.is_expired(2_001) is True


def test_status_predicates():
    assert _payout(status=PayoutStatus.PENDING_APPROVAL).requires_approval() is True
    assert _payout(status=PayoutStatus.PENDING_APPROVAL).is_ready_for_execution() is False
    assert _payout(status=PayoutStatus.READY).is_ready_for_execution() is True
    assert _payout(status=PayoutStatus.READY).requires_approval() is False


def test_default_status_is_pending():
    payout = _payout()
    assert payout.status is PayoutStatus.PENDING
    assert payout.approved_by is None


def test_full_severity_without_deductible_pays_coverage():
    data = PayoutCalculationData(1_000_000, 0, 100, 5_000_000, "Weather")
    assert data.calculate_payout() == 1_000_000


def test_payout_capped_at_maximum():
    data = PayoutCalculationData(1_000_000, 0, 100, 250_000, "Crop")
    assert data.calculate_payout() == 250_000


def test_zero_severity_pays_nothing():
    data = PayoutCalculationData(1_000_000, 0, 0, 1_000_000, "Flight")
    assert data.calculate_payout() == 0


def test_payout_equal_to_deductible_pays_nothing():
    data = PayoutCalculationData(1_000, 1_000, 100, 1_000, "Custom")
    assert data.calculate_payout() == 0


def test_deductible_is_subtracted():
    with_deductible = PayoutCalculationData(1_000_000, 300, 100, 2_000_000).calculate_payout()
    without = PayoutCalculationData(1_000_000, 0, 100, 2_000_000).calculate_payout()
    assert without - with_deductible == 300


@pytest.mark.parametrize("severity", [1, 10, 33, 50, 99, 100])
def test_payout_within_bounds(severity):
    data = PayoutCalculationData(7_777_777, 1_234, severity, 3_000_000)
    amount = data.calculate_payout()
    assert 0 <= amount <= data.max_payout
    assert amount <= data.coverage_amount