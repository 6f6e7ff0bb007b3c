"""Administrative instructions: setup, pausing, reserve ratio, withdrawals, authority."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from siglab.errors import ErrorCode, require
from siglab.events import ContractPaused, ContractResumed, ReserveRatioUpdated, TreasuryWithdrawn
from siglab.state.master_contract import MasterInsuranceContract
from siglab.state.treasury import TokenType, Treasury

logger = logging.getLogger(__name__)


@dataclass
class InitializeParams:
    reserve_ratio: int
    max_oracles: int
    min_consensus_threshold: int


def require_not_paused(master_contract: MasterInsuranceContract) -> None:
    require(not master_contract.is_paused, ErrorCode.CONTRACT_PAUSED)


def require_admin_authority(master_contract: MasterInsuranceContract, admin: str) -> None:
    require(master_contract.authority == admin, ErrorCode.UNAUTHORIZED)


def initialize_master_contract(
    admin: str, params: InitializeParams, now: int
) -> MasterInsuranceContract:
    """Create the master contract owned by ``admin``."""
    require(10 <= params.reserve_ratio <= 50, ErrorCode.INVALID_INPUT)
    require(1 <= params.max_oracles <= 10, ErrorCode.INVALID_INPUT)
    require(
        1 <= params.min_consensus_threshold <= params.max_oracles,
        ErrorCode.INVALID_INPUT,
    )
    contract = MasterInsuranceContract(
        authority=admin,
        reserve_ratio=params.reserve_ratio,
        max_oracles=params.max_oracles,
        min_consensus_threshold=params.min_consensus_threshold,
        created_at=now,
        updated_at=now,
    )
    logger.info("Master contract initialized with reserve ratio: %d%%", params.reserve_ratio)
    return contract


def pause_contract(
    master_contract: MasterInsuranceContract, admin: str, now: int
) -> ContractPaused:
    require_admin_authority(master_contract, admin)
    require_not_paused(master_contract)
    master_contract.is_paused = True
    master_contract.updated_at = now
    logger.info("Contract paused by admin: %s", admin)
    return ContractPaused(admin=admin, timestamp=now)


def resume_contract(
    master_contract: MasterInsuranceContract, admin: str, now: int
) -> ContractResumed:
    require_admin_authority(master_contract, admin)
    require(master_contract.is_paused, ErrorCode.CONTRACT_MUST_BE_PAUSED)
    master_contract.is_paused = False
    master_contract.updated_at = now
    logger.info("Contract resumed by admin: %s", admin)
    return ContractResumed(admin=admin, timestamp=now)


def update_reserve_ratio(
    master_contract: MasterInsuranceContract,
    treasury: Treasury,
    admin: str,
    new_reserve_ratio: int,
    now: int,
) -> ReserveRatioUpdated:
    """Set a new percentage reserve ratio, refusing one the treasury cannot meet."""
    require_admin_authority(master_contract, admin)
    require(10 <= new_reserve_ratio <= 50, ErrorCode.INVALID_INPUT)

    if treasury.total_coverage_exposure > 0:
        required_reserves = treasury.total_coverage_exposure * new_reserve_ratio // 100
        require(
            treasury.total_balance >= required_reserves,
            ErrorCode.RESERVE_RATIO_VIOLATION,
        )

    old_ratio = master_contract.reserve_ratio
    master_contract.reserve_ratio = new_reserve_ratio
    master_contract.updated_at = now

    treasury.minimum_reserve_ratio = (new_reserve_ratio * 100) & 0xFFFF  # basis points
    treasury.current_reserve_ratio = treasury.calculate_reserve_ratio()
    treasury.last_update_timestamp = now

    logger.info("Reserve ratio updated from %d%% to %d%%", old_ratio, new_reserve_ratio)
    return ReserveRatioUpdated(
        admin=admin, old_ratio=old_ratio, new_ratio=new_reserve_ratio, timestamp=now
    )


def _balance_of(treasury: Treasury, token_type: TokenType) -> int:
    if token_type is TokenType.USDC:
        return treasury.total_usdc_balance
    return treasury.total_sol_balance


def _debit(treasury: Treasury, token_type: TokenType, amount: int) -> None:
    if token_type is TokenType.USDC:
        treasury.total_usdc_balance -= amount
    else:
        treasury.total_sol_balance -= amount


def withdraw_treasury(
    master_contract: MasterInsuranceContract,
    treasury: Treasury,
    admin: str,
    amount: int,
    token_type: TokenType,
    now: int,
) -> TreasuryWithdrawn:
    """Withdraw funds beyond the required reserves."""
    require_admin_authority(master_contract, admin)
    require(amount > 0, ErrorCode.INVALID_INPUT)
    require(_balance_of(treasury, token_type) >= amount, ErrorCode.INSUFFICIENT_TREASURY)
    require(amount <= treasury.available_liquidity(), ErrorCode.RESERVE_RATIO_VIOLATION)

    _debit(treasury, token_type, amount)
    treasury.withdrawal_count += 1
    treasury.current_reserve_ratio = treasury.calculate_reserve_ratio()
    treasury.last_update_timestamp = now
    master_contract.updated_at = now

    logger.info("Treasury withdrawal: %d tokens by admin: %s", amount, admin)
    return TreasuryWithdrawn(admin=admin, amount=amount, timestamp=now)


def transfer_authority(
    master_contract: MasterInsuranceContract, current_admin: str, new_admin: str, now: int
) -> None:
    require_admin_authority(master_contract, current_admin)
    old_authority = master_contract.authority
    master_contract.authority = new_admin
    master_contract.updated_at = now
    logger.info("Authority transferred from %s to %s", old_authority, new_admin)