"""Treasury account: balances, reserve ratio and financial reporting."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from siglab.constants import DEFAULT_PUBKEY
from siglab.errors import ErrorCode, require

FULL_RATIO_BPS = 10_000


class TokenType(Enum):
    USDC = "USDC"
    SOL = "SOL"


class WithdrawalReason(Enum):
    ADMIN_WITHDRAWAL = "AdminWithdrawal"
    POLICY_PAYOUT = "PolicyPayout"
    PREMIUM_REFUND = "PremiumRefund"
    EMERGENCY_WITHDRAWAL = "EmergencyWithdrawal"


@dataclass
class Treasury:
    """Pooled funds backing the policies; ratios are in basis points."""

    authority: str
    usdc_token_account: str = DEFAULT_PUBKEY
    sol_token_account: str = DEFAULT_PUBKEY
    usdc_mint: str = DEFAULT_PUBKEY
    total_usdc_balance: int = 0
    total_sol_balance: int = 0
    total_premiums_collected_usdc: int = 0
    total_premiums_collected_sol: int = 0
    total_payouts_disbursed_usdc: int = 0
    total_payouts_disbursed_sol: int = 0
    current_reserve_ratio: int = FULL_RATIO_BPS
    minimum_reserve_ratio: int = 0
    total_coverage_exposure: int = 0
    deposit_count: int = 0
    withdrawal_count: int = 0
    last_update_timestamp: int = 0
    created_at: int = 0
    bump: int = 0

    @staticmethod
    def space() -> int:
        """Bytes reserved for the treasury account."""
        return (
            8  # discriminator
            + 32 * 4  # authority, token accounts, mint
            + 8 * 6  # balances and totals
            + 2  # current_reserve_ratio
            + 2  # minimum_reserve_ratio
            + 8  # total_coverage_exposure
            + 8  # deposit_count
            + 8  # withdrawal_count
            + 8  # last_update_timestamp
            + 8  # created_at
            + 1  # bump
        )

    @property
    def total_balance(self) -> int:
        return self.total_usdc_balance + self.total_sol_balance

    def calculate_reserve_ratio(self) -> int:
        """Balance over coverage exposure in basis points, at most 10000."""
        if self.total_coverage_exposure == 0:
            return FULL_RATIO_BPS
        balance = self.total_balance
        if balance == 0:
            return 0
        ratio = balance * FULL_RATIO_BPS // self.total_coverage_exposure
        # The ratio is stored in 16 bits and truncated before it is capped.
        return min(ratio & 0xFFFF, FULL_RATIO_BPS)

    def meets_reserve_requirement(self) -> bool:
        return self.calculate_reserve_ratio() >= self.minimum_reserve_ratio

    def available_liquidity(self) -> int:
        """Balance left over once the required reserves are set aside."""
        required = self.total_coverage_exposure * self.minimum_reserve_ratio // FULL_RATIO_BPS
        return max(0, self.total_balance - required)

    def update_balances(self, usdc_change: int, sol_change: int, timestamp: int) -> None:
        """Apply signed balance changes; decreases stop at zero."""
        self.total_usdc_balance = max(0, self.total_usdc_balance + usdc_change)
        self.total_sol_balance = max(0, self.total_sol_balance + sol_change)
        self._refresh(timestamp)

    def record_premium(self, amount: int, is_usdc: bool, timestamp: int) -> None:
        if is_usdc:
            self.total_premiums_collected_usdc += amount
            self.total_usdc_balance += amount
        else:
            self.total_premiums_collected_sol += amount
            self.total_sol_balance += amount
        self._refresh(timestamp)

    def record_payout(self, amount: int, is_usdc: bool, timestamp: int) -> None:
        """Pay out ``amount``; raises INSUFFICIENT_TREASURY if the balance is short."""
        if is_usdc:
            require(self.total_usdc_balance >= amount, ErrorCode.INSUFFICIENT_TREASURY)
            self.total_payouts_disbursed_usdc += amount
            self.total_usdc_balance -= amount
        else:
            require(self.total_sol_balance >= amount, ErrorCode.INSUFFICIENT_TREASURY)
            self.total_payouts_disbursed_sol += amount
            self.total_sol_balance -= amount
        self._refresh(timestamp)

    def _refresh(self, timestamp: int) -> None:
        self.current_reserve_ratio = self.calculate_reserve_ratio()
        self.last_update_timestamp = timestamp


@dataclass
class DepositInfo:
    amount: int
    token_type: TokenType
    depositor: str
    timestamp: int


@dataclass
class WithdrawalInfo:
    amount: int
    token_type: TokenType
    recipient: str
    timestamp: int
    reason: WithdrawalReason


@dataclass
class FinancialReport:
    """Snapshot of the treasury's financial position."""

    total_balance: int
    reserve_ratio: int
    total_premiums: int
    total_payouts: int
    net_result: int
    coverage_exposure: int
    available_liquidity: int
    transaction_count: int
    timestamp: int

    @classmethod
    def from_treasury(cls, treasury: Treasury) -> FinancialReport:
        premiums = treasury.total_premiums_collected_usdc + treasury.total_premiums_collected_sol
        payouts = treasury.total_payouts_disbursed_usdc + treasury.total_payouts_disbursed_sol
        return cls(
            total_balance=treasury.total_balance,
            reserve_ratio=treasury.current_reserve_ratio,
            total_premiums=premiums,
            total_payouts=payouts,
            net_result=premiums - payouts,
            coverage_exposure=treasury.total_coverage_exposure,
            available_liquidity=treasury.available_liquidity(),
            transaction_count=treasury.deposit_count + treasury.withdrawal_count,
            timestamp=treasury.last_update_timestamp,
        )