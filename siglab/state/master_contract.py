"""The master insurance contract account."""

from __future__ import annotations

from dataclasses import dataclass, field

from siglab.constants import DEFAULT_PUBKEY
from siglab.state.policy import Policy


@dataclass
class MasterInsuranceContract:
    """Global state: authority, totals, oracle registry and pause flag."""

    authority: str
    reserve_ratio: int
    max_oracles: int
    min_consensus_threshold: int
    policies: list[Policy] = field(default_factory=list)
    treasury_account: str = DEFAULT_PUBKEY
    total_premiums_collected: int = 0
    total_payouts_disbursed: int = 0
    active_policies_count: int = 0
    is_paused: bool = False
    created_at: int = 0
    updated_at: int = 0
    oracle_registry: list[str] = field(default_factory=list)
    bump: int = 0

    @staticmethod
    def space() -> int:
        """Bytes reserved for the master contract account."""
        return (
            8  # discriminator
            + 32  # authority
            + 4 + 32 * 50  # policies, up to 50
            + 32  # treasury_account
            + 8  # total_premiums_collected
            + 8  # total_payouts_disbursed
            + 8  # active_policies_count
            + 8  # reserve_ratio
            + 1  # is_paused
            + 8  # created_at
            + 8  # updated_at
            + 4 + 32 * 10  # oracle_registry, up to 10
            + 1  # max_oracles
            + 1  # min_consensus_threshold
            + 1  # bump
        )