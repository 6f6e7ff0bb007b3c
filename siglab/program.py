"""The insurance program: every instruction, run against one shared set of accounts."""

from __future__ import annotations

import copy
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Optional

from siglab.errors import ErrorCode, require
from siglab.instructions import admin as admin_ix
from siglab.instructions import oracle as oracle_ix
from siglab.instructions import payout as payout_ix
from siglab.instructions import policy as policy_ix
from siglab.instructions import treasury as treasury_ix
from siglab.instructions.admin import InitializeParams
from siglab.instructions.policy import CreatePolicyParams
from siglab.state.master_contract import MasterInsuranceContract
from siglab.state.oracle import Oracle, OracleData, OracleType
from siglab.state.payout import PendingPayout
from siglab.state.policy import Policy
from siglab.state.treasury import TokenType, Treasury, WithdrawalReason

_STATE = (
    "master_contract",
    "treasury",
    "policies",
    "pending_payouts",
    "oracles",
    "balances",
    "events",
)


def _system_clock() -> int:
    return int(time.time())


def _oracle_key(oracle_id: str) -> str:
    """Address of the oracle account derived from its identifier."""
    return f"oracle:{oracle_id}"


class InsuranceProgram:
    """Holds the program's accounts and runs each instruction atomically.

    An instruction that raises leaves every account exactly as it was before
    the instruction started. Emitted events are appended to ``events``.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        self._clock = clock if clock is not None else _system_clock
        self.master_contract: Optional[MasterInsuranceContract] = None
        self.treasury: Optional[Treasury] = None
        self.policies: dict[str, Policy] = {}
        self.pending_payouts: dict[str, PendingPayout] = {}
        self.oracles: dict[str, Oracle] = {}
        self.balances: dict[str, int] = {}
        self.events: list[object] = []

    @contextmanager
    def _transaction(self) -> Iterator[int]:
        saved = copy.deepcopy({name: getattr(self, name) for name in _STATE})
        try:
            yield int(self._clock())
        except Exception:
            for name, value in saved.items():
                setattr(self, name, value)
            raise

    def _master(self) -> MasterInsuranceContract:
        require(self.master_contract is not None, ErrorCode.INVALID_ADMIN_OPERATION)
        assert self.master_contract is not None
        return self.master_contract

    def _treasury(self) -> Treasury:
        require(self.treasury is not None, ErrorCode.TREASURY_OPERATION_FAILED)
        assert self.treasury is not None
        return self.treasury

    def _policy(self, policy_id: str) -> Policy:
        require(policy_id in self.policies, ErrorCode.POLICY_NOT_FOUND)
        return self.policies[policy_id]

    def _pending(self, policy_id: str) -> PendingPayout:
        require(policy_id in self.pending_payouts, ErrorCode.PAYOUT_CONDITIONS_NOT_MET)
        return self.pending_payouts[policy_id]

    def _oracle(self, oracle_id: str) -> Oracle:
        require(oracle_id in self.oracles, ErrorCode.ORACLE_NOT_REGISTERED)
        return self.oracles[oracle_id]

    # Administration

    def initialize_master_contract(
        self, admin: str, params: InitializeParams
    ) -> MasterInsuranceContract:
        with self._transaction() as now:
            require(self.master_contract is None, ErrorCode.INVALID_ADMIN_OPERATION)
            self.master_contract = admin_ix.initialize_master_contract(admin, params, now)
            return self.master_contract

    def pause_contract(self, admin: str) -> None:
        with self._transaction() as now:
            self.events.append(admin_ix.pause_contract(self._master(), admin, now))

    def resume_contract(self, admin: str) -> None:
        with self._transaction() as now:
            self.events.append(admin_ix.resume_contract(self._master(), admin, now))

    def withdraw_treasury(self, admin: str, amount: int, token_type: TokenType) -> None:
        with self._transaction() as now:
            event = admin_ix.withdraw_treasury(
                self._master(), self._treasury(), admin, amount, token_type, now
            )
            self.events.append(event)

    def update_reserve_ratio(self, admin: str, new_reserve_ratio: int) -> None:
        with self._transaction() as now:
            event = admin_ix.update_reserve_ratio(
                self._master(), self._treasury(), admin, new_reserve_ratio, now
            )
            self.events.append(event)

    def transfer_authority(self, current_admin: str, new_admin: str) -> None:
        with self._transaction() as now:
            admin_ix.transfer_authority(self._master(), current_admin, new_admin, now)

    # Policies

    def create_policy(self, policy_holder: str, params: CreatePolicyParams) -> Policy:
        with self._transaction() as now:
            policy = policy_ix.create_policy(self._master(), policy_holder, params, now)
            require(policy.id not in self.policies, ErrorCode.POLICY_ALREADY_EXISTS)
            self.policies[policy.id] = policy
            return policy

    def pay_premium(self, payer: str, policy_id: str, amount: int) -> None:
        with self._transaction() as now:
            policy_ix.pay_premium(self._master(), self._policy(policy_id), payer, amount, now)

    # Payouts

    def trigger_payout(
        self, beneficiary: str, policy_id: str, oracle_value: int
    ) -> PendingPayout:
        with self._transaction() as now:
            pending, event = payout_ix.trigger_payout(
                self._master(),
                self._policy(policy_id),
                beneficiary,
                policy_id,
                oracle_value,
                now,
            )
            require(
                policy_id not in self.pending_payouts, ErrorCode.CLAIM_ALREADY_PROCESSED
            )
            self.pending_payouts[policy_id] = pending
            self.events.append(event)
            return pending

    def execute_payout(self, beneficiary: str, policy_id: str) -> None:
        with self._transaction() as now:
            master = self._master()
            pending = self._pending(policy_id)
            event = payout_ix.execute_payout(
                master,
                self._policy(pending.policy_id),
                pending,
                beneficiary,
                master.treasury_account,
                self.balances,
                now,
            )
            del self.pending_payouts[policy_id]
            self.events.append(event)

    def approve_payout(self, admin: str, policy_id: str) -> None:
        with self._transaction() as now:
            event = payout_ix.approve_payout(
                self._master(), self._pending(policy_id), admin, now
            )
            self.events.append(event)

    # Oracles

    def register_oracle(
        self,
        admin: str,
        oracle_authority: str,
        oracle_id: str,
        oracle_type: OracleType,
        data_feed_address: str,
    ) -> Oracle:
        with self._transaction():
            require(oracle_id not in self.oracles, ErrorCode.ORACLE_ALREADY_REGISTERED)
            oracle = oracle_ix.register_oracle(
                self._master(),
                admin,
                _oracle_key(oracle_id),
                oracle_authority,
                oracle_id,
                oracle_type,
                data_feed_address,
            )
            self.oracles[oracle_id] = oracle
            return oracle

    def unregister_oracle(self, admin: str, oracle_id: str) -> None:
        with self._transaction():
            self._oracle(oracle_id)
            oracle_ix.unregister_oracle(self._master(), admin, _oracle_key(oracle_id))
            del self.oracles[oracle_id]

    def update_oracle_data(self, oracle_authority: str, oracle_id: str, data: OracleData) -> None:
        with self._transaction() as now:
            oracle_ix.update_oracle_data(self._oracle(oracle_id), oracle_authority, data, now)

    def update_oracle_status(self, admin: str, oracle_id: str, is_active: bool) -> None:
        with self._transaction():
            oracle_ix.update_oracle_status(
                self._master(), self._oracle(oracle_id), admin, is_active
            )

    def emergency_oracle_override(
        self, admin: str, oracle_id: str, corrected_data: OracleData, reason: str
    ) -> None:
        with self._transaction() as now:
            oracle_ix.emergency_oracle_override(
                self._master(), self._oracle(oracle_id), admin, corrected_data, reason, now
            )

    def reset_oracle_circuit_breaker(self, admin: str, oracle_id: str) -> None:
        with self._transaction():
            oracle_ix.reset_oracle_circuit_breaker(
                self._master(), self._oracle(oracle_id), admin
            )

    # Treasury

    def initialize_treasury(self, admin: str, minimum_reserve_ratio: int) -> Treasury:
        with self._transaction() as now:
            require(self.treasury is None, ErrorCode.TREASURY_OPERATION_FAILED)
            self.treasury = treasury_ix.initialize_treasury(admin, minimum_reserve_ratio, now)
            return self.treasury

    def deposit_funds(self, depositor: str, amount: int, token_type: TokenType) -> None:
        with self._transaction() as now:
            treasury_ix.deposit_funds(self._treasury(), amount, token_type, now)

    def withdraw_funds(
        self, admin: str, amount: int, token_type: TokenType, reason: WithdrawalReason
    ) -> None:
        with self._transaction() as now:
            event = treasury_ix.withdraw_funds(
                self._treasury(), admin, amount, token_type, reason, now
            )
            self.events.append(event)

    def update_treasury_balance(self) -> None:
        with self._transaction() as now:
            treasury_ix.update_treasury_balance(self._treasury(), now)