"""State records held by the insurance ledger."""

__all__ = ["master_contract", "oracle", "payout", "policy", "treasury"]