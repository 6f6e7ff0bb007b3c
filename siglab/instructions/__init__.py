"""Operations that act on the insurance ledger's state."""

__all__ = ["admin", "oracle", "payout", "policy", "treasury"]