"""Parametric insurance ledger: policies, oracles, payouts and treasury."""

__version__ = "0.1.0"