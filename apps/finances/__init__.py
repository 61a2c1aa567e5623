"""Finances app package.

Member contribution ledger and its Paystack mobile-money integration:
initiation, webhook reconciliation and verification.
"""
