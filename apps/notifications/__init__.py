"""Notifications app package.

In-app notification records written after a ledger transaction reaches
a terminal status.
"""
