"""
Directory of user accounts kept as JSON records in a key-value store.

Lookups by username and email go through two derived secondary indexes,
which are created with each account, repaired on login, and reconciled in
bulk by :class:`.reconcile.Reconciler`.
"""

from .directory import AccountDirectory
from .domain import Account, Policy, RebuildReport

__all__ = ('Account', 'AccountDirectory', 'Policy', 'RebuildReport')
