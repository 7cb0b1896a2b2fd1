"""
Personal Ledger - Source Package

A personal finance ledger for recording income and expense transactions
across one or more user accounts, persisted to flat files.

DESIGN PRINCIPLES:
1. The in-memory stores are the single source of truth for a session
2. Fail visibly on bad indexes, bad dates and unreadable files
3. Tolerate malformed transaction lines, but count them
4. Every session-level action is auditable
5. Other users' records pass through untouched
"""

__version__ = "1.0.0"
__author__ = "Personal Ledger Team"
