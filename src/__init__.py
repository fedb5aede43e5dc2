"""
Personal Ledger - Source Package

A personal-finance ledger API: users register and sign in, define
income/expense categories, and record and query transactions.

DESIGN PRINCIPLES:
1. Every read and write is scoped to the authenticated user
2. Malformed input is rejected at the boundary, before business logic
3. Uniqueness is enforced by the store, not only checked by the service
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Personal Ledger Team"
