"""
Expense Ledger - Source Package

A small personal ledger of expenses with filtered views,
summary statistics and JSON import/export.

DESIGN PRINCIPLES:
1. The store is the single owner of every record
2. Invalid amounts never enter the collection
3. Corrupt persisted data degrades to an empty ledger, never a crash
4. Imports repair what they can and drop what they can't
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Ledger Team"
