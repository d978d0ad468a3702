"""
Expense Tracker - Source Package

A personal expense tracker: expenses are added manually or by scanning
a receipt, then browsed, filtered and summarised.

DESIGN PRINCIPLES:
1. AI suggests → Human confirms → Store persists
2. Analytics are pure functions of the expense list
3. Failures resolve to safe defaults, never crash the UI
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
