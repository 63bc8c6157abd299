"""
LifeLedger - Source Package

A local-only personal finance tracker: record income and expenses, label
them with categories and payment methods, set daily/weekly/monthly budgets
and see where the money went.

DESIGN PRINCIPLES:
1. Everything stays on the user's machine
2. Reads never fail, writes fail loudly
3. Statistics are recomputed from the full history, never cached
4. Storage layer is swappable
"""

__version__ = "3.0.0"
