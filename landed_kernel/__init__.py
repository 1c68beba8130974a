"""
Landed Kernel - shared infrastructure for the landed-cost ledger.

Provides:
- Exact 3-decimal money arithmetic (KWD)
- Typed, coded exceptions
- Structured JSON logging
- SQLAlchemy persistence base, engine and session scope
- Directory services for parties, purchase orders, payments and numbering
"""

__version__ = "0.1.0"
