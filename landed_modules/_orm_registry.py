"""
Module ORM Registry (``landed_modules._orm_registry``).

Responsibility
--------------
Ensure every SQLAlchemy ORM model is imported so that ``Base.metadata``
holds its table definition before tables are created.

Architecture position
---------------------
**Modules layer** -- utility.  Imports kernel models and the landed-cost
ORM.  The kernel reaches it only through ``create_tables()``.

Usage
-----
Scripts and ``tests/conftest.py`` call ``create_all_tables()``.
"""


def import_all_orm_models() -> None:
    """Import kernel models, then every module ORM.  Idempotent."""
    # Kernel tables first (parties, purchase orders, payments, sequences)
    import landed_kernel.models  # noqa: F401
    import landed_modules.landed_cost.orm  # noqa: F401


def create_all_tables() -> None:
    """
    Create kernel and module tables.

    Preconditions:
        Engine must be initialized via ``init_engine_from_url()``.
    """
    from landed_kernel.db.engine import create_tables

    import_all_orm_models()
    create_tables()
