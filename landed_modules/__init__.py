"""
Landed Modules.

Orchestration layers over the landed kernel and engines.  Each module
contains:
- Domain models (the nouns)
- ORM models (persistence)
- Workflows (state machines)
- Service facades (the only public entry points)

Modules:
- landed_cost: Landed cost vouchers, per-category payables, party settlements
"""
