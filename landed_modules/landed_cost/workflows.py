"""
Landed Cost Workflows (``landed_modules.landed_cost.workflows``).

Responsibility
--------------
Declares the state machines for a voucher's per-category payable and for
the party settlement lifecycle.  Guards express preconditions for
transitions; ``records_payment=True`` marks transitions that write an
outgoing payment.

Architecture position
---------------------
**Modules layer** -- declarative workflow definitions.  Imports canonical
Guard, Transition, Workflow from ``landed_kernel.domain.workflow``.
Evaluated by ``payables.PayableStateMachine`` and ``SettlementService``.

Invariants enforced
-------------------
* Both workflows are terminal in their final state: a paid payable is
  never re-opened and a finalized settlement never re-finalized.
"""

from landed_kernel.domain.workflow import Guard, Transition, Workflow
from landed_kernel.logging_config import get_logger

logger = get_logger("modules.landed_cost.workflows")


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

PAYEE_ASSIGNED = Guard(
    name="payee_assigned",
    description="The category has a party to pay",
)

AMOUNT_POSITIVE = Guard(
    name="amount_positive",
    description="The category total is greater than zero",
)

ACCOUNT_SELECTED = Guard(
    name="account_selected",
    description="A cash or bank account was chosen for the settlement payment",
)


# -----------------------------------------------------------------------------
# Payable Workflow (one instance per voucher per category)
# -----------------------------------------------------------------------------

PAYABLE_WORKFLOW = Workflow(
    name="landed_cost_payable",
    description="Freight, partner-profit or packing payable of a voucher",
    initial_state="pending",
    states=("pending", "paid"),
    terminal_states=("paid",),
    transitions=(
        Transition("pending", "paid", action="mark_paid", guard=PAYEE_ASSIGNED, records_payment=True),
    ),
)

# -----------------------------------------------------------------------------
# Settlement Workflow
# -----------------------------------------------------------------------------

SETTLEMENT_WORKFLOW = Workflow(
    name="party_settlement",
    description="Batched settlement of one party's dues",
    initial_state="pending",
    states=("pending", "finalized"),
    terminal_states=("finalized",),
    transitions=(
        Transition("pending", "finalized", action="finalize", guard=ACCOUNT_SELECTED, records_payment=True),
    ),
)

logger.info(
    "landed_cost_workflows_registered",
    extra={
        "workflows": [PAYABLE_WORKFLOW.name, SETTLEMENT_WORKFLOW.name],
        "guards": [PAYEE_ASSIGNED.name, AMOUNT_POSITIVE.name, ACCOUNT_SELECTED.name],
    },
)
