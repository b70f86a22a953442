"""
Ordering Workflows.

State machine for shop requests.
"""

from dataclasses import dataclass

from stock_kernel.logging_config import get_logger
from stock_kernel.models.request import RequestStatus

logger = get_logger("modules.ordering.workflows")


@dataclass(frozen=True)
class Guard:
    """A condition for a transition."""
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition."""
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None
    records_movement: bool = False


@dataclass(frozen=True)
class Workflow:
    """A state machine definition."""
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]

    def transitions_for(self, from_state: str, action: str) -> tuple[Transition, ...]:
        """Transitions ``action`` may take out of ``from_state``."""
        return tuple(
            t for t in self.transitions
            if t.from_state == from_state and t.action == action
        )


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

ALL_LINES_DELIVERED = Guard(
    name="all_lines_delivered",
    description="Every line has delivered_qty == requested_qty",
)

LINES_OUTSTANDING = Guard(
    name="lines_outstanding",
    description="At least one line still has pending quantity",
)


# -----------------------------------------------------------------------------
# Request Workflow
# -----------------------------------------------------------------------------

REQUEST_WORKFLOW = Workflow(
    name="shop_request",
    description="Shop request processing",
    initial_state=RequestStatus.PENDING.value,
    states=(
        RequestStatus.PENDING.value,
        RequestStatus.FULFILLED.value,
        RequestStatus.CANCELLED.value,
    ),
    transitions=(
        Transition(
            RequestStatus.PENDING.value, RequestStatus.PENDING.value,
            action="deliver", guard=LINES_OUTSTANDING, records_movement=True,
        ),
        Transition(
            RequestStatus.PENDING.value, RequestStatus.FULFILLED.value,
            action="deliver", guard=ALL_LINES_DELIVERED, records_movement=True,
        ),
        Transition(
            RequestStatus.PENDING.value, RequestStatus.CANCELLED.value,
            action="cancel",
        ),
    ),
)

logger.debug(
    "ordering_request_workflow_registered",
    extra={
        "workflow_name": REQUEST_WORKFLOW.name,
        "state_count": len(REQUEST_WORKFLOW.states),
        "transition_count": len(REQUEST_WORKFLOW.transitions),
    },
)
