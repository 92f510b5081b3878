from dataclasses import dataclass, field
from typing import Dict, Optional

from wizard.flow.models import FlowConfig


@dataclass
class SessionState:
    # Owned by NavigationController; everything else reads it
    config: FlowConfig
    currentStepId: Optional[str] = None
    # field key -> raw submitted value; keys are always data_model fields
    data: Dict[str, str] = field(default_factory=dict)
    verdict: str = ""
    # One-way: never reverts once set
    isPaid: bool = False

    # Bumped by every navigation; used to recognise stale async completions
    navigationCount: int = 0


@dataclass(frozen=True)
class NavigationTicket:
    """Identity of the view that started an async operation."""
    stepId: Optional[str]
    navigationCount: int


# Outcomes of NavigationController.checkout()
CHECKOUT_LEFT = "left"
CHECKOUT_FAILED = "failed"
CHECKOUT_STALE = "stale"
