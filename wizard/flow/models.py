"""
Flow configuration model.

Pure data: the JSON document served at /api/config, parsed into frozen
pydantic models. Steps, components and actions are tagged variants keyed
on their ``type`` field; a tag outside the known set parses into an
``Unknown*`` variant so that a newer config never breaks an older engine
(unknown steps render nothing, unknown actions do nothing).
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag


class FlowModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")


def _tag_of(known):
    def _tag(value: Any) -> str:
        kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
        return kind if kind in known else "unknown"
    return _tag


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------
class NextAction(FlowModel):
    type: Literal["next"] = "next"


class GoToAction(FlowModel):
    type: Literal["go_to"] = "go_to"
    step_id: str


class CopyToClipboardAction(FlowModel):
    type: Literal["copy_to_clipboard"] = "copy_to_clipboard"
    value: str = ""


class SubmitAction(FlowModel):
    # Form primary action; step_id=None means "the step after the form"
    type: Literal["submit"] = "submit"
    step_id: Optional[str] = None


class UnknownAction(FlowModel):
    type: str = ""


ACTION_TYPES = ("next", "go_to", "copy_to_clipboard", "submit")

Action = Annotated[
    Union[
        Annotated[NextAction, Tag("next")],
        Annotated[GoToAction, Tag("go_to")],
        Annotated[CopyToClipboardAction, Tag("copy_to_clipboard")],
        Annotated[SubmitAction, Tag("submit")],
        Annotated[UnknownAction, Tag("unknown")],
    ],
    Discriminator(_tag_of(ACTION_TYPES)),
]


# ---------------------------------------------------------------------------
# Screen components
# ---------------------------------------------------------------------------
class BulletsComponent(FlowModel):
    type: Literal["bullets"] = "bullets"
    items: List[str] = Field(default_factory=list)


class CtaComponent(FlowModel):
    type: Literal["cta"] = "cta"
    label: str
    action: Action


class CtaButton(FlowModel):
    label: str
    action: Action


class CtaRowComponent(FlowModel):
    type: Literal["cta_row"] = "cta_row"
    buttons: List[CtaButton] = Field(default_factory=list)


class MarkdownComponent(FlowModel):
    type: Literal["markdown"] = "markdown"
    source: str = ""


class UnknownComponent(FlowModel):
    type: str = ""


COMPONENT_TYPES = ("bullets", "cta", "cta_row", "markdown")

Component = Annotated[
    Union[
        Annotated[BulletsComponent, Tag("bullets")],
        Annotated[CtaComponent, Tag("cta")],
        Annotated[CtaRowComponent, Tag("cta_row")],
        Annotated[MarkdownComponent, Tag("markdown")],
        Annotated[UnknownComponent, Tag("unknown")],
    ],
    Discriminator(_tag_of(COMPONENT_TYPES)),
]


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------
class FieldRef(FlowModel):
    key: str
    label: str = ""
    # text | number | select; anything else renders as a text input
    component: str = "text"
    required: bool = False
    placeholder: Optional[str] = None


class FormAction(FlowModel):
    label: str
    action: Optional[Action] = None


class Pricing(FlowModel):
    currency: str
    amount: Union[int, float]


class PromptSpec(FlowModel):
    system: str = ""
    user: str = ""


class ModelSpec(FlowModel):
    name: str = ""


class StepBase(FlowModel):
    id: str
    title: str = ""
    subtitle: Optional[str] = None
    description: Optional[str] = None


class ScreenStep(StepBase):
    type: Literal["screen"] = "screen"
    components: List[Component] = Field(default_factory=list)


class FormStep(StepBase):
    type: Literal["form"] = "form"
    fields: List[FieldRef] = Field(default_factory=list)
    actions: List[FormAction] = Field(default_factory=list)


class PaymentStep(StepBase):
    type: Literal["payment"] = "payment"
    pricing: Pricing
    # Where checkout returns to; None means the step after this one
    success_step_id: Optional[str] = None
    cancel_step_id: str = "exit"


class AiCallStep(StepBase):
    type: Literal["ai_call"] = "ai_call"
    prompt: PromptSpec = Field(default_factory=PromptSpec)
    model: ModelSpec = Field(default_factory=ModelSpec)
    # Where the verdict is shown; None means the step after this one
    result_step_id: Optional[str] = None


class UnknownStep(StepBase):
    type: str = ""


STEP_TYPES = ("screen", "form", "payment", "ai_call")

Step = Annotated[
    Union[
        Annotated[ScreenStep, Tag("screen")],
        Annotated[FormStep, Tag("form")],
        Annotated[PaymentStep, Tag("payment")],
        Annotated[AiCallStep, Tag("ai_call")],
        Annotated[UnknownStep, Tag("unknown")],
    ],
    Discriminator(_tag_of(STEP_TYPES)),
]


# ---------------------------------------------------------------------------
# Root document
# ---------------------------------------------------------------------------
class FieldDefinition(FlowModel):
    type: Optional[str] = None
    options: List[str] = Field(default_factory=list)


class DataModel(FlowModel):
    fields: Dict[str, FieldDefinition] = Field(default_factory=dict)


class AppInfo(FlowModel):
    name: str = ""


class Flow(FlowModel):
    steps: List[Step] = Field(default_factory=list)


class FlowConfig(FlowModel):
    app: AppInfo = Field(default_factory=AppInfo)
    data_model: DataModel = Field(default_factory=DataModel)
    flow: Flow = Field(default_factory=Flow)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
def find_step(config: FlowConfig, step_id: Optional[str]):
    if not step_id:
        return None
    for step in config.flow.steps:
        if step.id == step_id:
            return step
    return None


def step_after(config: FlowConfig, step_id: Optional[str]):
    """Step following ``step_id`` in flow order, or None when last / not found."""
    steps = config.flow.steps
    for index, step in enumerate(steps):
        if step.id == step_id:
            return steps[index + 1] if index + 1 < len(steps) else None
    return None


def first_step_of_type(config: FlowConfig, step_type: str):
    for step in config.flow.steps:
        if step.type == step_type:
            return step
    return None
