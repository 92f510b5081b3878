"""
Step renderer.

``render_step`` turns one step into a ``ViewNode`` tree, dispatching on
the step's type tag; an unknown type renders nothing. Event handlers
reach the session only through the controller passed in.
"""
from typing import Dict, List, Optional

from wizard.flow.state import CHECKOUT_FAILED
from wizard.flow.validator import required_error, validate_field
from wizard.flow.view import ViewNode

PAY_LABEL = "Pay & Start"
PAY_BUSY_LABEL = "Redirecting…"
CANCEL_LABEL = "Cancel"
CHECKOUT_FAILED_MESSAGE = "Unable to start checkout. Please try again."
SELECT_PLACEHOLDER = "Select an option"
DEFAULT_SUBMIT_LABEL = "Continue"

# data-action-id values identify buttons across a server round trip
ACTION_ID_ATTR = "data-action-id"


def _button(label: str, style: str, action_id: str, on_click=None) -> ViewNode:
    return ViewNode(
        "button",
        text=label,
        className=style,
        attrs={"type": "button", ACTION_ID_ATTR: action_id},
        onClick=on_click,
    )


def _action_handler(controller, action):
    async def _on_click():
        await controller.handle_action(action)
    return _on_click


def _heading(step, subtitle: Optional[str]) -> ViewNode:
    wrapper = ViewNode("div", attrs={"data-step-id": step.id, "data-step-type": step.type})
    wrapper.append(ViewNode("h1", text=step.title))
    if subtitle:
        wrapper.append(ViewNode("p", text=subtitle, className="subtitle"))
    return wrapper


# ---------------------------------------------------------------------------
# screen
# ---------------------------------------------------------------------------
def _render_bullets(component, index, controller) -> ViewNode:
    bullets = ViewNode("ul", className="bullets")
    for item in component.items:
        bullets.append(ViewNode("li", text=item))
    return bullets


def _render_cta(component, index, controller) -> ViewNode:
    actions = ViewNode("div", className="actions")
    actions.append(_button(component.label, "primary", f"c{index}", _action_handler(controller, component.action)))
    return actions


def _render_cta_row(component, index, controller) -> ViewNode:
    actions = ViewNode("div", className="actions")
    for position, button in enumerate(component.buttons):
        style = "primary" if position == 0 else "secondary"
        actions.append(_button(button.label, style, f"c{index}.b{position}", _action_handler(controller, button.action)))
    return actions


def _render_markdown(component, index, controller) -> ViewNode:
    return ViewNode("div", text=controller.state.verdict or component.source or "", className="verdict")


_COMPONENT_RENDERERS = {
    "bullets": _render_bullets,
    "cta": _render_cta,
    "cta_row": _render_cta_row,
    "markdown": _render_markdown,
}


def _render_screen(step, controller) -> ViewNode:
    wrapper = _heading(step, step.subtitle)
    for index, component in enumerate(step.components):
        renderer = _COMPONENT_RENDERERS.get(component.type)
        if renderer is not None:
            wrapper.append(renderer(component, index, controller))
    return wrapper


# ---------------------------------------------------------------------------
# form
# ---------------------------------------------------------------------------
def _render_control(field_ref, controller) -> ViewNode:
    attrs = {"id": field_ref.key, "name": field_ref.key}
    if field_ref.component == "select":
        control = ViewNode("select", attrs=attrs)
        control.append(ViewNode("option", text=SELECT_PLACEHOLDER, attrs={"value": ""}))
        definition = controller.config.data_model.fields.get(field_ref.key)
        for option in (definition.options if definition is not None else []):
            control.append(ViewNode("option", text=option, attrs={"value": option}))
    else:
        attrs["type"] = "number" if field_ref.component == "number" else "text"
        if field_ref.placeholder:
            attrs["placeholder"] = field_ref.placeholder
        control = ViewNode("input", attrs=attrs)

    existing = controller.state.data.get(field_ref.key)
    if existing:
        control.value = existing
    return control


def _render_form(step, controller) -> ViewNode:
    wrapper = _heading(step, step.subtitle)
    form = wrapper.append(ViewNode("form", attrs={"id": f"form-{step.id}"}))

    controls: List[ViewNode] = []
    helpers: List[ViewNode] = []
    for field_ref in step.fields:
        field_wrapper = form.append(ViewNode("div", className="form-field"))
        field_wrapper.append(ViewNode("label", text=field_ref.label, attrs={"for": field_ref.key}))
        controls.append(field_wrapper.append(_render_control(field_ref, controller)))
        helpers.append(field_wrapper.append(ViewNode("div", className="helper")))

    async def _on_submit():
        values: Dict[str, str] = {}
        has_error = False
        for field_ref, control, helper in zip(step.fields, controls, helpers):
            value = control.value
            values[field_ref.key] = value
            error = required_error(field_ref.required, value)
            if not error and value:
                error = validate_field(field_ref.key, value)
            helper.text = error
            if error:
                has_error = True

        if has_error:
            return
        await controller.submit_form(step, values)

    label = step.actions[0].label if step.actions else DEFAULT_SUBMIT_LABEL
    actions = form.append(ViewNode("div", className="actions"))
    actions.append(_button(label, "primary", "submit", _on_submit))
    return wrapper


# ---------------------------------------------------------------------------
# payment
# ---------------------------------------------------------------------------
def _format_amount(amount) -> str:
    # 19.0 -> "19", 19.5 -> "19.5"
    if isinstance(amount, float) and amount.is_integer():
        return str(int(amount))
    return str(amount)


def _render_payment(step, controller) -> ViewNode:
    wrapper = _heading(step, step.description)
    price = f"{step.pricing.currency} {_format_amount(step.pricing.amount)}"
    wrapper.append(ViewNode("div", text=price, className="notice"))

    actions = wrapper.append(ViewNode("div", className="actions"))
    pay = actions.append(_button(PAY_LABEL, "primary", "pay"))

    async def _on_pay():
        pay.disabled = True
        pay.text = PAY_BUSY_LABEL
        outcome = await controller.checkout()
        if outcome == CHECKOUT_FAILED:
            pay.disabled = False
            pay.text = PAY_LABEL
            controller.host.alert(CHECKOUT_FAILED_MESSAGE)

    def _on_cancel():
        controller.navigate(step.cancel_step_id)

    pay.onClick = _on_pay
    actions.append(_button(CANCEL_LABEL, "secondary", "cancel", _on_cancel))
    return wrapper


# ---------------------------------------------------------------------------
# ai_call
# ---------------------------------------------------------------------------
def _render_ai_call(step, controller) -> ViewNode:
    # Shown while the verdict request is in flight; nothing to click
    return _heading(step, None)


_STEP_RENDERERS = {
    "screen": _render_screen,
    "form": _render_form,
    "payment": _render_payment,
    "ai_call": _render_ai_call,
}


def render_step(step, controller) -> Optional[ViewNode]:
    renderer = _STEP_RENDERERS.get(getattr(step, "type", None))
    if renderer is None:
        return None
    return renderer(step, controller)
