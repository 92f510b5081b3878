"""
Navigation controller: the single owner of ``SessionState``.

Every step transition goes through ``navigate``; every mutation of the
session (collected data, verdict, paid flag) goes through a method here.
Async collaborator calls take a ``NavigationTicket`` when they start and
apply their result only if the user is still on the view that started
them.
"""
from typing import Dict, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from wizard.flow.host import Host
from wizard.flow.models import AiCallStep, FormStep, find_step, step_after
from wizard.flow.renderer import render_step
from wizard.flow.services import FlowServices, ServiceError
from wizard.flow.state import CHECKOUT_FAILED, CHECKOUT_LEFT, CHECKOUT_STALE, NavigationTicket, SessionState
from wizard.observability.logging import log

VERDICT_FALLBACK = "Something went wrong generating the verdict."
COPIED_MESSAGE = "Verdict copied to clipboard."


def _set_query_param(location: str, key: str, value: str) -> str:
    # Replace the first occurrence in place (dropping repeats) or append, leaving other params alone
    parts = urlsplit(location)
    pairs = parse_qsl(parts.query, keep_blank_values=True)
    out = []
    replaced = False
    for k, v in pairs:
        if k == key:
            if not replaced:
                out.append((k, value))
                replaced = True
            continue
        out.append((k, v))
    if not replaced:
        out.append((key, value))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(out), parts.fragment))


class NavigationController:
    def __init__(self, state: SessionState, host: Host, services: FlowServices):
        self.state = state
        self.host = host
        self.services = services

    # --- reads -------------------------------------------------------------
    @property
    def config(self):
        return self.state.config

    @property
    def current_step(self):
        return find_step(self.state.config, self.state.currentStepId)

    def ticket(self) -> NavigationTicket:
        return NavigationTicket(self.state.currentStepId, self.state.navigationCount)

    def is_current(self, ticket: NavigationTicket) -> bool:
        return ticket == self.ticket()

    # --- state transitions -------------------------------------------------
    def start(self, step_id: Optional[str]) -> None:
        """Initial step on load; the URL already describes it, so it is left untouched."""
        self.state.currentStepId = step_id
        self.render()

    def navigate(self, step_id: Optional[str]) -> None:
        self.state.currentStepId = step_id
        self.state.navigationCount += 1
        location = _set_query_param(self.host.location, "step", step_id or "")
        if self.state.isPaid:
            location = _set_query_param(location, "paid", "1")
        self.host.replace_url(location)
        self.render()

    def mark_paid(self) -> None:
        self.state.isPaid = True

    def record_data(self, values: Dict[str, str]) -> None:
        """Store non-empty values for known data-model fields, overwriting earlier ones."""
        known = self.state.config.data_model.fields
        for key, value in values.items():
            if key in known and value:
                self.state.data[key] = value

    def resume(self, data: Optional[Dict[str, str]] = None, verdict: str = "") -> None:
        """Restore session values the page itself was holding (server-rendered round trips)."""
        self.record_data(data or {})
        if verdict:
            self.state.verdict = verdict
        self.render()

    def render(self) -> None:
        step = self.current_step
        self.host.mount(render_step(step, self) if step is not None else None)

    # --- actions -----------------------------------------------------------
    async def handle_action(self, action) -> None:
        kind = getattr(action, "type", None)
        if kind == "next":
            following = step_after(self.state.config, self.state.currentStepId)
            if following is not None:
                self.navigate(following.id)
            return

        if kind == "go_to":
            self.navigate(action.step_id)
            return

        if kind == "copy_to_clipboard":
            text = self.state.verdict or action.value or ""
            try:
                await self.host.write_clipboard(text)
            except Exception as e:
                log(event="flow_clipboard_failed", errorType=type(e).__name__)
            self.host.alert(COPIED_MESSAGE)
            return

        log(event="flow_action_ignored", actionType=kind, stepId=self.state.currentStepId)

    def submit_target(self, step: FormStep) -> Optional[str]:
        """Where a valid submission of ``step`` goes: the declared step, else the following one."""
        action = step.actions[0].action if step.actions else None
        declared = getattr(action, "step_id", None)
        if declared:
            return declared
        following = step_after(self.state.config, step.id)
        return following.id if following is not None else None

    async def submit_form(self, step: FormStep, values: Dict[str, str]) -> None:
        """Accept an already-validated submission."""
        self.record_data(values)
        target = self.submit_target(step)
        if target is None:
            log(event="flow_submit_no_target", stepId=step.id)
            return
        self.navigate(target)
        landed = self.current_step
        if isinstance(landed, AiCallStep):
            await self.run_ai_call(landed)

    async def run_ai_call(self, step: AiCallStep) -> None:
        ticket = self.ticket()
        try:
            verdict = await self.services.request_verdict(dict(self.state.data))
        except ServiceError as e:
            log(event="flow_verdict_failed", stepId=step.id, statusCode=e.status_code, error=str(e)[:300])
            verdict = VERDICT_FALLBACK

        if not self.is_current(ticket):
            log(event="flow_stale_completion_discarded", operation="verdict",
                startedOn=ticket.stepId, currentStep=self.state.currentStepId)
            return

        self.state.verdict = verdict
        result_step_id = step.result_step_id
        if not result_step_id:
            following = step_after(self.state.config, step.id)
            result_step_id = following.id if following is not None else None
        if result_step_id is None:
            log(event="flow_ai_call_no_result_step", stepId=step.id)
            return
        self.navigate(result_step_id)

    async def checkout(self) -> str:
        ticket = self.ticket()
        try:
            url = await self.services.create_checkout_session()
        except ServiceError as e:
            log(event="flow_checkout_failed", statusCode=e.status_code, error=str(e)[:300])
            return CHECKOUT_FAILED if self.is_current(ticket) else CHECKOUT_STALE

        if not self.is_current(ticket):
            log(event="flow_stale_completion_discarded", operation="checkout",
                startedOn=ticket.stepId, currentStep=self.state.currentStepId)
            return CHECKOUT_STALE
        self.host.leave(url)
        return CHECKOUT_LEFT
