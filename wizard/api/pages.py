"""
Server-rendered flow pages.

Each request runs the step engine in-process against a ``MemoryHost``:
GET bootstraps from the URL and renders the step; POST /flow/action
replays the clicked button (after filling any posted inputs) and answers
with either a redirect (navigation, leaving for checkout) or the
resulting page. Values the session collected so far travel inside the
page as hidden inputs; nothing is stored on the server.
"""
from typing import Dict, Optional, Tuple
from urllib.parse import urljoin, urlsplit, urlunsplit

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from wizard.api.templates import templates
from wizard.flow.bootstrap import bootstrap
from wizard.flow.controller import NavigationController
from wizard.flow.host import MemoryHost
from wizard.flow.loader import ConfigLoadError, load_flow_config
from wizard.flow.models import FlowConfig
from wizard.flow.renderer import ACTION_ID_ATTR
from wizard.flow.services import FlowServices, ServiceError
from wizard.flow.view import ViewNode
from wizard.llm.verdict import VerdictError, generate_verdict
from wizard.payments.checkout import CheckoutError, create_checkout_session, resolve_base_url

router = APIRouter()

ACTION_FIELD = "action_id"
LOCATION_FIELD = "location"
VERDICT_FIELD = "verdict"
CARRY_PREFIX = "carry."

_CONTROL_TAGS = ("input", "select")


class LocalFlowServices(FlowServices):
    """The engine's collaborators, answered in-process for the current request."""

    def __init__(self, request: Request):
        self._request = request
        self._config: Optional[FlowConfig] = None

    async def fetch_config(self) -> FlowConfig:
        try:
            self._config = await run_in_threadpool(load_flow_config)
        except ConfigLoadError as e:
            raise ServiceError(str(e), status_code=500) from e
        return self._config

    async def _flow(self) -> FlowConfig:
        return self._config or await self.fetch_config()

    async def create_checkout_session(self) -> str:
        config = await self._flow()
        base_url = resolve_base_url(self._request.headers)
        try:
            return await run_in_threadpool(create_checkout_session, config, base_url)
        except CheckoutError as e:
            raise ServiceError(str(e), status_code=500) from e

    async def request_verdict(self, data: Dict[str, str]) -> str:
        config = await self._flow()
        try:
            return await run_in_threadpool(generate_verdict, config, data)
        except VerdictError as e:
            raise ServiceError(str(e), status_code=500) from e


def _relative(location: str) -> str:
    parts = urlsplit(location)
    return urlunsplit(("", "", parts.path or "/", parts.query, ""))


def _safe_location(raw: Optional[str]) -> str:
    # Only same-origin paths; anything else restarts the flow
    value = (raw or "").strip()
    if not value.startswith("/") or value.startswith("//"):
        return "/"
    return value


def _hidden(name: str, value: str) -> ViewNode:
    return ViewNode("input", attrs={"type": "hidden", "name": name, "value": value})


def _postable(host: MemoryHost, controller: NavigationController) -> ViewNode:
    """Turn the mounted view into something a plain browser can post back."""
    view = host.view
    named = set()
    for node in view.walk():
        if node.tag == "button" and ACTION_ID_ATTR in node.attrs:
            node.attrs.update({"type": "submit", "name": ACTION_FIELD, "value": node.attrs[ACTION_ID_ATTR]})
        elif node.tag in _CONTROL_TAGS and node.attrs.get("name"):
            named.add(node.attrs["name"])

    form = view.find("form")
    if form is None:
        form = ViewNode("form", children=[view])
        view = form
    form.attrs.update({"method": "post", "action": "/flow/action"})
    form.append(_hidden(LOCATION_FIELD, _relative(host.location)))
    if controller.state.verdict:
        form.append(_hidden(VERDICT_FIELD, controller.state.verdict))
    for key, value in controller.state.data.items():
        if key not in named:
            form.append(_hidden(f"{CARRY_PREFIX}{key}", value))
    return view


def _page(request: Request, host: MemoryHost, controller: Optional[NavigationController]) -> HTMLResponse:
    body = ""
    if controller is not None and host.view is not None:
        body = _postable(host, controller).to_html()
    return templates.TemplateResponse(
        request,
        "flow.html",
        {
            "title": controller.config.app.name if controller is not None else "",
            "alerts": host.alerts,
            "body": body,
            "location": _relative(host.location),
            "clipboard": host.clipboard,
        },
    )


async def _open(request: Request, location: str) -> Tuple[MemoryHost, Optional[NavigationController]]:
    host = MemoryHost(location=location)
    controller = await bootstrap(host, LocalFlowServices(request))
    return host, controller


@router.post("/flow/action", response_class=HTMLResponse)
async def flow_action(request: Request):
    form = await request.form()
    location = urljoin(str(request.base_url), _safe_location(form.get(LOCATION_FIELD)))
    host, controller = await _open(request, location)
    if controller is None:
        return _page(request, host, controller)

    carried = {k[len(CARRY_PREFIX):]: str(v) for k, v in form.items() if k.startswith(CARRY_PREFIX)}
    controller.resume(data=carried, verdict=str(form.get(VERDICT_FIELD) or ""))

    view = host.view
    button = view.find_by_attr(ACTION_ID_ATTR, str(form.get(ACTION_FIELD) or "")) if view is not None else None
    if button is None or button.tag != "button":
        return _page(request, host, controller)

    for node in view.walk():
        name = node.attrs.get("name")
        if node.tag in _CONTROL_TAGS and name and name in form:
            node.value = form.get(name)

    before = host.location
    await button.click()

    if host.leftTo:
        return RedirectResponse(host.leftTo, status_code=303)
    page_held = controller.state.data or controller.state.verdict
    if host.location != before and not (page_held or host.alerts or host.clipboard is not None):
        return RedirectResponse(_relative(host.location), status_code=303)
    return _page(request, host, controller)


@router.get("/", response_class=HTMLResponse)
@router.get("/{path:path}", response_class=HTMLResponse, include_in_schema=False)
async def flow_page(request: Request, path: str = ""):
    host, controller = await _open(request, str(request.url))
    return _page(request, host, controller)
