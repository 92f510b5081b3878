from typing import Optional
from urllib.parse import parse_qs, urlsplit

from wizard.flow.controller import NavigationController
from wizard.flow.host import Host
from wizard.flow.services import FlowServices, ServiceError
from wizard.flow.state import SessionState
from wizard.observability.logging import log


def _query_value(location: str, key: str) -> Optional[str]:
    values = parse_qs(urlsplit(location).query, keep_blank_values=True).get(key)
    return values[0] if values else None


async def bootstrap(host: Host, services: FlowServices) -> Optional[NavigationController]:
    """
    Load the flow and show its first view.

    The URL decides where to resume: ``step`` names the step (default: the
    first one) and ``paid=1`` marks the session as paid. When the flow
    cannot be fetched the view stays blank and None is returned.
    """
    try:
        config = await services.fetch_config()
    except ServiceError as e:
        log(event="flow_bootstrap_config_failed", statusCode=e.status_code, error=str(e)[:300])
        host.mount(None)
        return None

    controller = NavigationController(SessionState(config=config), host, services)
    if _query_value(host.location, "paid") == "1":
        controller.mark_paid()

    step_id = _query_value(host.location, "step")
    if not step_id and config.flow.steps:
        step_id = config.flow.steps[0].id
    controller.start(step_id or None)
    return controller
