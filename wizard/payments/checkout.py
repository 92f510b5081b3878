"""
Hosted checkout sessions for the flow's payment step.

Live mode creates a Stripe Checkout Session through Stripe's REST API;
mock services mode skips Stripe and returns the URL the user would have
been sent back to after paying.
"""
import time
from typing import Mapping

import httpx

from wizard.flow.models import FlowConfig, first_step_of_type, step_after
from wizard.observability.logging import log
from wizard.settings import settings


class CheckoutError(RuntimeError):
    """User-facing reason a checkout session could not be created."""


def resolve_base_url(headers: Mapping[str, str]) -> str:
    """Public origin of this deployment, without a trailing slash."""
    if settings.PUBLIC_BASE_URL:
        return settings.PUBLIC_BASE_URL.rstrip("/")
    protocol = headers.get("x-forwarded-proto") or "http"
    return f"{protocol}://{headers.get('host', 'localhost')}"


def return_step_ids(config: FlowConfig):
    """(payment step, step to resume on success, step to resume on cancel)."""
    step = first_step_of_type(config, "payment")
    if step is None:
        raise CheckoutError("No payment step configured.")
    success = step.success_step_id
    if not success:
        following = step_after(config, step.id)
        if following is None:
            raise CheckoutError("No step configured after payment.")
        success = following.id
    return step, success, step.cancel_step_id


def _unit_amount(amount) -> int:
    # Stripe amounts are in the currency's minor unit
    return int(round(float(amount) * 100))


def create_checkout_session(config: FlowConfig, base_url: str) -> str:
    """Return the URL of a hosted checkout page for the flow's price."""
    step, success_step, cancel_step = return_step_ids(config)

    if settings.MOCK_SERVICES:
        return f"{base_url}/?paid=1&step={success_step}"

    if not settings.STRIPE_SECRET_KEY:
        raise CheckoutError("Missing STRIPE_SECRET_KEY.")

    form = {
        "mode": "payment",
        "line_items[0][price_data][currency]": step.pricing.currency.lower(),
        "line_items[0][price_data][product_data][name]": config.app.name,
        "line_items[0][price_data][unit_amount]": str(_unit_amount(step.pricing.amount)),
        "line_items[0][quantity]": "1",
        "success_url": f"{base_url}/?paid=1&step={success_step}&session_id={{CHECKOUT_SESSION_ID}}",
        "cancel_url": f"{base_url}/?step={cancel_step}",
    }
    start = time.time()
    log(event="checkout_create_attempt", currency=step.pricing.currency, amount=step.pricing.amount)
    try:
        with httpx.Client(timeout=settings.CHECKOUT_TIMEOUT_SEC) as client:
            resp = client.post(
                f"{settings.STRIPE_API_BASE.rstrip('/')}/checkout/sessions",
                auth=(settings.STRIPE_SECRET_KEY, ""),
                headers={"Stripe-Version": settings.STRIPE_API_VERSION},
                data=form,
            )
        elapsed_ms = int((time.time() - start) * 1000)
        if not resp.is_success:
            log(event="checkout_create_failed", statusCode=int(resp.status_code),
                elapsedMs=elapsed_ms, responseText=(resp.text or "")[:500])
            raise CheckoutError("Failed to create Stripe session.")
        url = resp.json().get("url")
    except (httpx.HTTPError, ValueError) as e:
        log(event="checkout_create_exception", errorType=type(e).__name__, error=str(e)[:300],
            elapsedMs=int((time.time() - start) * 1000))
        raise CheckoutError("Failed to create Stripe session.") from e

    if not url:
        raise CheckoutError("Failed to create Stripe session.")
    log(event="checkout_create_success", elapsedMs=elapsed_ms)
    return url
