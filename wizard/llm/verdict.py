"""
Verdict generation for the flow's ai_call step.

The prompt comes from the flow document: the step's system message and a
user template whose ``{{key}}`` placeholders are filled from the submitted
field values. In mock services mode a fixed verdict is returned instead.
"""
import re
import time
from typing import Any, Dict

import httpx

from wizard.flow.models import FlowConfig, first_step_of_type
from wizard.llm.openai_client import OpenAIError, OpenAIHTTPError, chat_completion
from wizard.observability.logging import log
from wizard.settings import settings

_PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")

MOCK_VERDICT = "\n".join([
    "SECTION 1: VERDICT",
    "Fix. The numbers point to a controllable issue, not a total failure.",
    "",
    "SECTION 2: PRIMARY FAILURE POINT",
    "Creative",
    "",
    "SECTION 3: WHY THIS IS THE FAILURE",
    "CTR is below 1% and spend is steady, so the ads are not breaking through. With limited results, stability is weak.",
    "",
    "SECTION 4: HARD TRUTH",
    "Your ads are being ignored because the creative is not compelling enough.",
    "",
    "SECTION 5: WHAT NOT TO TOUCH",
    "Do not change your campaign objective right now.",
    "",
    "SECTION 6: NEXT 72 HOURS",
    "Replace creatives: launch 3 new variations focused on a single clear offer.",
    "STOP LOSS: If cost per result doesn’t improve by at least 20% within 72 hours, then pause the ad set.",
    "",
    "SECTION 7: CONFIDENCE NOTE",
    "Moderate confidence based on the inputs provided.",
])


class VerdictError(RuntimeError):
    """User-facing reason the verdict could not be produced."""


def fill_template(template: str, values: Dict[str, Any]) -> str:
    """Replace ``{{key}}`` with ``values[key]``; missing or None values become ""."""
    def _sub(match):
        value = values.get(match.group(1))
        return "" if value is None else str(value)
    return _PLACEHOLDER_RE.sub(_sub, template or "")


def generate_verdict(config: FlowConfig, values: Dict[str, Any]) -> str:
    step = first_step_of_type(config, "ai_call")
    if step is None:
        raise VerdictError("No ai_call step configured.")

    if settings.MOCK_SERVICES:
        return MOCK_VERDICT

    if not settings.OPENAI_API_KEY:
        raise VerdictError("Missing OPENAI_API_KEY.")

    model = settings.OPENAI_MODEL or step.model.name
    start = time.time()
    log(event="verdict_request_attempt", stepId=step.id, model=model, fieldCount=len(values))
    try:
        verdict = chat_completion(
            step.prompt.system,
            fill_template(step.prompt.user, values),
            model=model,
        )
    except OpenAIHTTPError as e:
        log(event="verdict_request_failed", statusCode=e.status_code,
            elapsedMs=int((time.time() - start) * 1000))
        raise VerdictError("OpenAI request failed.") from e
    except (OpenAIError, httpx.HTTPError, ValueError) as e:
        log(event="verdict_request_exception", errorType=type(e).__name__, error=str(e)[:300],
            elapsedMs=int((time.time() - start) * 1000))
        raise VerdictError("Failed to generate verdict.") from e

    if not verdict:
        log(event="verdict_request_empty", model=model)
        raise VerdictError("No verdict returned.")

    log(event="verdict_request_success", model=model, elapsedMs=int((time.time() - start) * 1000))
    return verdict
