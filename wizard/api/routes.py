from typing import Any, Dict

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from wizard.api.schemas import CheckoutSessionResponse, ErrorResponse, VerdictResponse
from wizard.flow.loader import ConfigLoadError, load_raw_config, parse_config
from wizard.llm.verdict import VerdictError, generate_verdict
from wizard.observability.logging import log
from wizard.payments.checkout import CheckoutError, create_checkout_session, resolve_base_url

router = APIRouter(prefix="/api")

CONFIG_LOAD_FAILED = "Failed to load config."

_ERROR_RESPONSES = {500: {"model": ErrorResponse}}


def _error(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _load_config():
    raw = load_raw_config()
    return raw, parse_config(raw)


@router.get("/config", responses=_ERROR_RESPONSES)
async def get_config():
    """The flow document, as stored on disk."""
    try:
        raw, _ = await run_in_threadpool(_load_config)
    except ConfigLoadError as e:
        log(event="config_load_failed", error=str(e)[:500])
        return _error(CONFIG_LOAD_FAILED)
    return raw


@router.post("/create-checkout-session", response_model=CheckoutSessionResponse, responses=_ERROR_RESPONSES)
async def create_checkout(request: Request):
    try:
        _, config = await run_in_threadpool(_load_config)
    except ConfigLoadError as e:
        log(event="config_load_failed", error=str(e)[:500])
        return _error(CONFIG_LOAD_FAILED)

    base_url = resolve_base_url(request.headers)
    try:
        url = await run_in_threadpool(create_checkout_session, config, base_url)
    except CheckoutError as e:
        return _error(str(e))
    return CheckoutSessionResponse(url=url)


@router.post("/verdict", response_model=VerdictResponse, responses=_ERROR_RESPONSES)
async def verdict(payload: Any = Body(None)):
    """Body is the collected field map ({key: value})."""
    values: Dict[str, Any] = payload if isinstance(payload, dict) else {}
    try:
        _, config = await run_in_threadpool(_load_config)
    except ConfigLoadError as e:
        log(event="config_load_failed", error=str(e)[:500])
        return _error(CONFIG_LOAD_FAILED)

    try:
        text = await run_in_threadpool(generate_verdict, config, values)
    except VerdictError as e:
        return _error(str(e))
    return VerdictResponse(verdict=text)
