"""
Collaborator calls made by the step engine.

``FlowServices`` is the boundary: fetch the flow document, create a
checkout session, request a verdict. Any failure (transport error or
non-2xx status) surfaces as ``ServiceError``; the engine decides how to
degrade.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from wizard.flow.loader import ConfigLoadError, parse_config
from wizard.flow.models import FlowConfig


class ServiceError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FlowServices(ABC):
    @abstractmethod
    async def fetch_config(self) -> FlowConfig:
        ...

    @abstractmethod
    async def create_checkout_session(self) -> str:
        """Return the URL of a hosted checkout page."""

    @abstractmethod
    async def request_verdict(self, data: Dict[str, str]) -> str:
        ...


class HttpFlowServices(FlowServices):
    """Talks to the JSON API (GET /api/config, POST /api/create-checkout-session, POST /api/verdict)."""

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            resp = await self._client.request(method, path, json=body)
        except httpx.HTTPError as e:
            raise ServiceError(f"{method} {path} failed: {type(e).__name__}") from e
        if not resp.is_success:
            raise ServiceError(f"{method} {path} returned {resp.status_code}", status_code=resp.status_code)
        try:
            data = resp.json()
        except ValueError as e:
            raise ServiceError(f"{method} {path} returned invalid JSON", status_code=resp.status_code) from e
        if not isinstance(data, dict):
            raise ServiceError(f"{method} {path} returned a non-object body", status_code=resp.status_code)
        return data

    async def fetch_config(self) -> FlowConfig:
        raw = await self._request("GET", "/api/config")
        try:
            return parse_config(raw)
        except ConfigLoadError as e:
            raise ServiceError(str(e)) from e

    async def create_checkout_session(self) -> str:
        data = await self._request("POST", "/api/create-checkout-session", {})
        url = data.get("url")
        if not url:
            raise ServiceError("Checkout session response has no url")
        return str(url)

    async def request_verdict(self, data: Dict[str, str]) -> str:
        out = await self._request("POST", "/api/verdict", dict(data))
        verdict = out.get("verdict")
        if verdict is None:
            raise ServiceError("Verdict response has no verdict")
        return str(verdict)
