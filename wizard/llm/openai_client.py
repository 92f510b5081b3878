from typing import Optional

import httpx

from wizard.settings import settings

_client = httpx.Client(timeout=settings.OPENAI_REQUEST_TIMEOUT_SEC)


class OpenAIError(RuntimeError):
    pass


class OpenAIHTTPError(OpenAIError):
    def __init__(self, status_code: int, body: str = ""):
        super().__init__(f"OpenAI returned {status_code}: {body[:200]}")
        self.status_code = status_code


def _headers() -> dict:
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {settings.OPENAI_API_KEY}",
    }


def chat_completion(system: str, user: str, *, model: str, temperature: Optional[float] = None) -> str:
    """Call the OpenAI chat endpoint once and return the first choice's content ("" if absent).

    POST {OPENAI_BASE_URL}/chat/completions
    """
    if not settings.OPENAI_API_KEY:
        raise OpenAIError("OPENAI_API_KEY is not set")

    url = f"{settings.OPENAI_BASE_URL.rstrip('/')}/chat/completions"
    payload = {
        "model": model,
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
        "temperature": float(settings.OPENAI_TEMPERATURE if temperature is None else temperature),
    }
    resp = _client.post(url, headers=_headers(), json=payload)
    if not resp.is_success:
        raise OpenAIHTTPError(resp.status_code, resp.text or "")
    data = resp.json()
    try:
        return data["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, TypeError):
        return ""
