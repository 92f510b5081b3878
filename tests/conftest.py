import pytest

from wizard.flow.host import MemoryHost
from wizard.flow.models import FlowConfig
from wizard.flow.services import FlowServices, ServiceError

SCENARIO = {
    "app": {"name": "Scenario"},
    "data_model": {
        "fields": {
            "spend": {"type": "number"},
            "monthly_ad_spend": {"type": "number"},
            "channel": {"type": "enum", "options": ["Meta", "Google"]},
        }
    },
    "flow": {
        "steps": [
            {
                "id": "intro",
                "type": "screen",
                "title": "Intro",
                "subtitle": "Start here",
                "components": [
                    {"type": "bullets", "items": ["one", "two"]},
                    {"type": "cta", "label": "Continue", "action": {"type": "next"}},
                ],
            },
            {
                "id": "inputs",
                "type": "form",
                "title": "Your Inputs",
                "fields": [
                    {"key": "spend", "label": "Spend", "component": "number", "required": True, "placeholder": "e.g. 5000"},
                    {"key": "monthly_ad_spend", "label": "Monthly ad spend", "component": "number"},
                    {"key": "channel", "label": "Channel", "component": "select"},
                ],
                "actions": [{"label": "Get My Verdict"}],
            },
            {"id": "verdict_ai", "type": "ai_call", "title": "Thinking…", "model": {"name": "m"},
             "prompt": {"system": "s", "user": "Spend {{spend}}"}},
            {
                "id": "results",
                "type": "screen",
                "title": "Your Verdict",
                "components": [
                    {"type": "markdown", "source": "fallback text"},
                    {"type": "cta_row", "buttons": [
                        {"label": "Copy", "action": {"type": "copy_to_clipboard", "value": "static"}},
                        {"label": "Again", "action": {"type": "go_to", "step_id": "intro"}},
                        {"label": "Exit", "action": {"type": "go_to", "step_id": "exit"}},
                    ]},
                ],
            },
        ]
    },
}


class FakeServices(FlowServices):
    def __init__(self, config, verdict="The verdict.", checkout_url="https://checkout.test/session",
                 fail_config=False, fail_verdict=False, fail_checkout=False):
        self.config = config
        self.verdict = verdict
        self.checkout_url = checkout_url
        self.fail_config = fail_config
        self.fail_verdict = fail_verdict
        self.fail_checkout = fail_checkout
        self.verdict_requests = []
        self.checkout_requests = 0
        # Awaited mid-call, to act while a request is "in flight"
        self.while_in_flight = None

    async def _in_flight(self):
        if self.while_in_flight is not None:
            await self.while_in_flight()

    async def fetch_config(self):
        if self.fail_config:
            raise ServiceError("config unavailable", status_code=500)
        return self.config

    async def create_checkout_session(self):
        self.checkout_requests += 1
        await self._in_flight()
        if self.fail_checkout:
            raise ServiceError("POST /api/create-checkout-session returned 500", status_code=500)
        return self.checkout_url

    async def request_verdict(self, data):
        self.verdict_requests.append(dict(data))
        await self._in_flight()
        if self.fail_verdict:
            raise ServiceError("POST /api/verdict returned 500", status_code=500)
        return self.verdict


@pytest.fixture
def scenario_config():
    return FlowConfig.model_validate(SCENARIO)


@pytest.fixture
def services(scenario_config):
    return FakeServices(scenario_config)


@pytest.fixture
def host():
    return MemoryHost(location="http://localhost:3000/")
