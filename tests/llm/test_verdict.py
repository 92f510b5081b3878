import httpx
import pytest
from unittest.mock import patch

from wizard.flow.models import FlowConfig
from wizard.llm.openai_client import OpenAIHTTPError
from wizard.llm.verdict import MOCK_VERDICT, VerdictError, fill_template, generate_verdict
from wizard.settings import settings


@pytest.fixture
def live():
    with patch.object(settings, "MOCK_SERVICES", False), \
         patch.object(settings, "OPENAI_API_KEY", "sk-test"), \
         patch.object(settings, "OPENAI_MODEL", ""):
        yield


def test_fill_template():
    assert fill_template("Spend {{spend}} over {{days}} days", {"spend": "5000", "days": 14}) == "Spend 5000 over 14 days"
    assert fill_template("A{{missing}}B{{none}}C", {"none": None}) == "ABC"
    assert fill_template("{{ spaced }} {not}", {"spaced": "x"}) == "{{ spaced }} {not}"


def test_mock_mode_returns_canned_verdict(scenario_config):
    with patch.object(settings, "MOCK_SERVICES", True):
        verdict = generate_verdict(scenario_config, {})
    assert verdict == MOCK_VERDICT
    assert verdict.startswith("SECTION 1: VERDICT")
    assert "SECTION 7: CONFIDENCE NOTE" in verdict


def test_missing_key(scenario_config):
    with patch.object(settings, "MOCK_SERVICES", False), patch.object(settings, "OPENAI_API_KEY", ""):
        with pytest.raises(VerdictError, match="Missing OPENAI_API_KEY."):
            generate_verdict(scenario_config, {})


def test_no_ai_call_step():
    with pytest.raises(VerdictError):
        generate_verdict(FlowConfig.model_validate({"flow": {"steps": []}}), {})


@patch("wizard.llm.verdict.chat_completion")
def test_prompt_comes_from_the_ai_call_step(mock_chat, scenario_config, live):
    mock_chat.return_value = "Kill it."
    assert generate_verdict(scenario_config, {"spend": "5000"}) == "Kill it."
    mock_chat.assert_called_once_with("s", "Spend 5000", model="m")


@patch("wizard.llm.verdict.chat_completion")
def test_env_model_overrides_flow_model(mock_chat, scenario_config, live):
    mock_chat.return_value = "ok"
    with patch.object(settings, "OPENAI_MODEL", "gpt-override"):
        generate_verdict(scenario_config, {})
    assert mock_chat.call_args.kwargs["model"] == "gpt-override"


@pytest.mark.parametrize("side_effect,message", [
    (OpenAIHTTPError(500, "boom"), "OpenAI request failed."),
    (httpx.ReadTimeout("slow"), "Failed to generate verdict."),
    (ValueError("bad json"), "Failed to generate verdict."),
])
@patch("wizard.llm.verdict.chat_completion")
def test_failures_map_to_user_facing_errors(mock_chat, side_effect, message, scenario_config, live):
    mock_chat.side_effect = side_effect
    with pytest.raises(VerdictError) as exc:
        generate_verdict(scenario_config, {})
    assert str(exc.value) == message


@patch("wizard.llm.verdict.chat_completion")
def test_empty_completion(mock_chat, scenario_config, live):
    mock_chat.return_value = ""
    with pytest.raises(VerdictError, match="No verdict returned."):
        generate_verdict(scenario_config, {})
