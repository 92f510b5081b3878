import pytest
from unittest.mock import patch, MagicMock
from wizard.llm.openai_client import OpenAIError, OpenAIHTTPError, chat_completion
from wizard.settings import settings


@pytest.fixture(autouse=True)
def api_key():
    with patch.object(settings, "OPENAI_API_KEY", "sk-test"), \
         patch.object(settings, "OPENAI_BASE_URL", "https://api.openai.test/v1/"):
        yield


@patch("wizard.llm.openai_client._client")
def test_chat_completion_returns_first_choice(mock_client):
    mock_resp = MagicMock()
    mock_resp.is_success = True
    mock_resp.json.return_value = {"choices": [{"message": {"content": "SECTION 1: VERDICT"}}]}
    mock_client.post.return_value = mock_resp

    assert chat_completion("sys", "user", model="gpt-test") == "SECTION 1: VERDICT"

    args, kwargs = mock_client.post.call_args
    assert args[0] == "https://api.openai.test/v1/chat/completions"
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
    assert kwargs["json"] == {
        "model": "gpt-test",
        "messages": [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "user"},
        ],
        "temperature": 0.3,
    }
    # one attempt only
    assert mock_client.post.call_count == 1


@patch("wizard.llm.openai_client._client")
def test_chat_completion_non_2xx(mock_client):
    mock_resp = MagicMock()
    mock_resp.is_success = False
    mock_resp.status_code = 429
    mock_resp.text = "rate limited"
    mock_client.post.return_value = mock_resp

    with pytest.raises(OpenAIHTTPError) as exc:
        chat_completion("s", "u", model="m")
    assert exc.value.status_code == 429


@patch("wizard.llm.openai_client._client")
def test_chat_completion_missing_content(mock_client):
    mock_resp = MagicMock()
    mock_resp.is_success = True
    mock_resp.json.return_value = {"choices": []}
    mock_client.post.return_value = mock_resp

    assert chat_completion("s", "u", model="m") == ""


def test_chat_completion_requires_key():
    with patch.object(settings, "OPENAI_API_KEY", ""):
        with pytest.raises(OpenAIError):
            chat_completion("s", "u", model="m")
