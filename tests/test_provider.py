import httpx
import pytest

from config.models import ModelConfig
from core.llm.providers.openai import OpenAIProvider
from core.llm.router import get_provider
from utils.errors import ProviderError, ReviewTimeout


@pytest.fixture
def openai_config():
    return ModelConfig(
        provider="openai",
        name="gpt-4o-mini",
        api_key="test_api_key"
    )


def test_get_provider_openai(openai_config):
    """Tests that the router returns an OpenAIProvider instance."""
    provider = get_provider(openai_config)
    assert isinstance(provider, OpenAIProvider)


def test_get_provider_unknown():
    """Tests that the router raises an error for an unknown provider."""
    config = ModelConfig(provider="unknown")
    with pytest.raises(ProviderError, match="Unknown provider 'unknown'"):
        get_provider(config)


def test_openai_provider_init_no_api_key(mocker):
    """Tests that the provider raises an error if no API key is provided."""
    mocker.patch("os.getenv", return_value=None)
    config = ModelConfig(provider="openai", api_key=None)
    with pytest.raises(ProviderError, match="OpenAI API key not found"):
        OpenAIProvider(config)


@pytest.mark.asyncio
async def test_openai_provider_generate(openai_config, mocker):
    """Tests that the review text is taken from the first choice."""
    mock_response = mocker.MagicMock(spec=httpx.Response)
    mock_response.status_code = 200
    mock_response.json.return_value = {
        "choices": [{"message": {"content": "# Review Summary\nLooks good."}}]
    }
    mock_post = mocker.patch("httpx.AsyncClient.post", return_value=mock_response)

    provider = OpenAIProvider(openai_config)
    result = await provider.generate("Review this")

    assert result == "# Review Summary\nLooks good."
    mock_post.assert_called_once()
    call_args = mock_post.call_args[1]['json']
    assert call_args['model'] == "gpt-4o-mini"
    assert call_args['max_tokens'] == 8192
    assert call_args['messages'] == [{"role": "user", "content": "Review this"}]


@pytest.mark.asyncio
async def test_openai_provider_unexpected_shape(openai_config, mocker):
    mock_response = mocker.MagicMock(spec=httpx.Response)
    mock_response.json.return_value = {"choices": []}
    mocker.patch("httpx.AsyncClient.post", return_value=mock_response)

    provider = OpenAIProvider(openai_config)
    with pytest.raises(ProviderError, match="Unexpected OpenAI response shape"):
        await provider.generate("Review this")


@pytest.mark.asyncio
async def test_openai_provider_http_error(openai_config, mocker):
    """Tests that a ProviderError is raised on HTTP status errors."""
    mock_response = mocker.MagicMock(spec=httpx.Response)
    mock_response.status_code = 401
    mock_response.text = "Unauthorized"
    mock_response.json.return_value = {"error": {"message": "Invalid API key"}}

    http_error = httpx.HTTPStatusError(
        "Unauthorized", request=mocker.MagicMock(), response=mock_response
    )
    mocker.patch("httpx.AsyncClient.post", side_effect=http_error)

    provider = OpenAIProvider(openai_config)
    with pytest.raises(ProviderError, match="OpenAI API error \\(401\\): Invalid API key"):
        await provider.generate("Review this")


@pytest.mark.asyncio
async def test_openai_provider_timeout_error(openai_config, mocker):
    """Tests that a transport timeout becomes a ReviewTimeout."""
    mocker.patch("httpx.AsyncClient.post", side_effect=httpx.TimeoutException("Timeout!"))

    provider = OpenAIProvider(openai_config)
    with pytest.raises(ReviewTimeout, match="Request to OpenAI timed out: Timeout!") as excinfo:
        await provider.generate("Review this")
    assert excinfo.value.stage == "review"
