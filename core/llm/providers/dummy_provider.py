import asyncio

from config.models import ModelConfig
from core.contracts.provider import LLMProvider
from core.registry import provider_registry


@provider_registry.register("dummy")
class DummyProvider(LLMProvider):
    """A provider for tests and offline runs that answers with a fixed review."""

    def __init__(self, config: ModelConfig, response: str = "No issues found.", delay_sec: float = 0.0):
        self.config = config
        self._response = response
        self._delay_sec = delay_sec

    async def generate(self, prompt: str) -> str:
        if self._delay_sec:
            await asyncio.sleep(self._delay_sec)
        return self._response
