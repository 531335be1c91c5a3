from typing import Protocol


class LLMProvider(Protocol):
    """A protocol for LLM providers."""

    async def generate(self, prompt: str) -> str:
        """
        Sends the prompt to the LLM and returns its reply.

        Args:
            prompt: The prompt to send to the LLM.

        Returns:
            The LLM's response text.
        """
        ...
