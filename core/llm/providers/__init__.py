# Import providers so they register themselves
from core.llm.providers import claude, dummy_provider, openai  # noqa: F401
