from jobheist.ai.config import AnalysisConfig
from jobheist.ai.types import AIClient

from jobheist.ai.providers.openai_provider import OpenAIProvider


def get_ai_client(api_key: str, config: AnalysisConfig) -> AIClient:
    return OpenAIProvider(model=config.model, api_key=api_key, verbosity=config.verbosity)
