from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from jobheist.ai.types import Reasoning, Verbosity
from jobheist.core.errors import PreconditionError


class AnalysisConfig(BaseModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model: str = "gpt-5-mini"
    verbosity: Verbosity = "low"
    reasoning: Reasoning = "none"


DEFAULT_CONFIG = AnalysisConfig()


def merge_config(overrides: AnalysisConfig | Mapping[str, Any] | None = None) -> AnalysisConfig:
    """Merge caller overrides over the defaults; ``None`` values keep the default."""
    if overrides is None:
        return DEFAULT_CONFIG
    if isinstance(overrides, AnalysisConfig):
        return overrides
    values = {key: value for key, value in overrides.items() if value is not None}
    if isinstance(values.get("model"), str):
        values["model"] = values["model"].strip() or DEFAULT_CONFIG.model
    try:
        return AnalysisConfig.model_validate({**DEFAULT_CONFIG.model_dump(), **values})
    except ValidationError as exc:
        raise PreconditionError(f"Invalid analysis config: {exc}", code="invalid_config") from exc
