"""Credential resolution for the AI and scraping services.

A credential is taken from the explicit call option first, then from the
environment snapshot handed in by the caller.  Nothing here reads global
state unless the caller passes ``os.environ`` itself.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from jobheist.core.errors import PreconditionError

OPENAI_API_KEY = "OPENAI_API_KEY"
FIRECRAWL_API_KEY = "FIRECRAWL_API_KEY"


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def usable(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    if not cleaned or _looks_like_placeholder(cleaned):
        return None
    return cleaned


def resolve_credential(
    name: str,
    explicit: str | None = None,
    env: Mapping[str, str] | None = None,
) -> str:
    """Return the first usable value for ``name`` or raise ``PreconditionError``."""
    resolved = usable(explicit)
    if resolved:
        return resolved
    snapshot = os.environ if env is None else env
    resolved = usable(snapshot.get(name))
    if resolved:
        return resolved
    raise PreconditionError(f"{name} required")


def resolve_credentials(
    *,
    openai_key: str | None = None,
    firecrawl_key: str | None = None,
    env: Mapping[str, str] | None = None,
) -> tuple[str, str]:
    return (
        resolve_credential(OPENAI_API_KEY, openai_key, env),
        resolve_credential(FIRECRAWL_API_KEY, firecrawl_key, env),
    )
