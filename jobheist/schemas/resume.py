from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Resume(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    name: str | None = None
    email: str | None = None
    phone: str | None = None
