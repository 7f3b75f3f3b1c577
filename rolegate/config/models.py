from typing import Literal

from pydantic import BaseModel, Field


class PolicyConfig(BaseModel):
    path: str | None = None
    format: Literal["auto", "yaml", "json"] = "auto"
    lock_on_load: bool = False


class RolegateConfig(BaseModel):
    policy: PolicyConfig = Field(default_factory=PolicyConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
