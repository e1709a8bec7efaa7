"""Generator configuration, read once before a run."""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

STRATEGY_NAMESPACES = {"service": "resource", "client": "client"}


class GeneratorConfig(BaseModel):
    """Read-only settings shared by every step of a generation run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    base_package: str = "generated"
    async_trait: str | None = None
    throws_type: str | None = None
    empty_response_returns_void: bool = False
    runtime_module: str = "api_runtime"

    @field_validator("async_trait", "throws_type")
    @classmethod
    def _blank_is_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    def namespace(self, strategy: str) -> str:
        """Package that generated interfaces of the given strategy live in."""
        return f"{self.base_package}.{STRATEGY_NAMESPACES[strategy]}"


def load_config(file_path: Path) -> GeneratorConfig:
    """Load a YAML configuration file. An empty file yields the defaults."""
    data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
    return GeneratorConfig.model_validate(data)
