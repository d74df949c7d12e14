from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .audio import SAMPLE_RATE
from .errors import InvalidConfigError
from .notes import DEFAULT_STANDARD, SUPPORTED_STANDARDS
from .sequencer import DEFAULT_CHUNK_SIZE, DEFAULT_NOTE_SECONDS
from .wavetable import DEFAULT_TABLE_SIZE

_LOGGER = logging.getLogger("wavetone.config")

ENV_PREFIX = "WAVETONE_"

_ENV_FIELDS: Mapping[str, str] = MappingProxyType(
    {
        "sample_rate": f"{ENV_PREFIX}SAMPLE_RATE",
        "table_size": f"{ENV_PREFIX}TABLE_SIZE",
        "tuning": f"{ENV_PREFIX}TUNING",
        "chunk_size": f"{ENV_PREFIX}CHUNK_SIZE",
        "duration": f"{ENV_PREFIX}DURATION",
    }
)


class Settings(BaseModel):
    """Render settings shared by the CLI, the sequencer and live sessions."""

    sample_rate: int = Field(default=SAMPLE_RATE, gt=0)
    table_size: int = Field(default=DEFAULT_TABLE_SIZE, ge=2)
    tuning: int = DEFAULT_STANDARD
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)
    duration: float = Field(default=DEFAULT_NOTE_SECONDS, gt=0.0, allow_inf_nan=False)

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @field_validator("tuning")
    @classmethod
    def _check_tuning(cls, value: int) -> int:
        if value not in SUPPORTED_STANDARDS:
            raise ValueError(f"tuning must be one of {list(SUPPORTED_STANDARDS)}")
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for field_name, env_name in _ENV_FIELDS.items():
            raw = env.get(env_name)
            if raw is None or not raw.strip():
                continue
            values[field_name] = raw.strip()
        if values:
            _LOGGER.debug("Settings from environment: %s", values)
        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise InvalidConfigError(f"Invalid {ENV_PREFIX}* environment settings: {exc}") from exc

    def override(self, **changes: Any) -> "Settings":
        """Return a copy with the non-``None`` ``changes`` applied and re-validated."""
        updates = {key: value for key, value in changes.items() if value is not None}
        if not updates:
            return self
        try:
            return type(self).model_validate({**self.model_dump(), **updates})
        except ValidationError as exc:
            raise InvalidConfigError(str(exc)) from exc
