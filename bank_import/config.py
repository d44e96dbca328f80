"""Runtime settings for the import pipeline.

Settings are a frozen pydantic model. ``load_settings`` reads optional
environment overrides; explicit keyword arguments always win over the
environment.

Environment variables
---------------------
- ``BANK_IMPORT_DATE_WINDOW_DAYS``: LIKELY-match date tolerance in days.
- ``BANK_IMPORT_DESCRIPTION_SIMILARITY``: minimum description similarity
  ratio (0..1) for a same-day, same-amount LIKELY match.
- ``BANK_IMPORT_THOUSANDS_SEPARATOR``: grouping character stripped from
  amount cells.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_ENV_FIELDS: dict[str, str] = {
    "date_window_days": "BANK_IMPORT_DATE_WINDOW_DAYS",
    "description_similarity": "BANK_IMPORT_DESCRIPTION_SIMILARITY",
    "thousands_separator": "BANK_IMPORT_THOUSANDS_SEPARATOR",
}


class ImportSettings(BaseModel):
    """Tunables for parsing and duplicate matching."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    date_window_days: int = Field(default=1, ge=0, le=31)
    description_similarity: float = Field(default=0.8, ge=0.0, le=1.0)
    thousands_separator: str = Field(default=",", min_length=1, max_length=1)

    @field_validator("thousands_separator")
    @classmethod
    def _separator_not_decimal_point(cls, v: str) -> str:
        if v in {".", "-", "(", ")"}:
            raise ValueError(f"thousands_separator cannot be {v!r}")
        return v


def load_settings(**overrides: Any) -> ImportSettings:
    """Build :class:`ImportSettings` from the environment plus ``overrides``.

    Invalid environment values raise ``pydantic.ValidationError`` rather than
    being silently ignored.
    """

    values: dict[str, Any] = {}
    for field, env_name in _ENV_FIELDS.items():
        raw = os.getenv(env_name)
        if raw:
            # The separator may legitimately be a space; keep it unstripped.
            values[field] = raw if field == "thousands_separator" else raw.strip()
    values.update({k: v for k, v in overrides.items() if v is not None})
    return ImportSettings.model_validate(values)


__all__ = ["ImportSettings", "load_settings"]
