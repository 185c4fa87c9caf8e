from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .amenities import normalize_amenity
from .logging_config import resolve_level
from .pricing import AmenityRate, default_rate_table
from .util.money import money_to_cents


_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z0-9_]+)\}")


def _expand_env_vars(value: object) -> object:
    if isinstance(value, str):
        def repl(match: re.Match[str]) -> str:
            var = match.group(1)
            return os.getenv(var, "")

        return _ENV_VAR_PATTERN.sub(repl, value)
    if isinstance(value, list):
        return [_expand_env_vars(v) for v in value]
    if isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    return value


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name, "") or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be a whole number (got {raw!r})") from None


def _deep_merge(base: object, override: object) -> object:
    if isinstance(base, dict) and isinstance(override, dict):
        out = dict(base)
        for k, v in override.items():
            if k in out:
                out[k] = _deep_merge(out[k], v)
            else:
                out[k] = v
        return out
    return override


def _default_config_from_env() -> dict:
    """
    Env-only defaults so a `.env` file is enough for most deployments; YAML remains an optional override.
    """
    return {
        "dues": {
            "monthly_due_amount": os.getenv("MONTHLY_DUE_AMOUNT", "750.00"),
            "restrict_after_months": _env_int("RESTRICT_AFTER_MONTHS", 5),
            "archive_after_months": _env_int("ARCHIVE_AFTER_MONTHS", 6),
        },
        "logging": {
            "level": os.getenv("LOG_LEVEL", "INFO"),
            "file_path": os.getenv("LOG_FILE", ""),
        },
    }


class DuesConfig(BaseModel):
    """
    Monthly dues policy.

    `monthly_due_amount` accepts human amounts ("750", "₱750.00") and is exposed in cents as `monthly_due_cents`.
    """

    monthly_due_amount: str = "750.00"
    restrict_after_months: int = Field(default=5, ge=1)
    archive_after_months: int = Field(default=6, ge=1)

    @field_validator("monthly_due_amount", mode="before")
    @classmethod
    def _stringify_amount(cls, value: object) -> object:
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @model_validator(mode="after")
    def _validate_amount(self) -> "DuesConfig":
        if money_to_cents(self.monthly_due_amount) < 0:
            raise ValueError("dues.monthly_due_amount must not be negative")
        return self

    @property
    def monthly_due_cents(self) -> int:
        return money_to_cents(self.monthly_due_amount)


class ReservationsConfig(BaseModel):
    # Amenity slug -> pricing rule. Entries given in YAML replace the default rule for that amenity.
    rates: dict[str, AmenityRate] = Field(default_factory=default_rate_table)

    @field_validator("rates", mode="before")
    @classmethod
    def _merge_default_rates(cls, value: object) -> object:
        if not isinstance(value, dict):
            return value
        merged: dict[str, object] = dict(default_rate_table())
        for k, v in value.items():
            merged[normalize_amenity(str(k))] = v
        return merged


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file_path: str = ""

    @field_validator("level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        resolve_level(value)
        return value.strip().upper()


class AppConfig(BaseModel):
    dues: DuesConfig = DuesConfig()
    reservations: ReservationsConfig = ReservationsConfig()
    logging: LoggingConfig = LoggingConfig()


def load_config(path: Union[str, Path, None] = None) -> AppConfig:
    raw: dict = {}
    if path:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
            raw = _expand_env_vars(raw)  # supports ${ENV_VAR} in YAML

    merged = _deep_merge(_default_config_from_env(), raw)
    return AppConfig.model_validate(merged)
