from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..services.date_resolver import DEFAULT_BASE_DATE
from ..services.product_extractor import DEFAULT_MAX_PRODUCTS

"""Config loader.

Responsibilities:
- Load the YAML run configuration (config/convert.yml by default)
- Validate it against the JSON schema shipped next to this module
- Apply defaults for every missing key
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")

BACKEND_CHOICES = ("auto", "reference", "vectorized")
DEFAULT_KEEP_NA_STRINGS = ["NA", "N/A", "NULL", "None"]


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class ConverterConfig:
    default_date: date = DEFAULT_BASE_DATE  # ファイル名から日付が取れない場合
    max_products: int = DEFAULT_MAX_PRODUCTS
    backend: str = "auto"
    output_directory: str | None = None  # None: 元ファイルと同じディレクトリ
    keep_na_strings: list[str] = field(default_factory=lambda: list(DEFAULT_KEEP_NA_STRINGS))


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing / not valid JSON, or the data fails
            validation (unknown keys, wrong types, bad enum values)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> ConverterConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (yaml.YAMLError, ValueError) as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    # 引用符なしの日付は YAML が date に変換するので文字列に戻してから検証
    if isinstance(data.get("default_date"), date):
        data = {**data, "default_date": data["default_date"].isoformat()}

    _validate_config_schema(data)

    default_date = DEFAULT_BASE_DATE
    if "default_date" in data:
        try:
            default_date = date.fromisoformat(data["default_date"])
        except ValueError as e:
            raise ConfigError(f"invalid default_date: {data['default_date']}") from e

    return ConverterConfig(
        default_date=default_date,
        max_products=data.get("max_products", DEFAULT_MAX_PRODUCTS),
        backend=data.get("backend", "auto"),
        output_directory=data.get("output_directory"),
        keep_na_strings=list(data.get("keep_na_strings", DEFAULT_KEEP_NA_STRINGS)),
    )
