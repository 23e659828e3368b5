import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

DEFAULT_MAX_DEPTH = 64

ENV_MAX_DEPTH = "ARROW_SPARK_MAX_DEPTH"
ENV_STRICT_FIELD_NAMES = "ARROW_SPARK_STRICT_FIELD_NAMES"

_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off"}


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"Invalid boolean for {name}: {value!r}")


def _parse_depth(value: Any, name: str) -> int:
    try:
        depth = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid integer for {name}: {value!r}") from None
    if depth < 1:
        raise ValueError(f"{name} must be >= 1, got {depth}")
    return depth


@dataclass(frozen=True)
class RenderOptions:
    """
    Knobs of the DDL renderer.

    max_depth          : deepest allowed type nesting
    strict_field_names : refuse empty names and names containing backticks
                         instead of quoting them as-is
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    strict_field_names: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "RenderOptions":
        data = data or {}
        return cls(
            max_depth=_parse_depth(data.get("max_depth", DEFAULT_MAX_DEPTH), "max_depth"),
            strict_field_names=_parse_bool(
                data.get("strict_field_names", False), "strict_field_names"
            ),
        )

    def with_env(self, environ: Optional[Dict[str, str]] = None) -> "RenderOptions":
        """
        Apply ARROW_SPARK_* environment overrides.
        """
        env = os.environ if environ is None else environ
        max_depth = self.max_depth
        strict = self.strict_field_names

        if env.get(ENV_MAX_DEPTH):
            max_depth = _parse_depth(env[ENV_MAX_DEPTH], ENV_MAX_DEPTH)
        if env.get(ENV_STRICT_FIELD_NAMES):
            strict = _parse_bool(env[ENV_STRICT_FIELD_NAMES], ENV_STRICT_FIELD_NAMES)

        return RenderOptions(max_depth=max_depth, strict_field_names=strict)


@dataclass
class TableSettings:
    name: Optional[str] = None
    database: Optional[str] = None
    using: str = "DELTA"
    if_not_exists: bool = True
    comment: Optional[str] = None
    partitioned_by: List[str] = field(default_factory=list)


@dataclass
class Settings:
    """
    Full run configuration, usually loaded from YAML:

        render:
          max_depth: 64
          strict_field_names: false
        table:
          name: events
          database: analytics
        source:
          file_path: data/events.parquet
    """

    render: RenderOptions = field(default_factory=RenderOptions)
    table: TableSettings = field(default_factory=TableSettings)
    source_file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Settings":
        data = data or {}
        table_cfg = data.get("table") or {}
        source_cfg = data.get("source") or {}

        table = TableSettings(
            name=table_cfg.get("name"),
            database=table_cfg.get("database"),
            using=table_cfg.get("using", "DELTA"),
            if_not_exists=_parse_bool(table_cfg.get("if_not_exists", True), "if_not_exists"),
            comment=table_cfg.get("comment"),
            partitioned_by=list(table_cfg.get("partitioned_by") or []),
        )

        return cls(
            render=RenderOptions.from_dict(data.get("render")),
            table=table,
            source_file=source_cfg.get("file_path"),
        )


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Load settings from a YAML file (optional) and apply environment overrides.
    """
    data: Dict[str, Any] = {}

    if config_path:
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {config_path}")

    settings = Settings.from_dict(data)
    settings.render = settings.render.with_env()
    return settings
