from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..extractors.exceptions import ConfigurationError
from .enums import ScanMode, TimestampFormat

CONFIG_DIR_NAME = "config"
CONFIG_FILE_NAME = "config.yml"

# Upper bound on hash directory blocks visited in one walk
DEFAULT_MAX_HASH_BLOCKS = 4096


@dataclass(slots=True)
class LoggingConfig:
    """Logging configuration from config.yml."""

    level: str = "WARNING"
    log_max_mb: int = 50
    log_backup_count: int = 10


@dataclass(slots=True)
class DecodingConfig:
    """Decoder defaults from config.yml (command line switches win)."""

    delimiter: str = "\t"
    timestamp_format: TimestampFormat = TimestampFormat.CALENDAR
    scan_mode: ScanMode = ScanMode.ACTIVE
    max_hash_blocks: int = DEFAULT_MAX_HASH_BLOCKS
    include_unknown: bool = True


@dataclass(slots=True)
class AppConfig:
    """Top-level configuration resolved from disk."""

    base_dir: Path
    logs_dir: Optional[Path] = None
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    decoding: DecodingConfig = field(default_factory=DecodingConfig)

    def to_json(self) -> str:
        """Serialize the configuration into a JSON string for the processing log."""
        data = {
            "logs_dir": str(self.logs_dir) if self.logs_dir else None,
            "logging": {
                "level": self.logging.level,
                "log_max_mb": self.logging.log_max_mb,
                "log_backup_count": self.logging.log_backup_count,
            },
            "decoding": {
                "delimiter": self.decoding.delimiter,
                "timestamp_format": str(self.decoding.timestamp_format),
                "scan_mode": str(self.decoding.scan_mode),
                "max_hash_blocks": self.decoding.max_hash_blocks,
                "include_unknown": self.decoding.include_unknown,
            },
        }
        return json.dumps(data, indent=2, sort_keys=True)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        try:
            content = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Config file {path} is not valid YAML: {exc}") from exc
        if not isinstance(content, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping at the top level.")
        return content


def _section(overrides: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = overrides.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Config section '{name}' must be a mapping.")
    return section


def _enum_value(enum_cls, raw: Any, key: str):
    try:
        return enum_cls(str(raw).lower())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(f"Invalid {key} '{raw}' (expected one of: {allowed})") from exc


def _int_value(raw: Any, key: str) -> int:
    if isinstance(raw, bool):
        raise ConfigurationError(f"Invalid {key} '{raw}' (expected an integer)")
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid {key} '{raw}' (expected an integer)") from exc


def _bool_value(raw: Any, key: str) -> bool:
    if not isinstance(raw, bool):
        raise ConfigurationError(f"Invalid {key} '{raw}' (expected true or false)")
    return raw


def _build_config(base_dir: Path, overrides: Dict[str, Any]) -> AppConfig:
    logging_cfg = _section(overrides, "logging")
    logging_config = LoggingConfig(
        level=str(logging_cfg.get("level", "WARNING")).upper(),
        log_max_mb=_int_value(logging_cfg.get("log_max_mb", 50), "logging.log_max_mb"),
        log_backup_count=_int_value(
            logging_cfg.get("log_backup_count", 10), "logging.log_backup_count"
        ),
    )

    decoding_cfg = _section(overrides, "decoding")
    max_hash_blocks = _int_value(
        decoding_cfg.get("max_hash_blocks", DEFAULT_MAX_HASH_BLOCKS), "decoding.max_hash_blocks"
    )
    if max_hash_blocks <= 0:
        raise ConfigurationError("decoding.max_hash_blocks must be positive")
    decoding_config = DecodingConfig(
        delimiter=str(decoding_cfg.get("delimiter", "\t")),
        timestamp_format=_enum_value(
            TimestampFormat, decoding_cfg.get("timestamp_format", "calendar"), "timestamp_format"
        ),
        scan_mode=_enum_value(ScanMode, decoding_cfg.get("scan_mode", "active"), "scan_mode"),
        max_hash_blocks=max_hash_blocks,
        include_unknown=_bool_value(
            decoding_cfg.get("include_unknown", True), "decoding.include_unknown"
        ),
    )

    logs_dir_raw = overrides.get("logs_dir")
    logs_dir = None
    if logs_dir_raw:
        logs_dir = Path(logs_dir_raw)
        if not logs_dir.is_absolute():
            logs_dir = base_dir / logs_dir

    return AppConfig(
        base_dir=base_dir,
        logs_dir=logs_dir,
        logging=logging_config,
        decoding=decoding_config,
    )


def load_config_file(path: Path) -> AppConfig:
    """Load configuration from an explicit YAML file; relative paths resolve next to it."""
    if not path.is_file():
        raise ConfigurationError(f"Config file {path} does not exist.")
    return _build_config(path.parent, _load_yaml(path))


def load_app_config(base_dir: Path) -> AppConfig:
    """Load application configuration from disk, providing sensible defaults."""
    config_yaml = base_dir / CONFIG_DIR_NAME / CONFIG_FILE_NAME
    return _build_config(base_dir, _load_yaml(config_yaml))
