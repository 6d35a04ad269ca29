"""
Extraction warnings utilities for extractors.

This module collects corruption findings (truncated string fields, broken
hash directory chains) encountered while decoding an index.dat file. The
decoder never stops on these; they are logged and, when a collector is
supplied, kept for a machine-readable report.

Usage:
    from histsifter.extractors._shared.extraction_warnings import (
        ExtractionWarningCollector,
    )

    collector = ExtractionWarningCollector(extractor_name="ie_index_dat")
    for record in decode(source, warnings=collector):
        ...
    collector.write_jsonl(Path("warnings.jsonl"))
"""
from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


# =============================================================================
# Warning Type Constants
# =============================================================================

WARNING_TYPE_TRUNCATED_FIELD = "truncated_field"
WARNING_TYPE_HASH_CHAIN_CYCLE = "hash_chain_cycle"
WARNING_TYPE_HASH_CHAIN_LIMIT = "hash_chain_limit"
WARNING_TYPE_HASH_BLOCK_UNREADABLE = "hash_block_unreadable"
WARNING_TYPE_BAD_SIGNATURE = "bad_signature"

# Category Constants
CATEGORY_BINARY = "binary"

# Severity Constants
SEVERITY_INFO = "info"
SEVERITY_WARNING = "warning"
SEVERITY_ERROR = "error"


def _generate_run_id() -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
    return f"{timestamp}_{str(uuid.uuid4())[:8]}"


# =============================================================================
# Warning Data Class
# =============================================================================

@dataclass
class ExtractionWarning:
    """A single extraction warning record."""

    warning_type: str
    item_name: str
    severity: str = SEVERITY_WARNING
    category: Optional[str] = None
    offset: Optional[int] = None
    source_file: Optional[str] = None
    item_value: Optional[str] = None
    context_json: Optional[Dict[str, Any]] = None

    def to_dict(self, run_id: str, extractor_name: str) -> Dict[str, Any]:
        """Convert to a flat dict for JSON output."""
        return {
            "run_id": run_id,
            "extractor_name": extractor_name,
            "warning_type": self.warning_type,
            "severity": self.severity,
            "category": self.category,
            "offset": self.offset,
            "source_file": self.source_file,
            "item_name": self.item_name,
            "item_value": self.item_value,
            "context_json": self.context_json,
        }


# =============================================================================
# Warning Collector Class
# =============================================================================

@dataclass
class ExtractionWarningCollector:
    """
    Collects extraction warnings during a decode run.

    Example:
        collector = ExtractionWarningCollector(extractor_name="ie_index_dat")
        collector.add_truncated_field("parse_url", "filename", 0x5000)
        collector.get_summary()  # {"total": 1, "by_type": {...}, ...}
    """

    extractor_name: str
    run_id: str = field(default_factory=_generate_run_id)
    source_file: Optional[str] = None
    _warnings: List[ExtractionWarning] = field(default_factory=list)

    def add_warning(
        self,
        warning_type: str,
        item_name: str,
        *,
        severity: str = SEVERITY_WARNING,
        category: Optional[str] = CATEGORY_BINARY,
        offset: Optional[int] = None,
        item_value: Optional[str] = None,
        context_json: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Add a warning to the collection.

        Args:
            warning_type: Type of warning (use WARNING_TYPE_* constants)
            item_name: Name of the problematic item
            severity: info/warning/error (default: warning)
            category: Category (use CATEGORY_* constants)
            offset: Absolute file offset the warning refers to
            item_value: Value or additional details
            context_json: Additional context as dict
        """
        self._warnings.append(ExtractionWarning(
            warning_type=warning_type,
            item_name=item_name,
            severity=severity,
            category=category,
            offset=offset,
            source_file=self.source_file,
            item_value=item_value,
            context_json=context_json,
        ))

    def add_truncated_field(self, decoder: str, field_name: str, record_offset: int) -> None:
        """A bounded string scan used its whole budget without a terminator."""
        self.add_warning(
            warning_type=WARNING_TYPE_TRUNCATED_FIELD,
            item_name=field_name,
            offset=record_offset,
            context_json={"decoder": decoder},
        )

    def add_hash_directory_issue(
        self,
        warning_type: str,
        block_offset: int,
        detail: str,
        *,
        severity: str = SEVERITY_WARNING,
    ) -> None:
        """Convenience method for hash directory chain problems."""
        self.add_warning(
            warning_type=warning_type,
            item_name="hash_directory",
            severity=severity,
            offset=block_offset,
            item_value=detail,
        )

    @property
    def warnings(self) -> List[ExtractionWarning]:
        return list(self._warnings)

    @property
    def count(self) -> int:
        """Return number of collected warnings."""
        return len(self._warnings)

    def has_warnings(self) -> bool:
        """Check if any warnings have been collected."""
        return bool(self._warnings)

    def get_summary(self) -> Dict[str, Any]:
        """
        Get summary of collected warnings.

        Returns:
            Dict with counts by type and severity
        """
        by_type: Dict[str, int] = {}
        by_severity: Dict[str, int] = {}

        for w in self._warnings:
            by_type[w.warning_type] = by_type.get(w.warning_type, 0) + 1
            by_severity[w.severity] = by_severity.get(w.severity, 0) + 1

        return {
            "total": len(self._warnings),
            "by_type": by_type,
            "by_severity": by_severity,
        }

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [w.to_dict(self.run_id, self.extractor_name) for w in self._warnings]

    def write_jsonl(self, path: Path) -> int:
        """
        Write collected warnings as JSON lines.

        Returns:
            Number of warnings written
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="\n") as handle:
            for row in self.to_dicts():
                handle.write(json.dumps(row, sort_keys=True) + "\n")
        return len(self._warnings)
