"""
Shared utilities for extractors.

- extraction_warnings: Corruption findings collected during a decode run
"""

from .extraction_warnings import (  # noqa: F401
    ExtractionWarning,
    ExtractionWarningCollector,
)
