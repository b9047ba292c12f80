"""Post-processing: auto-fixes and documentation link checks."""

from .autofix import AutoFixer, Fix, FixSummary
from .links import DocLinkValidator, LinkReport

__all__ = ["AutoFixer", "DocLinkValidator", "Fix", "FixSummary", "LinkReport"]
