"""Source-agnostic core for composing issue review reports.

This package intentionally contains only domain logic:
- Records are persisted through a ``StoreAdapter`` over an injected backend.
- No filesystem, HTTP or tracker calls live here.
"""

from .markdown import generate_markdown
from .models import (
    ChecklistItem,
    PendingAttachment,
    Priority,
    ReportRecord,
    RestoredAttachment,
    Rule,
    RuleSet,
)
from .packager import BundlePackager
from .repair import RepairEngine
from .session import ReportSession
from .store import StoreAdapter, StoreKey
from .validator import validate_store

# Import built-in rule sets so they self-register with the global registry.
from . import rulesets as _builtin_rule_sets  # noqa: F401
