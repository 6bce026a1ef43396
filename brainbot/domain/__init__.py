"""Domain layer — pure Python, no framework dependencies.

Only the models are re-exported here: the ports import them, and the
services in the submodules import the ports.
"""

from brainbot.domain.models import (
    ActionToken,
    AuditRecord,
    Button,
    ClassificationResult,
    DateExpressionResult,
    Entry,
    ParsedCommand,
)

__all__ = [
    "ActionToken",
    "AuditRecord",
    "Button",
    "ClassificationResult",
    "DateExpressionResult",
    "Entry",
    "ParsedCommand",
]
