# models/errors.py
from __future__ import annotations

from typing import Optional


class LegValidationError(ValueError):
    """A hard leg rule failed on write; `kind` names the rule."""

    def __init__(self, message: str, kind: Optional[str] = None):
        super().__init__(message)
        self.kind = kind


class LegNotFoundError(LookupError):
    pass


class FlowStateError(RuntimeError):
    pass
