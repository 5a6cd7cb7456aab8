"""
Custom exceptions for the proof router.

Every error names the pipeline stage that raised it so the CLI can report
where a conversion or submission stopped.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Tuple


class FailureKind(str, Enum):
    """Classification of a failed chain submission."""

    CONNECTIVITY = "Connectivity"
    SIGNING = "Signing"
    RUNTIME_REJECTION = "RuntimeRejection"


class ZkvRouterError(Exception):
    """Base exception for proof router errors."""

    stage = "router"


class ConfigurationError(ZkvRouterError):
    """Configuration error."""

    stage = "config"


class RenderError(ZkvRouterError):
    """The page renderer could not produce HTML."""

    stage = "render"


class ExtractionError(ZkvRouterError):
    """Proof metadata could not be extracted from the page."""

    stage = "extract"


class NotFoundError(ExtractionError):
    """No extraction strategy produced both fields.

    `missing` names the fields no strategy found at all; `found_by` maps
    each field that was found to the first strategy that found it. Both
    fields can be found while `missing` is empty, when no single strategy
    found them together.
    """

    def __init__(
        self, missing: Tuple[str, ...], found_by: Optional[Dict[str, str]] = None
    ) -> None:
        self.missing = tuple(missing)
        self.found_by = dict(found_by or {})
        if self.missing:
            message = f"proof metadata not found: missing {', '.join(self.missing)}"
        else:
            parts = ", ".join(f"{field} by {name}" for field, name in self.found_by.items())
            message = f"proof metadata not found: fields found by different strategies ({parts})"
        super().__init__(message)


class FetchError(ZkvRouterError):
    """Artifact download failed."""

    stage = "fetch"

    def __init__(self, url: str, message: str, status: Optional[int] = None) -> None:
        self.url = url
        self.status = status
        super().__init__(message)


class EncodingError(ZkvRouterError):
    """Malformed key, proof file or artifact."""

    stage = "encode"

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")


class InvalidHexError(EncodingError):
    """A field did not decode as hex (or as text, for double-encoded keys)."""


class MissingFieldError(EncodingError):
    """A required field is absent."""

    def __init__(self, field: str) -> None:
        super().__init__(field, "missing required field")


class ShrinkError(EncodingError):
    """The proving-system collaborator failed to shrink the artifact."""

    def __init__(self, message: str) -> None:
        super().__init__("artifact", message)


class ChainError(ZkvRouterError):
    """A chain operation failed; `kind` says how."""

    stage = "chain"
    kind = FailureKind.RUNTIME_REJECTION

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"{self.kind.value}: {detail}")


class ConnectivityError(ChainError):
    kind = FailureKind.CONNECTIVITY


class SigningError(ChainError):
    kind = FailureKind.SIGNING


class RuntimeRejectionError(ChainError):
    kind = FailureKind.RUNTIME_REJECTION

    def __init__(
        self, raw: str, code: Optional[int] = None, hint: Optional[str] = None
    ) -> None:
        self.raw = raw
        self.code = code
        self.hint = hint
        detail = raw if hint is None else f"{raw} (hint: {hint})"
        super().__init__(detail)
