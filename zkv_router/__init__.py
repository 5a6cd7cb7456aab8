"""
zkv-router

Turns Succinct prover-network proof requests into zkVerify proof records
and submits them to the zkVerify verification pallet.
"""

from .config import RouterConfig
from .exceptions import (
    ChainError,
    ConfigurationError,
    ConnectivityError,
    EncodingError,
    ExtractionError,
    FailureKind,
    FetchError,
    InvalidHexError,
    MissingFieldError,
    NotFoundError,
    RenderError,
    RuntimeRejectionError,
    ShrinkError,
    SigningError,
    ZkvRouterError,
)
from .router import ProofRouter
from .types import CanonicalProof, Failure, ProofRequestRecord, SubmissionOutcome, Success
from .version import __version__

__all__ = [
    "CanonicalProof",
    "ChainError",
    "ConfigurationError",
    "ConnectivityError",
    "EncodingError",
    "ExtractionError",
    "Failure",
    "FailureKind",
    "FetchError",
    "InvalidHexError",
    "MissingFieldError",
    "NotFoundError",
    "ProofRequestRecord",
    "ProofRouter",
    "RenderError",
    "RuntimeRejectionError",
    "ShrinkError",
    "SigningError",
    "SubmissionOutcome",
    "Success",
    "ZkvRouterError",
    "__version__",
]
