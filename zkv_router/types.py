"""Records passed between pipeline stages."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from .exceptions import ChainError, FailureKind, InvalidHexError

HEX_DIGITS = re.compile(r"(?:[0-9a-fA-F]{2})*")


def to_hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def from_hex(value: str, field: str) -> bytes:
    if not isinstance(value, str):
        raise InvalidHexError(field, "must be a hex string")
    text = value[2:] if value.startswith("0x") else value
    # bytes.fromhex alone would accept embedded whitespace
    if not HEX_DIGITS.fullmatch(text):
        raise InvalidHexError(field, "not valid hex")
    return bytes.fromhex(text)


@dataclass(frozen=True)
class ProofRequestRecord:
    artifact_url: str
    verification_key: str


@dataclass(frozen=True)
class CanonicalProof:
    """Chain-ready proof record.

    All three fields are lowercase, `0x`-prefixed hex strings;
    `verification_key` always encodes exactly 32 bytes.
    """

    proof: str
    public_inputs: str
    verification_key: str

    @classmethod
    def from_bytes(
        cls, proof: bytes, public_inputs: bytes, verification_key: bytes
    ) -> "CanonicalProof":
        return cls(
            proof=to_hex(proof),
            public_inputs=to_hex(public_inputs),
            verification_key=to_hex(verification_key),
        )

    def proof_bytes(self) -> bytes:
        return from_hex(self.proof, "proof")

    def public_input_bytes(self) -> bytes:
        return from_hex(self.public_inputs, "pubs")

    def verification_key_bytes(self) -> bytes:
        return from_hex(self.verification_key, "vk")


@dataclass(frozen=True)
class Success:
    tx_hash: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    detail: str

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def from_error(cls, exc: ChainError) -> "Failure":
        return cls(kind=exc.kind, detail=exc.detail)


SubmissionOutcome = Union[Success, Failure]

