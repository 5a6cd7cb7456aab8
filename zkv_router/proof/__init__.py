"""Verification key canonicalization, proof conversion and proof files."""

from .encoder import (
    ExternalShrinker,
    PlaceholderShrinker,
    ProofEncoder,
    ProofShrinker,
    make_shrinker,
)
from .keys import KEY_BYTES, canonical_key_hex, canonicalize_key
from .storage import load_proof, parse_proof_json, proof_to_json, save_proof

__all__ = [
    "ExternalShrinker",
    "KEY_BYTES",
    "PlaceholderShrinker",
    "ProofEncoder",
    "ProofShrinker",
    "canonical_key_hex",
    "canonicalize_key",
    "load_proof",
    "make_shrinker",
    "parse_proof_json",
    "proof_to_json",
    "save_proof",
]
