"""Verification-pallet call construction and submission."""

from .call import (
    CallArg,
    RuntimeCallDescriptor,
    build_remark_call,
    build_submit_proof_call,
    encode_byte_sequence,
    encode_domain_id,
    encode_vk_or_hash,
)
from .submitter import ChainSubmitter, classify_rejection, rejection_code

__all__ = [
    "CallArg",
    "ChainSubmitter",
    "RuntimeCallDescriptor",
    "build_remark_call",
    "build_submit_proof_call",
    "classify_rejection",
    "encode_byte_sequence",
    "encode_domain_id",
    "encode_vk_or_hash",
    "rejection_code",
]
