"""Runtime call construction for the verification pallet.

`submit_proof` takes four positional arguments:

    vk_or_hash  VkOrHash   tagged choice; always the raw `Vk` variant here
    proof       Vec<u8>    shrunk proof bytes
    pubs        Vec<u8>    public input bytes
    domain_id   Option<u32> routing id; always None

Each slot has one encoder below producing the value shape the SCALE codec
expects for that type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..config import DEFAULT_PALLET
from ..exceptions import InvalidHexError
from ..proof.keys import KEY_BYTES
from ..types import CanonicalProof, to_hex

SUBMIT_PROOF = "submit_proof"
VK_VARIANT = "Vk"


@dataclass(frozen=True)
class CallArg:
    name: str
    type_name: str
    value: Any


@dataclass(frozen=True)
class RuntimeCallDescriptor:
    pallet: str
    function: str
    args: Tuple[CallArg, ...]

    def call_params(self) -> Dict[str, Any]:
        # Insertion order follows the positional ABI.
        return {arg.name: arg.value for arg in self.args}

    def describe(self) -> str:
        names = ", ".join(f"{arg.name}: {arg.type_name}" for arg in self.args)
        return f"{self.pallet}.{self.function}({names})"


def encode_vk_or_hash(key: bytes) -> Dict[str, str]:
    if len(key) != KEY_BYTES:
        raise InvalidHexError("vk", f"expected {KEY_BYTES} key bytes, got {len(key)}")
    return {VK_VARIANT: to_hex(key)}


def encode_byte_sequence(data: bytes) -> str:
    return to_hex(data)


def encode_domain_id(domain_id: Optional[int] = None) -> Optional[int]:
    return domain_id


def build_submit_proof_call(
    proof: CanonicalProof, pallet: str = DEFAULT_PALLET
) -> RuntimeCallDescriptor:
    return RuntimeCallDescriptor(
        pallet=pallet,
        function=SUBMIT_PROOF,
        args=(
            CallArg("vk_or_hash", "VkOrHash", encode_vk_or_hash(proof.verification_key_bytes())),
            CallArg("proof", "Vec<u8>", encode_byte_sequence(proof.proof_bytes())),
            CallArg("pubs", "Vec<u8>", encode_byte_sequence(proof.public_input_bytes())),
            CallArg("domain_id", "Option<u32>", encode_domain_id(None)),
        ),
    )


def build_remark_call(data: bytes) -> RuntimeCallDescriptor:
    return RuntimeCallDescriptor(
        pallet="System",
        function="remark",
        args=(CallArg("remark", "Vec<u8>", encode_byte_sequence(data)),),
    )
