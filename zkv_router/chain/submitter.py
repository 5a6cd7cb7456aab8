"""Signing and submission of runtime calls to a Substrate node.

A submitter owns one node connection and one signer for its lifetime; both
are created lazily on first use and never shared with other submitters.
`submit` returns once the node has accepted the extrinsic into its pool
(no wait for block inclusion) or rejected it synchronously.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Optional

from substrateinterface import Keypair, SubstrateInterface
from substrateinterface.exceptions import SubstrateRequestException
from websocket import WebSocketException

from ..config import DEFAULT_PALLET, RouterConfig
from ..exceptions import (
    ChainError,
    ConnectivityError,
    RuntimeRejectionError,
    SigningError,
)
from ..log import get_logger
from ..types import CanonicalProof, Failure, SubmissionOutcome, Success
from .call import RuntimeCallDescriptor, build_remark_call, build_submit_proof_call

INVALID_TRANSACTION = 1010

RUNTIME_HINTS = {
    INVALID_TRANSACTION: (
        "invalid transaction; commonly insufficient funds for fees, "
        "a malformed proof or parameters, or a chain-side validation failure"
    ),
}

_CODE_RE = re.compile(r"""['"]?code['"]?\s*[:=]\s*(-?\d+)""")

_TRANSPORT_ERRORS = (OSError, WebSocketException)

SubstrateFactory = Callable[[str], Any]
KeypairFactory = Callable[[str], Any]


def _connect(url: str) -> SubstrateInterface:
    return SubstrateInterface(url=url)


def _keypair_from_mnemonic(mnemonic: str) -> Keypair:
    return Keypair.create_from_mnemonic(mnemonic)


def rejection_code(exc: BaseException) -> Optional[int]:
    """Best-effort numeric error code from a node rejection."""
    payload = exc.args[0] if exc.args else None
    if isinstance(payload, dict) and "code" in payload:
        try:
            return int(payload["code"])
        except (TypeError, ValueError):
            return None
    raw = str(exc)
    match = _CODE_RE.search(raw)
    if match:
        return int(match.group(1))
    if str(INVALID_TRANSACTION) in raw:
        return INVALID_TRANSACTION
    return None


def classify_rejection(exc: BaseException) -> RuntimeRejectionError:
    code = rejection_code(exc)
    return RuntimeRejectionError(str(exc), code=code, hint=RUNTIME_HINTS.get(code))


def _normalize_hash(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    text = str(value)
    return text if text.startswith("0x") else "0x" + text


class ChainSubmitter:
    def __init__(
        self,
        ws_url: str,
        mnemonic: Optional[str] = None,
        pallet: str = DEFAULT_PALLET,
        substrate_factory: SubstrateFactory = _connect,
        keypair_factory: KeypairFactory = _keypair_from_mnemonic,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._ws_url = ws_url
        self._mnemonic = mnemonic
        self._pallet = pallet
        self._substrate_factory = substrate_factory
        self._keypair_factory = keypair_factory
        self._log = get_logger(__name__, logger)
        self._substrate: Any = None
        self._keypair: Any = None

    @classmethod
    def from_config(cls, config: RouterConfig, **kwargs: Any) -> "ChainSubmitter":
        return cls(
            config.ws_url,
            mnemonic=config.mnemonic,
            pallet=config.pallet,
            **kwargs,
        )

    # --- context manager -------------------------------------------------

    def __enter__(self) -> "ChainSubmitter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def close(self) -> None:
        if self._substrate is not None:
            self._substrate.close()
            self._substrate = None

    # --- connection and signer --------------------------------------------

    def signer(self) -> Any:
        if self._keypair is None:
            if not self._mnemonic:
                raise SigningError("no signing mnemonic configured")
            try:
                self._keypair = self._keypair_factory(self._mnemonic)
            except Exception as exc:
                raise SigningError(f"key derivation from mnemonic failed: {exc}") from exc
            self._log.info("Using signer account: %s", getattr(self._keypair, "ss58_address", "?"))
        return self._keypair

    def connect(self) -> Any:
        if self._substrate is None:
            self._log.info("Connecting to Substrate node at: %s", self._ws_url)
            try:
                self._substrate = self._substrate_factory(self._ws_url)
            except _TRANSPORT_ERRORS as exc:
                raise ConnectivityError(f"cannot reach {self._ws_url}: {exc}") from exc
            self._log.info("Connected to Substrate node successfully")
        return self._substrate

    # --- public API ------------------------------------------------------

    def list_pallets(self) -> str:
        return (
            f"Chain endpoint: {self._ws_url}\n"
            f"Proof submissions use the {self._pallet} pallet.\n"
            "Listing pallets is not supported; check the network documentation "
            "for the pallets available on this chain."
        )

    def remark(self, data: bytes) -> str:
        self._log.info("Preparing system.remark transaction (%d bytes)...", len(data))
        return self._sign_and_submit(build_remark_call(data))

    def submit(self, proof: CanonicalProof) -> str:
        descriptor = build_submit_proof_call(proof, self._pallet)
        self._log.info("Creating transaction call %s", descriptor.describe())
        self._log.debug(
            "Proof %d bytes, pubs %d bytes, domain_id None",
            len(proof.proof_bytes()),
            len(proof.public_input_bytes()),
        )
        try:
            return self._sign_and_submit(descriptor)
        except RuntimeRejectionError as exc:
            self._log.error("Transaction submission failed: %s", exc.raw)
            if exc.hint:
                self._log.error("Error %s detected: %s", exc.code, exc.hint)
            raise

    def submit_outcome(self, proof: CanonicalProof) -> SubmissionOutcome:
        try:
            return Success(tx_hash=self.submit(proof))
        except ChainError as exc:
            return Failure.from_error(exc)

    # --- internals -------------------------------------------------------

    def _sign_and_submit(self, descriptor: RuntimeCallDescriptor) -> str:
        keypair = self.signer()
        substrate = self.connect()
        try:
            call = substrate.compose_call(
                call_module=descriptor.pallet,
                call_function=descriptor.function,
                call_params=descriptor.call_params(),
            )
            extrinsic = substrate.create_signed_extrinsic(call=call, keypair=keypair)
            receipt = substrate.submit_extrinsic(extrinsic, wait_for_inclusion=False)
        except SubstrateRequestException as exc:
            raise classify_rejection(exc) from exc
        except _TRANSPORT_ERRORS as exc:
            raise ConnectivityError(f"connection to {self._ws_url} lost: {exc}") from exc
        except ValueError as exc:
            # compose_call: pallet, function or argument shape unknown to the runtime
            raise RuntimeRejectionError(f"call rejected by runtime metadata: {exc}") from exc

        tx_hash = _normalize_hash(receipt.extrinsic_hash)
        self._log.info("Transaction submitted successfully with hash: %s", tx_hash)
        return tx_hash
