"""
Proof routing pipeline.

request id -> rendered page -> (artifact URL, VK) -> artifact bytes
-> canonical proof file -> verification pallet.

Steps run strictly one after another. A conversion writes its proof file
completely before any submission of that file can start.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .chain.submitter import ChainSubmitter
from .config import RouterConfig
from .exceptions import EncodingError, ZkvRouterError
from .explorer.extractor import MetadataExtractor
from .explorer.fetcher import ArtifactFetcher
from .explorer.renderer import ChromiumRenderer, PageRenderer
from .log import get_logger
from .proof.encoder import ProofEncoder, make_shrinker
from .proof.storage import load_proof, save_proof, write_json_atomic
from .types import CanonicalProof, ProofRequestRecord

DEFAULT_OUTPUT = "proof.json"
DEFAULT_DETAILS_OUTPUT = "proof_details.json"

FetcherFactory = Callable[[RouterConfig], ArtifactFetcher]
SubmitterFactory = Callable[[RouterConfig], ChainSubmitter]


def _default_fetcher(config: RouterConfig) -> ArtifactFetcher:
    return ArtifactFetcher(timeout=config.http_timeout)


def _default_submitter(config: RouterConfig) -> ChainSubmitter:
    return ChainSubmitter.from_config(config)


@dataclass(frozen=True)
class Conversion:
    request_id: str
    proof_path: Path
    metadata: ProofRequestRecord
    proof: CanonicalProof
    artifact_size: int
    artifact_sha256: str

    def details(self) -> dict:
        return {
            "request_id": self.request_id,
            "artifact_url": self.metadata.artifact_url,
            "artifact_size": self.artifact_size,
            "artifact_sha256": self.artifact_sha256,
            "vk": self.proof.verification_key,
            "raw_vk": self.metadata.verification_key,
            "proof_bytes": len(self.proof.proof_bytes()),
            "pubs_bytes": len(self.proof.public_input_bytes()),
            "proof_path": str(self.proof_path),
        }


@dataclass(frozen=True)
class BatchItem:
    request_id: str
    proof_path: Path
    tx_hash: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ProofRouter:
    def __init__(
        self,
        config: RouterConfig,
        renderer: Optional[PageRenderer] = None,
        extractor: Optional[MetadataExtractor] = None,
        encoder: Optional[ProofEncoder] = None,
        fetcher_factory: FetcherFactory = _default_fetcher,
        submitter_factory: SubmitterFactory = _default_submitter,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config
        self._log = get_logger(__name__, logger)
        self._renderer = renderer or ChromiumRenderer(
            config.api_base, config.renderer_binary, logger=logger
        )
        self._extractor = extractor or MetadataExtractor(logger=logger)
        self._encoder = encoder or ProofEncoder(make_shrinker(config), logger=logger)
        self._fetcher_factory = fetcher_factory
        self._submitter_factory = submitter_factory

    @property
    def config(self) -> RouterConfig:
        return self._config

    # --- conversion ------------------------------------------------------

    def convert(
        self,
        request_id: str,
        output: Path | str = DEFAULT_OUTPUT,
        details_output: Optional[Path | str] = None,
    ) -> Path:
        return self.convert_request(request_id, output, details_output).proof_path

    def convert_request(
        self,
        request_id: str,
        output: Path | str = DEFAULT_OUTPUT,
        details_output: Optional[Path | str] = None,
    ) -> Conversion:
        self._log.info("Fetching proof request metadata for %s...", request_id)
        html = self._renderer.render(request_id)
        metadata = self._extractor.extract(html)

        key = self._encoder.canonicalize_key(metadata.verification_key)
        with self._fetcher_factory(self._config) as fetcher:
            artifact = fetcher.fetch(metadata.artifact_url)

        proof = self._encoder.convert(artifact, key)
        proof_path = save_proof(proof, output)
        self._log.info("Proof converted successfully: %s", proof_path)

        conversion = Conversion(
            request_id=request_id,
            proof_path=proof_path,
            metadata=metadata,
            proof=proof,
            artifact_size=len(artifact),
            artifact_sha256=hashlib.sha256(artifact).hexdigest(),
        )
        if details_output is not None:
            write_json_atomic(conversion.details(), details_output)
            self._log.info("Detailed proof information saved to %s", details_output)
        return conversion

    # --- chain operations --------------------------------------------------

    def open_submitter(self) -> ChainSubmitter:
        """New chain session; the caller closes it (use as a context manager)."""
        self._config.require_mnemonic()
        return self._submitter_factory(self._config)

    def load(self, proof_path: Path | str) -> CanonicalProof:
        return load_proof(proof_path, default_vk=self._config.default_vk, logger=self._log)

    def submit(
        self, proof_path: Path | str, submitter: Optional[ChainSubmitter] = None
    ) -> str:
        proof = self.load(proof_path)
        if submitter is not None:
            return submitter.submit(proof)
        with self.open_submitter() as session:
            return session.submit(proof)

    def remark(
        self, proof_path: Path | str, submitter: Optional[ChainSubmitter] = None
    ) -> str:
        path = Path(proof_path)
        self._log.info("Reading proof file from: %s", path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise EncodingError("proof_file", f"cannot read {path}: {exc}") from exc
        if submitter is not None:
            return submitter.remark(data)
        with self.open_submitter() as session:
            return session.remark(data)

    def list_pallets(self) -> str:
        return self._submitter_factory(self._config).list_pallets()

    # --- batch -------------------------------------------------------------

    def batch(
        self,
        request_ids: Sequence[str],
        output_dir: Path | str = "proofs",
        submit: bool = False,
    ) -> List[BatchItem]:
        """Convert (and optionally submit) each request in turn.

        A failed request is recorded and the batch moves on.
        """
        out_dir = Path(output_dir)
        results: List[BatchItem] = []
        total = len(request_ids)
        for index, request_id in enumerate(request_ids):
            proof_path = out_dir / f"proof_{index}.json"
            self._log.info("Processing request %d/%d: %s", index + 1, total, request_id)
            try:
                self.convert(request_id, proof_path)
                tx_hash = self.submit(proof_path) if submit else None
            except ZkvRouterError as exc:
                self._log.error("Request %s failed at %s stage: %s", request_id, exc.stage, exc)
                results.append(BatchItem(request_id, proof_path, error=f"{exc.stage}: {exc}"))
                continue
            results.append(BatchItem(request_id, proof_path, tx_hash=tx_hash))
        return results
