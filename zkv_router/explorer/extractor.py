"""Multi-strategy extraction of proof metadata from rendered explorer pages.

Explorer markup is unstable: depending on the deployment the artifact URL
and verification key show up in embedded Next.js state, in an assigned
global state object, as escaped key/value pairs in streamed payloads, or
only as visible text near a "Program" label. Each strategy handles one of
these shapes; the extractor runs them in order and the first one that
finds both values wins.
"""

from __future__ import annotations

import json
import logging
import re
import string
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Protocol, Sequence

from ..exceptions import NotFoundError
from ..log import get_logger
from ..types import ProofRequestRecord
from .constants import (
    ARTIFACT_BUCKET_PATTERN,
    HEX_VALUE_PATTERN,
    NEXT_DATA_MARKER,
    PREVIEW_CHARS,
    PROXIMITY_KEYWORDS,
    STATE_VARIABLE,
    URL_FIELDS,
    URL_PATTERNS,
    VK_FIELDS,
    VK_HEX_PATTERN,
    VK_PATTERNS,
    WINDOW_AFTER,
    WINDOW_BEFORE,
    decode_entities,
)


@dataclass(frozen=True)
class Candidate:
    """What a single strategy managed to find."""

    artifact_url: Optional[str] = None
    verification_key: Optional[str] = None

    def record(self) -> Optional[ProofRequestRecord]:
        if not self.artifact_url or not self.verification_key:
            return None
        return ProofRequestRecord(
            artifact_url=self.artifact_url, verification_key=self.verification_key
        )


class ExtractionStrategy(Protocol):
    name: str

    def scan(self, html: str) -> Candidate:
        ...


def _walk(tree: Any) -> Iterator[tuple[str, Any]]:
    if isinstance(tree, dict):
        for key, value in tree.items():
            yield key, value
            yield from _walk(value)
    elif isinstance(tree, list):
        for item in tree:
            yield from _walk(item)


def _find_field(tree: Any, names: Sequence[str], accept) -> Optional[str]:
    for name in names:
        for key, value in _walk(tree):
            if key == name and isinstance(value, str) and accept(value):
                return value
    return None


def _is_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def _is_hex(value: str) -> bool:
    return bool(HEX_VALUE_PATTERN.match(value))


def _candidate_from_tree(tree: Any) -> Candidate:
    url = _find_field(tree, URL_FIELDS, _is_url)
    vk = _find_field(tree, VK_FIELDS, _is_hex)
    return Candidate(
        artifact_url=decode_entities(url) if url else None,
        verification_key=vk,
    )


class EmbeddedStateStrategy:
    """JSON payload of the script tag carrying a known marker id."""

    name = "embedded-state"

    def __init__(self, marker: str = NEXT_DATA_MARKER) -> None:
        self._marker = marker

    def scan(self, html: str) -> Candidate:
        pos = html.find(self._marker)
        if pos < 0:
            return Candidate()
        start = html.find(">", pos)
        end = html.find("</script>", start)
        if start < 0 or end < 0:
            return Candidate()
        try:
            tree = json.loads(html[start + 1 : end])
        except json.JSONDecodeError:
            return Candidate()
        return _candidate_from_tree(tree)


class AssignedStateStrategy:
    """Object literal assigned to a global state variable in an inline script."""

    name = "assigned-state"

    def __init__(self, variable: str = STATE_VARIABLE) -> None:
        self._pattern = re.compile(re.escape(variable) + r"\s*=\s*")

    def scan(self, html: str) -> Candidate:
        match = self._pattern.search(html)
        if match is None:
            return Candidate()
        try:
            tree, _ = json.JSONDecoder().raw_decode(html, match.end())
        except json.JSONDecodeError:
            return Candidate()
        return _candidate_from_tree(tree)


class KeyValueScanStrategy:
    """Regex scan for "field":"value" pairs anywhere in the markup."""

    name = "key-value-scan"

    def scan(self, html: str) -> Candidate:
        url = _first_group(URL_PATTERNS, html)
        vk = _first_group(VK_PATTERNS, html)
        return Candidate(
            artifact_url=decode_entities(url) if url else None,
            verification_key=vk,
        )


class KeywordProximityStrategy:
    """A 32-byte hex value near the first matching keyword.

    The window spans `before` characters ahead of the keyword and `after`
    characters from its start; without a hit there the whole page is scanned.
    """

    name = "keyword-proximity"

    def __init__(
        self,
        keywords: Sequence[str] = PROXIMITY_KEYWORDS,
        before: int = WINDOW_BEFORE,
        after: int = WINDOW_AFTER,
    ) -> None:
        self._keywords = tuple(keywords)
        self._before = before
        self._after = after

    def scan(self, html: str) -> Candidate:
        url_match = ARTIFACT_BUCKET_PATTERN.search(html)
        url = decode_entities(url_match.group(1)) if url_match else None
        return Candidate(artifact_url=url, verification_key=self._find_key(html))

    def _find_key(self, html: str) -> Optional[str]:
        position = None
        for keyword in self._keywords:
            idx = html.find(keyword)
            if idx >= 0:
                position = idx
                break
        if position is None:
            return None
        start = max(position - self._before, 0)
        end = min(position + self._after, len(html))
        return _key_in(html, start, end) or _key_in(html, 0, len(html))


def _key_in(html: str, start: int, end: int) -> Optional[str]:
    # endpos hides what follows the window from the lookahead, so a longer
    # hex run crossing the edge is re-checked against the whole page.
    for match in VK_HEX_PATTERN.finditer(html, start, end):
        if match.end() < len(html) and html[match.end()] in string.hexdigits:
            continue
        return match.group(0)
    return None


def _first_group(patterns: Sequence[re.Pattern], html: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(html)
        if match:
            return match.group(1)
    return None


def default_strategies() -> tuple[ExtractionStrategy, ...]:
    return (
        EmbeddedStateStrategy(),
        AssignedStateStrategy(),
        KeyValueScanStrategy(),
        KeywordProximityStrategy(),
    )


class MetadataExtractor:
    """Run strategies in order; the first complete candidate wins."""

    def __init__(
        self,
        strategies: Optional[Sequence[ExtractionStrategy]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._strategies = tuple(strategies) if strategies is not None else default_strategies()
        self._log = get_logger(__name__, logger)

    def extract(self, html: str) -> ProofRequestRecord:
        self._log.debug("HTML preview (first %d chars): %s", PREVIEW_CHARS, html[:PREVIEW_CHARS])
        found_by: Dict[str, str] = {}
        for strategy in self._strategies:
            candidate = strategy.scan(html)
            record = candidate.record()
            if record is not None:
                self._log.info("Proof metadata found by %s strategy", strategy.name)
                self._log.info("Artifact URL: %s", record.artifact_url)
                self._log.info("VK: %s", record.verification_key)
                return record
            if candidate.artifact_url:
                found_by.setdefault("artifact_url", strategy.name)
            if candidate.verification_key:
                found_by.setdefault("verification_key", strategy.name)
            self._log.debug(
                "%s strategy: url=%s vk=%s",
                strategy.name,
                bool(candidate.artifact_url),
                bool(candidate.verification_key),
            )

        missing = tuple(
            field for field in ("artifact_url", "verification_key") if field not in found_by
        )
        raise NotFoundError(missing, found_by)
