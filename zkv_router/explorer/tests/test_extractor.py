"""Unit tests for proof metadata extraction strategies."""

from __future__ import annotations

import json

import pytest

from zkv_router.exceptions import NotFoundError
from zkv_router.explorer.extractor import (
    AssignedStateStrategy,
    Candidate,
    EmbeddedStateStrategy,
    KeyValueScanStrategy,
    KeywordProximityStrategy,
    MetadataExtractor,
)

VK = "0x" + "ab" * 32
OTHER_VK = "0x" + "cd" * 32
ARTIFACT = "https://spn-artifacts-mainnet.s3.us-east-1.amazonaws.com/proofs/req-1?X-Amz-Signature=abc&X-Amz-Date=20250101"
ARTIFACT_ESCAPED = ARTIFACT.replace("&", "&amp;")


def _next_data(payload: dict) -> str:
    return (
        "<html><body><div id=\"__next\"></div>"
        f'<script id="__NEXT_DATA__" type="application/json">{json.dumps(payload)}</script>'
        "</body></html>"
    )


def _program_page(filler_before: int = 0, filler_after: int = 0) -> str:
    return (
        "<html><body>"
        f'<a href="{ARTIFACT_ESCAPED}">Download artifact</a>'
        + "x" * filler_before
        + "<dt>Program</dt>"
        + "y" * filler_after
        + f"<dd>{VK}</dd>"
        "</body></html>"
    )


class _Recording:
    def __init__(self, name: str, candidate: Candidate) -> None:
        self.name = name
        self._candidate = candidate
        self.calls = 0

    def scan(self, html: str) -> Candidate:
        self.calls += 1
        return self._candidate


def test_embedded_state_walks_nested_alternate_fields() -> None:
    html = _next_data(
        {"props": {"pageProps": {"request": {"artifact_url": ARTIFACT, "program": {"vk": VK}}}}}
    )
    candidate = EmbeddedStateStrategy().scan(html)
    assert candidate.record() is not None
    assert candidate.artifact_url == ARTIFACT
    assert candidate.verification_key == VK


def test_embedded_state_prefers_most_specific_field_name() -> None:
    html = _next_data({"artifact": "https://elsewhere.example/a", "artifactUrl": ARTIFACT, "vk": VK})
    assert EmbeddedStateStrategy().scan(html).artifact_url == ARTIFACT


def test_embedded_state_ignores_non_hex_program_name() -> None:
    html = _next_data({"artifactUrl": ARTIFACT, "program": "Blobstream", "verificationKey": VK})
    assert EmbeddedStateStrategy().scan(html).verification_key == VK


def test_embedded_state_bad_json_yields_empty_candidate() -> None:
    html = '<script id="__NEXT_DATA__" type="application/json">{not json</script>'
    assert EmbeddedStateStrategy().scan(html) == Candidate()


def test_assigned_state_parses_object_literal() -> None:
    state = {"proofRequest": {"artifactUrl": ARTIFACT, "verificationKey": VK}}
    html = f"<script>window.__INITIAL_STATE__ = {json.dumps(state)};var x = 1;</script>"
    candidate = AssignedStateStrategy().scan(html)
    assert candidate.record().artifact_url == ARTIFACT
    assert candidate.record().verification_key == VK


def test_key_value_scan_handles_escaped_payloads_and_entities() -> None:
    payload = f'self.__next_f.push([1,"{{\\"artifactUrl\\":\\"{ARTIFACT_ESCAPED}\\",\\"vk\\":\\"{VK}\\"}}"])'
    candidate = KeyValueScanStrategy().scan(f"<script>{payload}</script>")
    assert candidate.artifact_url == ARTIFACT
    assert candidate.verification_key == VK


def test_key_value_scan_accepts_double_encoded_key() -> None:
    double = "0x" + ("0x" + "ab" * 32).encode("ascii").hex()
    html = f'{{"artifact_url":"{ARTIFACT}","program":"{double}"}}'
    assert KeyValueScanStrategy().scan(html).verification_key == double


def test_proximity_finds_key_after_program_keyword() -> None:
    candidate = KeywordProximityStrategy().scan(_program_page(filler_after=1500))
    assert candidate.artifact_url == ARTIFACT
    assert candidate.verification_key == VK


def test_proximity_prefers_most_specific_keyword() -> None:
    html = (
        f"<p>Program</p><span>{OTHER_VK}</span>"
        + "z" * 5000
        + f"<p>Program Blobstream</p><span>{VK}</span>"
    )
    assert KeywordProximityStrategy().scan(html).verification_key == VK


def test_proximity_falls_back_to_whole_document() -> None:
    html = f"<p>{OTHER_VK}</p>" + "z" * 5000 + "<p>Program</p>" + "z" * 3000
    assert KeywordProximityStrategy().scan(html).verification_key == OTHER_VK


def test_proximity_window_wins_over_earlier_match() -> None:
    html = f"<p>{OTHER_VK}</p>" + "z" * 5000 + f"<p>Program</p><p>{VK}</p>"
    assert KeywordProximityStrategy().scan(html).verification_key == VK


def test_proximity_requires_keyword() -> None:
    html = f'<a href="{ARTIFACT}">a</a><p>{VK}</p>'
    assert KeywordProximityStrategy().scan(html).verification_key is None


def test_extractor_returns_entity_decoded_url_and_key() -> None:
    record = MetadataExtractor().extract(_program_page(filler_before=900, filler_after=1900))
    assert record.artifact_url == ARTIFACT
    assert "&amp;" not in record.artifact_url
    assert record.verification_key == VK


def test_extractor_stops_at_first_complete_strategy() -> None:
    first = _Recording("first", Candidate(artifact_url=ARTIFACT))
    second = _Recording("second", Candidate(artifact_url=ARTIFACT, verification_key=VK))
    third = _Recording("third", Candidate(artifact_url=ARTIFACT, verification_key=OTHER_VK))

    record = MetadataExtractor([first, second, third]).extract("<html></html>")

    assert record.verification_key == VK
    assert (first.calls, second.calls, third.calls) == (1, 1, 0)


def test_extractor_structured_state_beats_proximity() -> None:
    html = _next_data({"artifactUrl": ARTIFACT, "vk": VK}) + f"<p>Program</p><p>{OTHER_VK}</p>"
    assert MetadataExtractor().extract(html).verification_key == VK


def test_extractor_not_found_names_both_fields() -> None:
    with pytest.raises(NotFoundError) as excinfo:
        MetadataExtractor().extract("<html><body>nothing to see</body></html>")
    assert excinfo.value.missing == ("artifact_url", "verification_key")


def test_extractor_not_found_names_missing_key() -> None:
    html = f'<a href="{ARTIFACT}">artifact</a><p>Program</p>'
    with pytest.raises(NotFoundError) as excinfo:
        MetadataExtractor().extract(html)
    assert excinfo.value.missing == ("verification_key",)
    assert "verification_key" in str(excinfo.value)


def test_extractor_not_found_names_missing_url() -> None:
    with pytest.raises(NotFoundError) as excinfo:
        MetadataExtractor().extract(f"<p>Program</p><p>{VK}</p>")
    assert excinfo.value.missing == ("artifact_url",)


def test_proximity_stops_bucket_url_at_escaped_quote() -> None:
    url = "https://spn-artifacts-mainnet.s3.us-east-1.amazonaws.com/proofs/req-1.bin"
    html = (
        f'<script>self.__next_f.push([1,"{{\\"artifactUrl\\":\\"{url}\\"}}"])</script>'
        f"<dt>Program</dt><dd>{VK}</dd>"
    )
    record = MetadataExtractor().extract(html)
    assert record.artifact_url == url
    assert record.verification_key == VK


def test_proximity_skips_longer_hex_run_cut_by_window_edge() -> None:
    long_run = "0x" + "ab" * 40
    html = f"Program {long_run} {OTHER_VK}"
    strategy = KeywordProximityStrategy(before=0, after=len("Program ") + 66)
    assert strategy.scan(html).verification_key == OTHER_VK


def test_extractor_reports_fields_split_across_strategies() -> None:
    html = f'{{"artifactUrl":"https://other.example/a.bin"}}<dt>Program</dt><dd>{VK}</dd>'
    with pytest.raises(NotFoundError) as excinfo:
        MetadataExtractor().extract(html)
    assert excinfo.value.missing == ()
    assert excinfo.value.found_by == {
        "artifact_url": "key-value-scan",
        "verification_key": "keyword-proximity",
    }
    assert "missing" not in str(excinfo.value)
    assert "artifact_url by key-value-scan" in str(excinfo.value)
