"""Markers and patterns used to pull proof metadata out of explorer pages."""

from __future__ import annotations

import re

# Field names, most specific first.
URL_FIELDS = ("artifactUrl", "artifact_url", "artifact")
VK_FIELDS = ("program", "verificationKey", "vk")

NEXT_DATA_MARKER = "__NEXT_DATA__"
STATE_VARIABLE = "window.__INITIAL_STATE__"

# Keys in escaped JSON (e.g. streamed React payloads) carry backslashes.
_Q = r'\\?"'

# Backslashes end a URL too, so escaped payloads do not leak into it.
ARTIFACT_BUCKET_PATTERN = re.compile(r"(https://spn-artifacts-mainnet\.s3[^\"\\<>\s]*)")

URL_PATTERNS = tuple(
    re.compile(_Q + name + _Q + r"\s*:\s*" + _Q + r"(https?://[^\"\\<>\s]+)")
    for name in URL_FIELDS
) + (
    ARTIFACT_BUCKET_PATTERN,
    re.compile(r"(https://spn-artifacts[\w-]*\.s3[^\"\\<>\s]*)"),
)

VK_PATTERNS = tuple(
    re.compile(_Q + name + _Q + r"\s*:\s*" + _Q + r"(0x[0-9a-fA-F]{64,})")
    for name in VK_FIELDS
)

VK_HEX_PATTERN = re.compile(r"0x[0-9a-fA-F]{64}(?![0-9a-fA-F])")
HEX_VALUE_PATTERN = re.compile(r"^(0x)?[0-9a-fA-F]+$")

PROXIMITY_KEYWORDS = ("Program Blobstream", "Blobstream", "Program")
WINDOW_BEFORE = 1000
WINDOW_AFTER = 2000

HTML_ENTITIES = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)

PREVIEW_CHARS = 500


def decode_entities(text: str) -> str:
    for entity, char in HTML_ENTITIES:
        text = text.replace(entity, char)
    return text
