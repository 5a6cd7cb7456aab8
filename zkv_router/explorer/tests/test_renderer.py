"""Unit tests for the headless-browser renderer."""

from __future__ import annotations

import subprocess

import pytest

from zkv_router.exceptions import RenderError
from zkv_router.explorer import renderer as renderer_module
from zkv_router.explorer.renderer import ChromiumRenderer, StaticRenderer, request_url

REQUEST_ID = "0x921d36fb2ad5e23d521c624624e9a07e2297f70704c18661e55ccf7ca4464c78"


def test_request_url_joins_base_and_id() -> None:
    assert (
        request_url("https://explorer.succinct.xyz/", REQUEST_ID)
        == f"https://explorer.succinct.xyz/request/{REQUEST_ID}"
    )


def test_render_invokes_headless_dump_dom(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def fake_run(command, **kwargs):
        calls.append(command)
        return subprocess.CompletedProcess(command, 0, stdout=b"<html>ok</html>", stderr=b"")

    monkeypatch.setattr(renderer_module.subprocess, "run", fake_run)
    html = ChromiumRenderer("https://explorer.succinct.xyz", "chromium").render(REQUEST_ID)

    assert html == "<html>ok</html>"
    assert calls[0][0] == "chromium"
    assert "--headless" in calls[0]
    assert "--dump-dom" in calls[0]
    assert calls[0][-1].endswith(f"/request/{REQUEST_ID}")


def test_render_failure_surfaces_stderr(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(command, **kwargs):
        return subprocess.CompletedProcess(command, 1, stdout=b"", stderr=b"no display")

    monkeypatch.setattr(renderer_module.subprocess, "run", fake_run)
    with pytest.raises(RenderError, match="no display"):
        ChromiumRenderer("https://explorer.succinct.xyz").render(REQUEST_ID)


def test_render_missing_binary(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(command, **kwargs):
        raise FileNotFoundError(command[0])

    monkeypatch.setattr(renderer_module.subprocess, "run", fake_run)
    with pytest.raises(RenderError, match="missing renderer binary"):
        ChromiumRenderer("https://explorer.succinct.xyz", "no-such-browser").render(REQUEST_ID)


def test_static_renderer_ignores_request_id() -> None:
    assert StaticRenderer("<html/>").render(REQUEST_ID) == "<html/>"
