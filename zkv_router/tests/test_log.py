"""Unit tests for logging setup and error stages of proof-file failures."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

from zkv_router.exceptions import EncodingError
from zkv_router.log import LOGGER_NAME, configure_logging
from zkv_router.proof.storage import load_proof


def _rich_handlers(logger: logging.Logger) -> list:
    return [h for h in logger.handlers if isinstance(h, RichHandler)]


def test_handler_goes_on_package_logger_only() -> None:
    package_logger = configure_logging(verbose=True)
    try:
        assert package_logger.name == LOGGER_NAME
        assert len(_rich_handlers(package_logger)) == 1
        assert package_logger.level == logging.DEBUG
        assert package_logger.propagate
        assert not _rich_handlers(logging.getLogger())

        configure_logging(verbose=False)
        assert len(_rich_handlers(package_logger)) == 1
        assert package_logger.level == logging.INFO
    finally:
        for handler in _rich_handlers(package_logger):
            package_logger.removeHandler(handler)


def test_unreadable_proof_file_reports_encode_stage(tmp_path: Path) -> None:
    with pytest.raises(EncodingError) as excinfo:
        load_proof(tmp_path / "absent.json")
    assert excinfo.value.stage == "encode"
    assert excinfo.value.field == "proof_file"
