"""Pytest configuration for psd-run tests."""

import logging
from typing import Any

import pytest

from psd_run.api.session import Session


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "psd: mark test as decoding real PSD files through psd-tools",
    )


@pytest.fixture(autouse=True)
def debug_logging(caplog):
    caplog.set_level(logging.DEBUG, logger="psd_run")


@pytest.fixture
def session():
    with Session() as session:
        yield session
