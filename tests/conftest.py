"""Shared test fixtures for the deltamd test suite."""

from __future__ import annotations

import pytest

from deltamd.config import DeltaMdConfig
from deltamd.converter.delta_to_md import DeltaToMarkdownConverter
from deltamd.converter.md_to_delta import MarkdownToDeltaConverter


@pytest.fixture
def config() -> DeltaMdConfig:
    """Default test configuration."""
    return DeltaMdConfig()


@pytest.fixture
def to_markdown(config: DeltaMdConfig) -> DeltaToMarkdownConverter:
    """Delta-to-Markdown converter using the default test config."""
    return DeltaToMarkdownConverter(config)


@pytest.fixture
def to_delta(config: DeltaMdConfig) -> MarkdownToDeltaConverter:
    """Markdown-to-delta converter using the default test config."""
    return MarkdownToDeltaConverter(config)
