"""Fixtures for CLI tests."""

from collections.abc import Iterator
from unittest.mock import patch

import pytest
from forcerm.core.platform import HostCapabilities
from forcerm.core.settings import EngineSettings


@pytest.fixture
def cli_engine(
    thread_settings: EngineSettings, posix_caps: HostCapabilities
) -> Iterator[EngineSettings]:
    """Make CLI commands build thread-isolated engines without host probing."""
    with (
        patch("forcerm.cli.types.load_settings", return_value=thread_settings),
        patch("forcerm.cli.types.detect_capabilities", return_value=posix_caps),
    ):
        yield thread_settings
