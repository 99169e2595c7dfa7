import sys
from pathlib import Path

import pytest

from cypress_extractor.core.logging import setup_logging


@pytest.fixture
def fixtures_path():
    return Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def reset_logging():
    # the CLI points logging at the stream captured for a single test
    yield
    setup_logging("WARNING", stream=sys.stderr)
