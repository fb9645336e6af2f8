"""Pytest configuration for tests.

No sys.path hacks - tests should import from installed glyphsplist package.
"""

import pytest
from pathlib import Path

FIXTURES = Path(__file__).resolve().parent / "fixtures"


def pytest_addoption(parser):
    """Add gated perf test option."""
    parser.addoption(
        "--run-perf",
        action="store_true",
        default=False,
        help="Run performance sentinel benchmarks (gated)."
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "perf: performance sentinel (needs --run-perf)")


def pytest_collection_modifyitems(config, items):
    """Skip perf-marked tests unless --run-perf is set."""
    if config.getoption("--run-perf"):
        return
    skip_perf = pytest.mark.skip(reason="perf tests gated; pass --run-perf")
    for item in items:
        if "perf" in item.keywords:
            item.add_marker(skip_perf)


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding the .glyphs test documents."""
    return FIXTURES
