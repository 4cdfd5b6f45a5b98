"""
Pytest configuration file for the dreaddloader test suite.

Provides:
- Loguru-to-caplog bridging so tests can assert on log output
- Results-file fixtures written to ``tmp_path`` in either delimiter dialect
- Hypothesis profile tuned for the small tables these tests build
"""

import contextlib
import logging
import sys
from pathlib import Path

# Add the src directory to the Python path
src_path = str(Path(__file__).parent.parent / "src")
sys.path.insert(0, src_path)

import pytest
from hypothesis import settings
from loguru import logger

from tests.utils import make_complete_rows, write_results_csv


settings.register_profile("dreaddloader", max_examples=50, deadline=None)
settings.load_profile("dreaddloader")


# ============================================================================
# LOGURU INTEGRATION FIXTURES
# ============================================================================

@pytest.fixture(autouse=True, scope="function")
def capture_loguru_logs_globally(caplog):
    """
    Route Loguru records into pytest's caplog for the duration of each test.
    """
    class PropagateHandler(logging.Handler):
        def emit(self, record):
            logging.getLogger(record.name or "dreaddloader").handle(record)

    caplog.set_level(logging.DEBUG)
    handler_id = logger.add(
        PropagateHandler(),
        format="{message}",
        level="DEBUG",
        catch=True,
        enqueue=False,
    )

    yield

    with contextlib.suppress(ValueError):
        logger.remove(handler_id)


# ============================================================================
# RESULTS FILE FIXTURES
# ============================================================================

@pytest.fixture
def complete_rows():
    """Two subjects, two conditions, every timepoint recorded."""
    return make_complete_rows(subjects=["409", "408"], compound_doses=["Saline_0", "21_1"])


@pytest.fixture
def write_csv(tmp_path):
    """Factory writing result rows to a CSV under ``tmp_path``."""
    counter = {"n": 0}

    def _write(rows, delimiter=",", decimal=".", name=None, **kwargs):
        counter["n"] += 1
        path = tmp_path / (name or f"results_{counter['n']}.csv")
        return write_results_csv(path, rows, delimiter=delimiter, decimal=decimal, **kwargs)

    return _write


@pytest.fixture
def results_csv(write_csv, complete_rows):
    """Comma-delimited results file for a fully complete experiment."""
    return write_csv(complete_rows)
