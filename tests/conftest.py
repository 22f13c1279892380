import sys
import os
import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from utils.error_manager import ErrorManager


@pytest.fixture(autouse=True)
def isolated_error_log(tmp_path, monkeypatch):
    """Keep ErrorManager writes inside the test's tmp_path."""
    log_file = str(tmp_path / "generation_errors.log")
    monkeypatch.setattr(ErrorManager, "LOG_FILE", log_file)
    return log_file
