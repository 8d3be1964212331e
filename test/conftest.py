"""
Test Configuration

Environment setup MUST happen before any application import: settings and
the loguru sinks read the environment at import time.
"""

import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    # Never touch a developer's real session record
    os.environ['SESSION_STORE_PATH'] = str(test_log_dir / 'session.json')
    os.environ.setdefault('LIVE_RECONNECT_DELAY_SECONDS', '0.01')


# Call immediately to set env vars before any imports
_early_setup_test_environment()
