"""
Test configuration for the accessibility remediation pipeline.

DATABASE_URL must point at the test database before anything under app/ is imported,
since the engine is created at import time.
"""

import os
import tempfile

from dotenv import load_dotenv

load_dotenv()

test_db_url = os.getenv("TEST_DATABASE_URL")
if test_db_url:
    if "postgresql://" in test_db_url and "asyncpg" not in test_db_url:
        test_db_url = test_db_url.replace("postgresql://", "postgresql+asyncpg://")
    os.environ["DATABASE_URL"] = test_db_url
else:
    test_db_path = tempfile.mktemp(suffix=".db")
    os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_path}"

os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="a11y-logs-")
os.environ["STORE_SAVE_RETRY_DELAY_SECONDS"] = "0"
os.environ["QUEUE_TO_REMEDIATION_SERVICE"] = "a11y.remediation.requests"
os.environ["A11Y_ENABLED_FEATURES"] = ""
