# tests/conftest.py
import os
import tempfile

# Settings are read once at import time, so point them at a scratch database
# before anything imports captionhub.
_TEST_DIR = tempfile.mkdtemp(prefix="captionhub-tests-")
os.environ.setdefault("SQLALCHEMY_DATABASE_URI", f"sqlite:///{os.path.join(_TEST_DIR, 'app.db')}")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("INGEST_LOCK_TIMEOUT_SECONDS", "1")
