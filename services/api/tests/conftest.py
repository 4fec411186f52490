# Point the app at a throwaway SQLite file and clear delivery settings before any app module is imported
import os
import tempfile

import pytest

_TMP_DIR = tempfile.mkdtemp(prefix="moderation-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
for _key in (
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_TLS",
    "SMTP_FROM",
    "SMTP_USER",
    "SMTP_PASS",
    "ADMIN_EMAIL",
    "INFO_EMAIL",
    "MODERATION_RULES_PATH",
    "APP_ENV",
    "ADMIN_API_TOKEN",
):
    os.environ.pop(_key, None)


@pytest.fixture
def fresh_db():
    """Empty tables for each test that touches persistence."""
    from db import Base, get_engine

    engine = get_engine()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
