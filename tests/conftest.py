import os
import sys
from pathlib import Path
from typing import Generator

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

TEST_ENV_OVERRIDES = {
    "FLASK_DEBUG": "False",
    "FLASK_TESTING": "true",
    "AUTO_CREATE_DB": "false",
    "RECURRENCE_PROCESSING_ENABLED": "true",
}


@pytest.fixture(autouse=True)
def isolate_test_env() -> Generator[None, None, None]:
    tracked_keys = set(TEST_ENV_OVERRIDES.keys()) | {"DATABASE_URL", "LOG_LEVEL"}
    original_values = {key: os.environ.get(key) for key in tracked_keys}
    for key, value in TEST_ENV_OVERRIDES.items():
        os.environ[key] = value
    yield
    for key, value in original_values.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value


@pytest.fixture
def app(tmp_path: Path):
    test_db_path = tmp_path / "test.sqlite3"

    from recurring_ledger import create_app
    from recurring_ledger.extensions.database import db

    app = create_app(
        {
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{test_db_path}",
            "TESTING": True,
            "RECURRENCE_PROCESSING_ENABLED": True,
        }
    )

    with app.app_context():
        db.drop_all()
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()
    if test_db_path.exists():
        test_db_path.unlink()
