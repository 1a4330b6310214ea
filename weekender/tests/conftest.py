import asyncio
import os
import sys
from pathlib import Path

import pytest
import sentry_sdk
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Disable outbound Sentry calls during tests
sentry_sdk.init = lambda *args, **kwargs: None  # type: ignore[assignment]
os.environ["SENTRY_DSN"] = ""
os.environ.pop("DATABASE_URL", None)
test_data_dir = ROOT / "artifacts" / "test-data"
test_data_dir.mkdir(parents=True, exist_ok=True)
os.environ["DATA_DIR"] = str(test_data_dir)

from weekender.app.extractor_client import get_extractor  # noqa: E402
from weekender.app.main import app  # noqa: E402
from weekender.app.settings import settings  # noqa: E402
from weekender.app.storage import DB  # noqa: E402


class FakeExtractor:
    """Stands in for the vision model; returns canned candidates or raises."""

    def __init__(self, candidates=None, error=None):
        self.candidates = list(candidates or [])
        self.error = error
        self.calls: list[tuple] = []

    async def extract_document(self, image, file_type="image"):
        self.calls.append(("document", image, file_type))
        if self.error is not None:
            raise self.error
        return list(self.candidates)

    async def extract_caption(self, post):
        self.calls.append(("caption", post))
        if self.error is not None:
            raise self.error
        return list(self.candidates)


def _purge() -> None:
    asyncio.run(DB.purge())


@pytest.fixture(scope="session")
def client() -> TestClient:
    return TestClient(app, base_url="http://api.testserver")


@pytest.fixture
def use_extractor():
    """Install a FakeExtractor as the app's extractor dependency."""

    def _install(candidates=None, error=None) -> FakeExtractor:
        fake = FakeExtractor(candidates, error)
        app.dependency_overrides[get_extractor] = lambda: fake
        return fake

    yield _install
    app.dependency_overrides.pop(get_extractor, None)


@pytest.fixture(autouse=True)
def clean_database() -> None:
    settings.SENTRY_DSN = None
    settings.OPENAI_API_KEY = None
    settings.PUBLIC_BASE_URL = None
    settings.GOOGLE_PLACES_API_KEY = None
    os.environ.pop("OPENAI_API_KEY", None)
    _purge()
    yield
    _purge()
