import os

os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("AIRTABLE_API_KEY", "test-airtable-key")
os.environ.setdefault("AIRTABLE_BASE_ID", "appTestBase")
os.environ.setdefault("AIRTABLE_TABLE_ID", "tblTestTable")

from types import SimpleNamespace  # noqa: E402

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402

from bascula.main import app  # noqa: E402
from bascula.services.feedback import feedback_service  # noqa: E402


def chat_response(text):
    """Minimal stand-in for an OpenAI chat completion response."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))]
    )


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_feedback():
    feedback_service.clear()
    yield
    feedback_service.clear()
