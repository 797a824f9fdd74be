# =============================================================================
# Pytest Configuration and Fixtures
# =============================================================================
# Shared fixtures for the mailaction test suite. The messaging backend is
# replaced by an in-memory fake injected through FastAPI dependency overrides.
# =============================================================================

import pytest
from fastapi.testclient import TestClient

from mailaction.app.main import app
from mailaction.services.api_client import get_api_client

USER_ID = "59fc66a03e54454869460e45"
INBOX_ID = "5a1c0ee490a34c67e266931c"
ARCHIVE_ID = "5a1c0ee490a34c67e266931d"
TRASH_ID = "5a1c0ee490a34c67e266932a"


class FakeApiClient:
    """Records every backend call and answers with canned responses."""

    def __init__(self):
        self.calls = []
        self.mailboxes = [
            {"id": INBOX_ID, "path": "INBOX", "specialUse": None},
            {"id": ARCHIVE_ID, "path": "Archive", "specialUse": "\\Archive"},
            {"id": TRASH_ID, "path": "Trash", "specialUse": "\\Trash"},
        ]
        self.update_response = {"success": True, "updated": 1}
        self.list_response = {"success": True, "results": []}
        self.update_error = None
        self.list_error = None
        self.mailboxes_error = None
        self.delete_errors = {}

    def update_messages(self, user_id, mailbox_id, message, patch):
        self.calls.append(("update_messages", user_id, mailbox_id, message, patch))
        if self.update_error:
            raise self.update_error
        return dict(self.update_response)

    def delete_message(self, user_id, mailbox_id, message_id):
        self.calls.append(("delete_message", user_id, mailbox_id, message_id))
        if message_id in self.delete_errors:
            raise self.delete_errors[message_id]
        return {"success": True}

    def list_messages(self, user_id, mailbox_id, params):
        self.calls.append(("list_messages", user_id, mailbox_id, params))
        if self.list_error:
            raise self.list_error
        return self.list_response

    def list_mailboxes(self, user_id, special_use=False):
        self.calls.append(("list_mailboxes", user_id, special_use))
        if self.mailboxes_error:
            raise self.mailboxes_error
        return self.mailboxes

    def calls_to(self, name):
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def fake_api():
    """A fresh fake backend client."""
    return FakeApiClient()


@pytest.fixture
def client(fake_api):
    """TestClient with the backend dependency overridden by ``fake_api``."""
    app.dependency_overrides[get_api_client] = lambda: fake_api
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
