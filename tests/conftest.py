"""
Shared fakes for the sender.net tests.

FakeProvider stands in for SenderNetApi and remembers subscribers it has
created, so a second subscribe() for the same email sees the first one.
"""

import os
import shutil
import tempfile

import pytest

from sendernet.core.exceptions import ProviderError
from sendernet.core.notifications import MessageList
from sendernet.modules.settings.store import SettingsStore


class FakeProvider:

    def __init__(self, valid_keys=('valid-token',), groups=None):
        self.valid_keys = set(valid_keys)
        self.groups = list(groups or [])
        self.subscribers = {}
        self.created = []
        self.calls = []
        self.base_urls = []
        self.check_error = None
        self.list_error = None
        self.lookup_error = None
        self.create_error = None
        self.reject_create = False

    def __call__(self, base_url):
        # Used directly as the api_factory
        self.base_urls.append(base_url)
        return self

    def check_api_key(self, key):
        self.calls.append(('check_api_key', key))
        if self.check_error:
            raise self.check_error
        return bool(key) and key in self.valid_keys

    def list_all_groups(self, key):
        self.calls.append(('list_all_groups', key))
        if self.list_error:
            raise self.list_error
        return [dict(g) for g in self.groups]

    def get_subscriber_by_email(self, key, email):
        self.calls.append(('get_subscriber_by_email', key, email))
        if self.lookup_error:
            raise self.lookup_error
        return self.subscribers.get(email)

    def create_subscriber(self, key, subscription):
        self.calls.append(('create_subscriber', key, subscription.email))
        if self.create_error:
            raise self.create_error
        if self.reject_create:
            return False
        payload = subscription.to_payload()
        self.created.append(payload)
        self.subscribers[subscription.email] = f"sub_{len(self.created)}"
        return True

    def remote_calls(self):
        return [c[0] for c in self.calls]


class RecordingLog:
    """LoggingService stand-in that keeps entries in memory"""

    def __init__(self):
        self.entries = []

    def log(self, level, source, message, details=None):
        self.entries.append({'level': level.upper(), 'source': source,
                             'message': message, 'details': details})

    def info(self, source, message, details=None):
        self.log('INFO', source, message, details)

    def warning(self, source, message, details=None):
        self.log('WARNING', source, message, details)

    def error(self, source, message, details=None):
        self.log('ERROR', source, message, details)

    def at(self, level):
        return [e for e in self.entries if e['level'] == level]


class FakeDirectory:

    def __init__(self, users=None):
        self.users = users or {}

    def find_by_email(self, email):
        name = self.users.get(email)
        return {'display_name': name} if name is not None else None


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="sendernet-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def provider():
    return FakeProvider(groups=[
        {'id': '12', 'title': 'Newsletter'},
        {'id': '7', 'title': 'Promotions'},
    ])


@pytest.fixture
def log():
    return RecordingLog()


@pytest.fixture
def messages():
    return MessageList()


@pytest.fixture
def store(tmp_db_dir, provider):
    s = SettingsStore(os.path.join(tmp_db_dir, 'sender_net.db'), provider, secret_key='test-secret')
    s.init_db()
    return s
