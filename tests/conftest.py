"""
Shared pytest fixtures for the contact pipeline tests.
"""
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from config import Settings
from database import MongoStore
from main import create_app
from notifications import SmtpNotifier


class InsertResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class FakeCollection:
    def __init__(self, fail=False):
        self.documents = []
        self.fail = fail

    def insert_one(self, document):
        if self.fail:
            raise ServerSelectionTimeoutError("localhost:27017: connection refused")
        document = dict(document)
        document["_id"] = ObjectId()
        self.documents.append(document)
        return InsertResult(document["_id"])


class FakeDatabase:
    """Stands in for a pymongo Database: item access returns collections."""

    name = "portfolio_test"

    def __init__(self, fail=False):
        self.fail = fail
        self.collections = {}

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(fail=self.fail)
        return self.collections[name]

    def list_collection_names(self):
        return list(self.collections)

    def count(self, name="contactmessage"):
        return len(self[name].documents)


class FakeSMTP:
    """Records what an SMTP session would have done."""

    sessions = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.tls = False
        self.logged_in_as = None
        self.sent = []
        FakeSMTP.sessions.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def ehlo(self):
        pass

    def has_extn(self, name):
        return name == "starttls"

    def starttls(self):
        self.tls = True

    def login(self, user, password):
        self.logged_in_as = user

    def sendmail(self, from_addr, to_addrs, msg):
        self.sent.append((from_addr, to_addrs, msg))


class UnreachableSMTP:
    def __init__(self, host, port, timeout=None):
        raise TimeoutError("timed out waiting for SMTP greeting")


@pytest.fixture(autouse=True)
def reset_smtp_sessions():
    FakeSMTP.sessions = []
    yield
    FakeSMTP.sessions = []


@pytest.fixture
def settings():
    return Settings(
        app_env="test",
        allowed_origin="https://portfolio.example.com",
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_user="mailer@example.com",
        smtp_pass="secret",
        smtp_timeout=5,
        from_email="mailer@example.com",
        to_email="owner@example.com",
        api_url="http://testserver",
    )


@pytest.fixture
def db():
    return FakeDatabase()


@pytest.fixture
def store(db):
    return MongoStore(db)


@pytest.fixture
def notifier(settings):
    return SmtpNotifier(settings, smtp_factory=FakeSMTP)


@pytest.fixture
def app(settings, store, notifier):
    return create_app(settings, store=store, notifier=notifier)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def valid_payload():
    return {
        "name": "Jo",
        "email": "a@b.co",
        "message": "0123456789",
    }
