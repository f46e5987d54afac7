from __future__ import annotations

import json
import os
import warnings
from typing import Any, Callable
from urllib.parse import parse_qsl

os.environ.setdefault("ENV", "test")

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from jwt.algorithms import RSAAlgorithm
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from headless_oauth.core.cache import CachePool
from headless_oauth.core.config import TestSettings
from headless_oauth.db import session as db_session
from headless_oauth.db.base_class import Base
from headless_oauth.db.session import SessionLocal
from headless_oauth.models.customer import Customer

TEST_DATABASE_URL = "sqlite:///:memory:"

test_engine = create_engine(
    TEST_DATABASE_URL,
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Ensure application code uses the test engine
db_session.engine = test_engine  # type: ignore[assignment]
SessionLocal.configure(bind=test_engine)

# passlib still touches the deprecated crypt module on import
warnings.filterwarnings("ignore", category=DeprecationWarning, module="passlib.utils")


@pytest.fixture(autouse=True)
def _reset_database_state():
    """Each test sees a fresh schema."""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_settings() -> Callable[..., TestSettings]:
    def _make(**overrides: Any) -> TestSettings:
        return TestSettings(**overrides)

    return _make


@pytest.fixture
def make_customer(db):
    def _make(email: str = "jane@example.com", **fields: Any) -> Customer:
        customer = Customer(email=email, **fields)
        db.add(customer)
        db.commit()
        db.refresh(customer)
        return customer

    return _make


class MemoryCachePool(CachePool):
    """Dict-backed pool standing in for the host cache."""

    def __init__(self):
        self.data: dict[str, Any] = {}
        self.ttls: dict[str, int | None] = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ttl=None):
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    def has(self, key):
        return key in self.data

    def delete(self, key):
        self.data.pop(key, None)
        return True

    def clear(self):
        self.data.clear()
        return True


@pytest.fixture
def memory_cache() -> MemoryCachePool:
    return MemoryCachePool()


def _bare_url(request: httpx.Request) -> str:
    return str(request.url).split("?", 1)[0]


class Router:
    """Routes mocked HTTP calls by (method, url without query) and records them."""

    def __init__(self):
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.calls: list[httpx.Request] = []

    def add(self, method: str, url: str, json_body: Any = None, status: int = 200, handler=None):
        if handler is None:
            def handler(request, _body=json_body, _status=status):
                return httpx.Response(_status, json=_body)
        self.routes[(method.upper(), url)] = handler
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        key = (request.method, _bare_url(request))
        if key not in self.routes:
            return httpx.Response(404, json={"error": "not mocked", "url": str(request.url)})
        return self.routes[key](request)

    def calls_to(self, url: str) -> list[httpx.Request]:
        return [c for c in self.calls if _bare_url(c) == url]

    @staticmethod
    def form(request: httpx.Request) -> dict[str, str]:
        return dict(parse_qsl(request.content.decode()))


@pytest.fixture
def router() -> Router:
    return Router()


@pytest.fixture
def http_client(router) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(router))


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def jwks(rsa_key) -> dict[str, Any]:
    jwk = json.loads(RSAAlgorithm.to_jwk(rsa_key.public_key()))
    jwk.update({"kid": "test-kid", "alg": "RS256", "use": "sig"})
    return {"keys": [jwk]}


@pytest.fixture
def sign_id_token(rsa_key):
    def _sign(claims: dict[str, Any], kid: str = "test-kid") -> str:
        return jwt.encode(claims, rsa_key, algorithm="RS256", headers={"kid": kid})

    return _sign


@pytest.fixture
def apple_key_file(tmp_path):
    key = ec.generate_private_key(ec.SECP256R1())
    pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    path = tmp_path / "AuthKey_TEST.p8"
    path.write_bytes(pem)
    return path, key.public_key()
