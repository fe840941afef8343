"""Shared fixtures: a fresh in-memory database per test case and user factories."""

import unittest
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import enable_sqlite_foreign_keys
from app.core.security import TokenCodec, hash_password
from app.models import Base, Role, User

TEST_SECRET = "test-secret-key-for-unit-tests-only"
PASSWORD = "correct-horse-battery"


@lru_cache
def password_hash(password: str = PASSWORD) -> str:
    """bcrypt is slow at production cost; hash each test password once."""
    return hash_password(password)


def make_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    return engine


def add_user(db, email: str | None = "user@example.com", role: Role = Role.USER, **fields) -> User:
    user = User(
        email=email,
        username=fields.pop("username", None),
        name=fields.pop("name", "Test User"),
        role=role.value,
        password_hash=fields.pop("password_hash", password_hash()),
        is_active=fields.pop("is_active", True),
        **fields,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


class DatabaseTestCase(unittest.TestCase):
    """Each test gets its own empty schema."""

    def setUp(self) -> None:
        self.engine = make_engine()
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self.db = self.session_factory()
        self.codec = TokenCodec(TEST_SECRET)

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()
