from __future__ import annotations

import sys
from pathlib import Path
from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


ROOT = Path(__file__).resolve().parents[2]

# Ensure `backend/seeddump` is importable as top-level `seeddump` for tests.
BACKEND_DIR = ROOT / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sample_models import Base, Comment, Photo, Post, Role, User  # noqa: E402
from seeddump.metadata.introspect import registry_from_declarative  # noqa: E402
from seeddump.metadata.registry import ModelRegistry  # noqa: E402


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Generator[Session, None, None]:
    SessionLocal = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def registry() -> ModelRegistry:
    return registry_from_declarative(Base)


def seed_sample_data(db: Session) -> None:
    """Two users, one role shared by both, a post with a comment, a photo with a comment.

    Categories stay empty.
    """
    ada = User(name="ada")
    bob = User(name="bob")
    admin = Role(name="admin")
    ada.roles.append(admin)
    bob.roles.append(admin)
    post = Post(title="hello", user=ada)
    photo = Photo(url="https://example.test/p.png")
    db.add_all([ada, bob, admin, post, photo])
    db.flush()
    db.add_all(
        [
            Comment(body="nice post", post=post, commentable_type="Post", commentable_id=post.id),
            Comment(body="nice photo", commentable_type="Photo", commentable_id=photo.id),
        ]
    )
    db.commit()


@pytest.fixture()
def seeded_session(db_session: Session) -> Session:
    seed_sample_data(db_session)
    return db_session
