import os
import uuid
from datetime import datetime, timedelta, timezone

os.environ.setdefault("SUPABASE_URL", "http://supabase.test")
os.environ.setdefault("SUPABASE_KEY", "anon-test-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session, SQLModel

from covershift.database import engine
from covershift.main import app
from covershift.models.profile import Profile


@pytest.fixture()
def session():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as s:
        yield s
    SQLModel.metadata.drop_all(engine)


@pytest.fixture()
def client(session):
    return TestClient(app)


def make_token(user_id, email=None, expires_in=3600):
    claims = {
        "sub": str(user_id),
        "email": email or f"{user_id}@example.com",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(claims, "test-secret", algorithm="HS256")


@pytest.fixture()
def auth():
    def _headers(profile):
        return {"Authorization": f"Bearer {make_token(profile.id, profile.email)}"}

    return _headers


@pytest.fixture()
def make_profile(session):
    def _make(role="teacher", full_name=None, email=None, **fields):
        pid = uuid.uuid4()
        p = Profile(
            id=pid,
            email=email or f"{role}-{pid.hex[:6]}@example.com",
            full_name=full_name,
            role=role,
            **fields,
        )
        session.add(p)
        session.commit()
        session.refresh(p)
        return p

    return _make


@pytest.fixture()
def principal(make_profile):
    return make_profile("principal", full_name="Pat Principal")


@pytest.fixture()
def teacher(make_profile):
    return make_profile("teacher", full_name="Tess Teacher")


@pytest.fixture()
def other_teacher(make_profile):
    return make_profile("teacher", full_name="Olly Other")


@pytest.fixture()
def token():
    def _token(profile, **kw):
        return make_token(profile.id, profile.email, **kw)

    return _token
