import os

# Settings are read at import time; configure before importing the app.
os.environ["SUPABASE_URL"] = "https://test-project.supabase.co"
os.environ["SUPABASE_KEY"] = "test-anon-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["DATABASE_URL"] = "sqlite://"

import time
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session
from supabase import AuthError

from app.core.profile_cache import ProfileCache
from app.database import build_engine, create_db_and_tables, get_session
from app.main import app
from app.models.category import Category
from app.models.enums import Role
from app.models.product import Product
from app.models.profile import UserProfile
from app.repositories.profile_repo import ProfileRepository
from app.routers.auth import get_auth_client
from app.services.profile_service import ProfileService, get_profile_service

JWT_SECRET = "test-jwt-secret"
OLD_TIMESTAMP = datetime(2024, 1, 1, tzinfo=timezone.utc)


# ----- Fakes -----


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAuthError(AuthError):
    def __init__(self, message: str):
        Exception.__init__(self, message)
        self.message = message


class FakeSubscription:
    def __init__(self, callback):
        self.callback = callback
        self.active = True

    def unsubscribe(self):
        self.active = False


class FakeAuth:
    """
    In-memory stand-in for supabase-py's sync Auth client.

    Notifies subscribers synchronously, like the real client does after
    sign-in / sign-up / sign-out.
    """

    def __init__(self):
        self.accounts: dict[str, tuple[str, SimpleNamespace]] = {}
        self.current = None
        self.subscriptions: list[FakeSubscription] = []
        self.confirm_email = False
        self.on_user_created = None  # simulates the provisioning trigger

    def _make_session(self, user):
        return SimpleNamespace(
            user=user,
            access_token=f"access-{user.id}",
            refresh_token=f"refresh-{user.id}",
        )

    def _notify(self, event, session):
        for sub in list(self.subscriptions):
            if sub.active:
                sub.callback(event, session)

    def add_account(self, email, password, user_id=None, full_name=None):
        user = SimpleNamespace(
            id=str(user_id or uuid.uuid4()),
            email=email,
            user_metadata={"full_name": full_name or email},
        )
        self.accounts[email] = (password, user)
        return user

    # --- supabase-py surface ---

    def on_auth_state_change(self, callback):
        sub = FakeSubscription(callback)
        self.subscriptions.append(sub)
        return sub

    def get_session(self):
        return self.current

    def get_user(self, jwt=None):
        if self.current is None:
            return None
        return SimpleNamespace(user=self.current.user)

    def sign_in_with_password(self, credentials):
        account = self.accounts.get(credentials["email"])
        if account is None or account[0] != credentials["password"]:
            raise FakeAuthError("Invalid login credentials")
        self.current = self._make_session(account[1])
        self._notify("SIGNED_IN", self.current)
        return SimpleNamespace(user=account[1], session=self.current)

    def sign_up(self, credentials):
        email = credentials["email"]
        if email in self.accounts:
            raise FakeAuthError("User already registered")
        full_name = credentials.get("options", {}).get("data", {}).get("full_name")
        user = self.add_account(email, credentials["password"], full_name=full_name)
        if self.on_user_created is not None:
            self.on_user_created(user)
        if self.confirm_email:
            return SimpleNamespace(user=user, session=None)
        self.current = self._make_session(user)
        self._notify("SIGNED_IN", self.current)
        return SimpleNamespace(user=user, session=self.current)

    def set_session(self, access_token, refresh_token):
        for _, user in self.accounts.values():
            if refresh_token == f"refresh-{user.id}":
                self.current = self._make_session(user)
                self._notify("TOKEN_REFRESHED", self.current)
                return SimpleNamespace(user=user, session=self.current)
        raise FakeAuthError("Invalid Refresh Token")

    def sign_out(self):
        self.current = None
        self._notify("SIGNED_OUT", None)


# ----- Fixtures -----


@pytest.fixture
def engine():
    test_engine = build_engine("sqlite://")
    create_db_and_tables(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as db:
        yield db


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def profile_service(clock, sleeps):
    return ProfileService(
        ProfileRepository(),
        ProfileCache(ttl_seconds=300, clock=clock),
        max_attempts=3,
        initial_delay=1.0,
        sleep=sleeps.append,
    )


@pytest.fixture
def fake_auth():
    return FakeAuth()


@pytest.fixture
def client(engine, profile_service, fake_auth):
    def override_session():
        with Session(engine) as db:
            yield db

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_profile_service] = lambda: profile_service
    app.dependency_overrides[get_auth_client] = lambda: fake_auth
    yield TestClient(app)
    app.dependency_overrides.clear()


# ----- Data helpers -----


def make_token(user_id, email, metadata=None, expires_in=3600):
    claims = {
        "sub": str(user_id),
        "email": email,
        "user_metadata": metadata or {},
        "aud": "authenticated",
        "exp": int(time.time()) + expires_in,
    }
    return jwt.encode(claims, JWT_SECRET, algorithm="HS256")


def auth_headers(profile) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(profile.id, profile.email)}"}


@pytest.fixture
def create_profile(session):
    def _create(role: Role = Role.CUSTOMER, email: str | None = None) -> UserProfile:
        profile_id = uuid.uuid4()
        profile = UserProfile(
            id=profile_id,
            email=email or f"{role.value}-{profile_id.hex[:8]}@example.com",
            role=role,
            full_name=role.value.title(),
        )
        session.add(profile)
        session.commit()
        session.refresh(profile)
        return profile

    return _create


@pytest.fixture
def admin(create_profile):
    return create_profile(Role.ADMIN, email="admin@nsine.example")


@pytest.fixture
def customer(create_profile):
    return create_profile(Role.CUSTOMER, email="buyer@hospital.example")


@pytest.fixture
def catalog(session):
    """One category with an active and an inactive product."""
    category = Category(name="Diagnostic Equipment", description="Imaging and diagnosis")
    session.add(category)
    session.commit()
    session.refresh(category)

    active = Product(
        name="Digital X-Ray System DX-5000",
        description="Digital radiography system with DICOM support.",
        price=45000.0,
        stock=5,
        category_id=category.id,
        images=["https://img.example/xray.jpg"],
        specifications={"resolution": "4096x4096 pixels", "warranty": "3 years"},
        is_featured=True,
        created_at=OLD_TIMESTAMP,
        updated_at=OLD_TIMESTAMP,
    )
    inactive = Product(
        name="Legacy Ultrasound US-1000",
        description="Discontinued portable ultrasound scanner.",
        price=9000.0,
        stock=0,
        category_id=category.id,
        is_active=False,
        created_at=OLD_TIMESTAMP,
        updated_at=OLD_TIMESTAMP,
    )
    session.add(active)
    session.add(inactive)
    session.commit()
    session.refresh(active)
    session.refresh(inactive)
    return SimpleNamespace(category=category, active=active, inactive=inactive)
