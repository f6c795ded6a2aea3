from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

import httpx
import pytest
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from taskhub.api.app import create_app
from taskhub.auth.passwords import hash_password
from taskhub.config import Settings
from taskhub.db.base import Base
from taskhub.db.models import Organization, Role, Task, User
from taskhub.db.seed_data import seed_system_roles
from taskhub.db.session import (
    enable_sqlite_foreign_keys,
    enable_sqlite_savepoints,
    get_db_session,
)
from taskhub.rbac.principal import Principal
from taskhub.rbac.roles import RoleName
from taskhub.services.auth import principal_for

PASSWORD = "Password123!"
# Hashed once; PBKDF2 is deliberately slow.
PASSWORD_HASH = hash_password(PASSWORD)
JWT_SECRET = "test-secret"


@dataclass
class World:
    """A seeded tenant tree.

    Root
    ├── Eng
    │   └── Platform
    └── Mkt
    """

    orgs: dict[str, Organization] = field(default_factory=dict)
    roles: dict[RoleName, Role] = field(default_factory=dict)
    users: dict[str, User] = field(default_factory=dict)

    def principal(self, name: str) -> Principal:
        return principal_for(self.users[name])

    def org_id(self, name: str) -> UUID:
        return self.orgs[name].id


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


def make_user(email: str, org: Organization, role: Role, first_name: str = "Test") -> User:
    user = User(
        email=email,
        password_hash=PASSWORD_HASH,
        first_name=first_name,
        last_name="User",
    )
    user.organization = org
    user.role = role
    return user


@pytest.fixture
async def world(db_session: AsyncSession) -> World:
    world = World()
    world.roles = await seed_system_roles(db_session)

    root = Organization(name="Root")
    eng = Organization(name="Eng", parent=root)
    platform = Organization(name="Platform", parent=eng)
    mkt = Organization(name="Mkt", parent=root)
    db_session.add_all([root, eng, platform, mkt])
    await db_session.flush()
    world.orgs = {"Root": root, "Eng": eng, "Platform": platform, "Mkt": mkt}

    users = {
        "owner": make_user("owner@example.com", root, world.roles[RoleName.OWNER], "Olivia"),
        "admin": make_user("admin@example.com", eng, world.roles[RoleName.ADMIN], "Adam"),
        "viewer": make_user("viewer@example.com", eng, world.roles[RoleName.VIEWER], "Vera"),
        "viewer2": make_user("viewer2@example.com", eng, world.roles[RoleName.VIEWER], "Walt"),
        "platform_viewer": make_user(
            "platform@example.com", platform, world.roles[RoleName.VIEWER], "Pia"
        ),
        "mkt_admin": make_user("mkt@example.com", mkt, world.roles[RoleName.ADMIN], "Mia"),
    }
    db_session.add_all(users.values())
    await db_session.commit()
    world.users = users
    return world


@pytest.fixture
def add_task(db_session: AsyncSession):
    """Insert a task directly, bypassing the service and its audit trail."""

    async def add(title: str, org: Organization, creator: User, **fields) -> Task:
        task = Task(
            title=title,
            category=fields.pop("category", "Work"),
            organization_id=org.id,
            created_by_id=creator.id,
            **fields,
        )
        db_session.add(task)
        await db_session.commit()
        return task

    return add


@pytest.fixture
async def test_app(session_maker, world) -> FastAPI:
    settings = Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret=JWT_SECRET,
        api_prefix="",
        seed_on_startup=False,
    )
    app = create_app(settings)

    async def override_db_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    return app


@pytest.fixture
async def client(test_app: FastAPI):
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers(test_app: FastAPI, world: World):
    """Build bearer headers for a named user in the seeded world."""

    def build(name: str) -> dict[str, str]:
        token = test_app.state.token_service.issue(world.principal(name))
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture
def password() -> str:
    """Plain-text password shared by every seeded user."""
    return PASSWORD
