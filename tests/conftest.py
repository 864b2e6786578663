import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import uuid
from datetime import date
from typing import AsyncGenerator, Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from sfms.core.config import settings
from sfms.core.models import School, SchoolAdministrator
from sfms.db.session import Base, get_db
from sfms.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_token(user_id: str, **claims) -> str:
    """Token as the identity provider would issue it."""
    return jwt.encode({"sub": user_id, **claims}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def bearer(user_id: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite database per test; StaticPool keeps the single connection alive."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture()
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a test and override FastAPI dependency."""
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def _link_admin(db: AsyncSession, school_name: str, role: str) -> Dict[str, str]:
    school = School(name=school_name)
    db.add(school)
    await db.flush()
    user_id = f"user-{uuid.uuid4()}"
    db.add(SchoolAdministrator(user_id=user_id, school_id=school.id, role=role))
    await db.commit()
    return {"school_id": str(school.id), "user_id": user_id}


@pytest.fixture()
async def admin(db_session: AsyncSession) -> Dict[str, str]:
    return await _link_admin(db_session, "Green Valley School", "ADMIN")


@pytest.fixture()
def auth_headers(admin: Dict[str, str]) -> Dict[str, str]:
    return bearer(admin["user_id"])


@pytest.fixture()
async def other_school_headers(db_session: AsyncSession) -> Dict[str, str]:
    other = await _link_admin(db_session, "Hill Top School", "OWNER")
    return bearer(other["user_id"])


@pytest.fixture()
async def accountant_headers(db_session: AsyncSession, admin: Dict[str, str]) -> Dict[str, str]:
    user_id = f"accountant-{uuid.uuid4()}"
    db_session.add(SchoolAdministrator(user_id=user_id, school_id=uuid.UUID(admin["school_id"]), role="ACCOUNTANT"))
    await db_session.commit()
    return bearer(user_id)


class Api:
    """Small wrapper for setting up school data through the HTTP API."""

    def __init__(self, client: AsyncClient, headers: Dict[str, str]) -> None:
        self.client = client
        self.headers = headers

    async def create_class(self, name: str) -> dict:
        resp = await self.client.post("/api/v1/classes", json={"name": name}, headers=self.headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    async def create_fee_type(
        self,
        name: str,
        default_amount: str,
        class_ids: List[str],
        scheduled_date: Optional[date] = None,
    ) -> dict:
        payload = {
            "name": name,
            "default_amount": default_amount,
            "class_ids": class_ids,
            "scheduled_date": scheduled_date.isoformat() if scheduled_date else None,
        }
        resp = await self.client.post("/api/v1/fee-types", json=payload, headers=self.headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    async def register_student(self, name: str, roll_no: str, class_id: str, fee_types: List[dict]) -> dict:
        payload = {
            "name": name,
            "roll_no": roll_no,
            "class_id": class_id,
            "academic_year": "2024",
            "fee_types": fee_types,
        }
        resp = await self.client.post("/api/v1/students", json=payload, headers=self.headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    async def pay(self, student_id: str, amount: str, **extra) -> dict:
        payload = {"student_id": student_id, "amount_paid": amount, **extra}
        resp = await self.client.post("/api/v1/payments", json=payload, headers=self.headers)
        assert resp.status_code == 201, resp.text
        return resp.json()


@pytest.fixture()
def api(client: AsyncClient, auth_headers: Dict[str, str]) -> Api:
    return Api(client, auth_headers)
