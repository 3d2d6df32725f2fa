from uuid import uuid4

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from tests.fixtures.json_loader import TestDataLoader
from src.depends import get_unit_of_work
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.utils.jwt import generate_jwt
from src.domain.entities import (
    Membership,
    MembershipRole,
    MembershipStatus,
    Organization,
    Unit,
)


@pytest_asyncio.fixture
def test_data():
    return TestDataLoader()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session):
    from httpx import ASGITransport
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _seed_community(db_session, test_data, slug: str) -> dict:
    org_data = test_data.get("organization")
    organization = Organization(name=org_data["name"], slug=slug)
    db_session.add(organization)
    await db_session.flush()

    units = {}
    for unit_data in test_data.get("units"):
        unit = Unit(
            organization_id=organization.id,
            unit_number=unit_data["unit_number"],
            building=unit_data["building"],
        )
        db_session.add(unit)
        units[unit_data["key"]] = unit
    await db_session.flush()

    members = {}
    headers = {}
    for member_data in test_data.get("members"):
        unit = units.get(member_data["unit"]) if member_data["unit"] else None
        membership = Membership(
            user_id=uuid4(),
            organization_id=organization.id,
            unit_id=unit.id if unit else None,
            role=MembershipRole(member_data["role"]),
            status=MembershipStatus.active,
        )
        db_session.add(membership)
        members[member_data["key"]] = membership
        token = generate_jwt(membership.user_id, organization.id, member_data["role"])
        headers[member_data["key"]] = {"Authorization": f"Bearer {token}"}

    await db_session.commit()

    return {
        "organization": organization,
        "units": units,
        "members": members,
        "headers": headers,
    }


@pytest_asyncio.fixture
async def community(db_session, test_data):
    """Organization with units A-101, B-101, C-202 and one member per role"""
    return await _seed_community(db_session, test_data, "las-palmas")


@pytest_asyncio.fixture
async def other_community(db_session, test_data):
    return await _seed_community(db_session, test_data, "other-community")
