"""Integration test fixtures: the FastAPI app over a seeded SQLite database."""

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from uuid import UUID

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from erp_engine.api.app import create_app
from erp_engine.api.dependencies import get_db_session
from erp_engine.events import DomainEvent, EventEmitter
from erp_engine.payroll import PayrollCalculator, load_schedule
from tests.conftest import build_accounts, build_employees, build_periods


@dataclass
class SeedData:
    """Identifiers of the committed seed rows."""

    open_period_id: UUID
    closed_period_id: UUID
    active_employee_id: UUID
    inactive_employee_id: UUID


@dataclass
class RecordingHandler:
    """Collects every event the app emits."""

    events: list[DomainEvent] = field(default_factory=list)

    def __call__(self, event: DomainEvent) -> None:
        self.events.append(event)


@pytest_asyncio.fixture
async def seeded_db(session_factory: async_sessionmaker[AsyncSession]) -> SeedData:
    """Commit accounts, periods and employees for requests to read."""
    accounts = build_accounts()
    periods = build_periods()
    employees = build_employees()

    async with session_factory() as session:
        session.add_all(accounts.values())
        session.add_all(periods.values())
        session.add_all(employees.values())
        await session.commit()

    return SeedData(
        open_period_id=periods["2025-01"].period_id,
        closed_period_id=periods["2024-12"].period_id,
        active_employee_id=employees["EMP001"].employee_id,
        inactive_employee_id=employees["EMP002"].employee_id,
    )


@pytest_asyncio.fixture
async def recorded_events() -> RecordingHandler:
    return RecordingHandler()


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    recorded_events: RecordingHandler,
) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    emitter = EventEmitter()
    emitter.on_all(recorded_events)
    app = create_app(calculator=PayrollCalculator(load_schedule()), emitter=emitter)

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
