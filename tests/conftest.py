"""Pytest fixtures for ERP engine tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import AsyncGenerator
from uuid import uuid4

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from erp_engine.database import create_schema
from erp_engine.ledger import JournalLineSpec, JournalPoster, JournalType, PostJournalCommand
from erp_engine.models import Account, Employee, FinancialPeriod

# Date the poster treats as "today" in ledger tests
POSTING_DAY = date(2025, 1, 20)


def enable_sqlite_savepoints(engine) -> None:
    """Let pysqlite/aiosqlite honour SAVEPOINT (SQLAlchemy's documented recipe)."""

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture
async def engine(tmp_path):
    """Create a fresh SQLite database per test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'erp_test.db'}",
        echo=False,
    )
    enable_sqlite_savepoints(engine)

    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


# =============================================================================
# Seed data
# =============================================================================


def build_accounts() -> dict[str, Account]:
    return {
        "411000": Account(code="411000", name="Clients", nature="ACTIF", account_class=4),
        "512000": Account(code="512000", name="Banque", nature="ACTIF", account_class=5),
        "601000": Account(code="601000", name="Achats de marchandises", nature="CHARGE", account_class=6),
        "701000": Account(code="701000", name="Ventes de marchandises", nature="PRODUIT", account_class=7),
        "999000": Account(
            code="999000", name="Compte ferme", nature="CHARGE", account_class=9, is_active=False
        ),
    }


def build_periods() -> dict[str, FinancialPeriod]:
    return {
        "2024-12": FinancialPeriod(
            period_id=uuid4(),
            start_date=date(2024, 12, 1),
            end_date=date(2024, 12, 31),
            status="Closed",
        ),
        "2025-01": FinancialPeriod(
            period_id=uuid4(),
            start_date=date(2025, 1, 1),
            end_date=date(2025, 1, 31),
            status="Open",
        ),
    }


def build_employees() -> dict[str, Employee]:
    return {
        "EMP001": Employee(
            employee_id=uuid4(),
            employee_number="EMP001",
            first_name="Awa",
            last_name="Diop",
            base_salary=Decimal("500000"),
            hire_date=date(2022, 3, 1),
        ),
        "EMP002": Employee(
            employee_id=uuid4(),
            employee_number="EMP002",
            first_name="Moussa",
            last_name="Ndiaye",
            base_salary=Decimal("350000"),
            hire_date=date(2019, 9, 15),
            is_active=False,
        ),
    }


@pytest.fixture
async def accounts(session: AsyncSession) -> dict[str, Account]:
    """Chart of accounts with one inactive account (999000)."""
    accounts = build_accounts()
    session.add_all(accounts.values())
    await session.flush()
    return accounts


@pytest.fixture
async def periods(session: AsyncSession) -> dict[str, FinancialPeriod]:
    """December 2024 (closed) and January 2025 (open)."""
    periods = build_periods()
    session.add_all(periods.values())
    await session.flush()
    return periods


@pytest.fixture
async def employees(session: AsyncSession) -> dict[str, Employee]:
    """One active and one inactive employee."""
    employees = build_employees()
    session.add_all(employees.values())
    await session.flush()
    return employees


@pytest.fixture
def poster(session: AsyncSession, accounts, periods) -> JournalPoster:
    return JournalPoster(session, max_attempts=3, clock=lambda: POSTING_DAY)


def sale_command(
    amount: str = "100000",
    entry_date: date = date(2025, 1, 15),
    journal_type: JournalType = JournalType.SALES,
    **kwargs,
) -> PostJournalCommand:
    """Cash sale: debit bank, credit sales."""
    return PostJournalCommand(
        entry_date=entry_date,
        reference="FAC-0001",
        memo="Vente comptant",
        journal_type=journal_type,
        lines=(
            JournalLineSpec(account_code="512000", debit=Decimal(amount)),
            JournalLineSpec(account_code="701000", credit=Decimal(amount)),
        ),
        **kwargs,
    )
