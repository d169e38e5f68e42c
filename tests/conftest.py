# tests/conftest.py
"""
Shared fixtures: an in-memory SQLite database per test, model factories and
an HTTP client bound to the test session.
"""
from __future__ import annotations

import os
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Optional

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from klass_hero.db.base import Base, import_models
from klass_hero.db.session import get_db
from klass_hero.models import (
    Child,
    Enrollment,
    ParentProfile,
    ParticipationRecord,
    Program,
    ProgramSession,
)
from klass_hero.models.base.enums import (
    EnrollmentStatus,
    ParticipationStatus,
    PaymentMethod,
    SessionStatus,
    SubscriptionTier,
)


@pytest.fixture
def engine():
    import_models()
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    from klass_hero.main import app

    def _get_test_db():
        yield db

    app.dependency_overrides[get_db] = _get_test_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_parent(db):
    counter = {"n": 0}

    def _make(
        tier: SubscriptionTier = SubscriptionTier.EXPLORER,
        identity_id: Optional[str] = None,
    ) -> ParentProfile:
        counter["n"] += 1
        parent = ParentProfile(
            identity_id=identity_id or f"identity-{counter['n']}",
            display_name=f"Parent {counter['n']}",
            subscription_tier=tier,
        )
        db.add(parent)
        db.commit()
        return parent

    return _make


@pytest.fixture
def make_child(db):
    def _make(
        parent: ParentProfile,
        first_name: str = "Mia",
        last_name: str = "Schmidt",
        allergies: Optional[str] = None,
        support_needs: Optional[str] = None,
        **kwargs,
    ) -> Child:
        child = Child(
            parent_id=parent.id,
            first_name=first_name,
            last_name=last_name,
            allergies=allergies,
            support_needs=support_needs,
            **kwargs,
        )
        db.add(child)
        db.commit()
        return child

    return _make


@pytest.fixture
def make_program(db):
    def _make(title: str = "Junior Football", **kwargs) -> Program:
        program = Program(title=title, **kwargs)
        db.add(program)
        db.commit()
        return program

    return _make


@pytest.fixture
def make_enrollment(db):
    def _make(
        program: Program,
        child: Child,
        status: EnrollmentStatus = EnrollmentStatus.PENDING,
        enrolled_at: Optional[datetime] = None,
    ) -> Enrollment:
        enrollment = Enrollment(
            program_id=program.id,
            child_id=child.id,
            parent_id=child.parent_id,
            status=status,
            enrolled_at=enrolled_at or datetime.now(timezone.utc),
            payment_method=PaymentMethod.CARD,
            subtotal=Decimal("70.00"),
            vat_amount=Decimal("13.30"),
            card_fee_amount=Decimal("2.50"),
            total_amount=Decimal("85.80"),
        )
        db.add(enrollment)
        db.commit()
        return enrollment

    return _make


@pytest.fixture
def make_session(db):
    def _make(
        program: Program,
        status: SessionStatus = SessionStatus.SCHEDULED,
        max_capacity: Optional[int] = None,
    ) -> ProgramSession:
        session = ProgramSession(
            program_id=program.id,
            session_date=date(2026, 3, 14),
            start_time=time(15, 0),
            end_time=time(16, 30),
            status=status,
            max_capacity=max_capacity,
        )
        db.add(session)
        db.commit()
        return session

    return _make


@pytest.fixture
def make_record(db):
    def _make(
        session: ProgramSession,
        child: Child,
        status: ParticipationStatus = ParticipationStatus.SCHEDULED,
    ) -> ParticipationRecord:
        record = ParticipationRecord(
            session_id=session.id,
            child_id=child.id,
            parent_id=child.parent_id,
            status=status,
        )
        db.add(record)
        db.commit()
        return record

    return _make
