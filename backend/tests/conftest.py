"""
Shared fixtures for the HomeFix test suite.

Each test gets its own in-memory SQLite database. Redis is disabled, so the
booking and rating locks fail open and realtime events go to a recording
publisher.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
import os
from typing import Any, Dict, List, Optional

os.environ["ENVIRONMENT"] = "test"
os.environ["REDIS_URL"] = ""

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from homefix.api.dependencies.database import get_db
from homefix.api.dependencies.services import get_event_publisher, get_side_effects
from homefix.core.actor import Actor
from homefix.core.enums import RoleName
from homefix.database import Base
from homefix.main import app
import homefix.models  # noqa: F401
from homefix.models.booking import Booking, BookingStatus
from homefix.models.catalog import Category, Service
from homefix.models.review import Review
from homefix.models.user import User
from homefix.services.booking_service import BookingService
from homefix.services.rating_aggregator import RatingAggregator
from homefix.services.review_service import ReviewService
from homefix.services.side_effects import SideEffects


class RecordingPublisher:
    """Realtime publisher that keeps every event in memory."""

    def __init__(self) -> None:
        self.events: List[Dict[str, Any]] = []
        self.fail = False

    def publish(self, channel: str, event_name: str, payload: Dict[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("redis down")
        self.events.append({"channel": channel, "event": event_name, "payload": payload})

    def on(self, channel: str, event_name: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            e
            for e in self.events
            if e["channel"] == channel and (event_name is None or e["event"] == event_name)
        ]


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: List[Dict[str, Any]] = []
        self.fail = False

    def send(self, *, recipient_id, type, title, message, data=None) -> None:
        if self.fail:
            raise RuntimeError("notification backend unavailable")
        self.sent.append(
            {"recipient_id": recipient_id, "type": type, "title": title, "message": message, "data": data}
        )

    def to(self, recipient_id: str) -> List[Dict[str, Any]]:
        return [n for n in self.sent if n["recipient_id"] == recipient_id]


class Factory:
    """Small model builders. Every builder commits."""

    def __init__(self, db: Session):
        self.db = db
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def user(self, role: RoleName = RoleName.CUSTOMER, name: Optional[str] = None, **kwargs) -> User:
        n = self._next()
        user = User(
            name=name or f"{role.value.title()} {n}",
            email=f"{role.value.lower()}{n}@example.com",
            role=role.value,
            **kwargs,
        )
        self.db.add(user)
        self.db.commit()
        return user

    def category(self, name: str = "Plumbing", price: Any = "500.00", **kwargs) -> Category:
        category = Category(name=name, price=Decimal(str(price)), **kwargs)
        self.db.add(category)
        self.db.commit()
        return category

    def service(self, category: Category, price: Any = "750.00", **kwargs) -> Service:
        service = Service(
            category_id=category.id,
            title=kwargs.pop("title", f"{category.name} visit"),
            price=Decimal(str(price)),
            **kwargs,
        )
        self.db.add(service)
        self.db.commit()
        return service

    def booking(
        self,
        customer: User,
        category: Category,
        *,
        status: BookingStatus = BookingStatus.PENDING,
        technician: Optional[User] = None,
        price: Any = "500.00",
        **kwargs,
    ) -> Booking:
        booking = Booking(
            customer_id=customer.id,
            category_id=kwargs.pop("category_id", category.id),
            technician_id=technician.id if technician else None,
            status=status.value,
            price=Decimal(str(price)),
            scheduled_at=kwargs.pop("scheduled_at", datetime.now(timezone.utc) + timedelta(days=1)),
            part_images=kwargs.pop("part_images", []),
            **kwargs,
        )
        self.db.add(booking)
        self.db.commit()
        return booking

    def review(
        self,
        booking: Booking,
        technician_rating: int,
        rating: int = 5,
        category: str = "Plumbing",
    ) -> Review:
        review = Review(
            booking_id=booking.id,
            customer_id=booking.customer_id,
            technician_id=booking.technician_id,
            service_id=booking.service_id,
            category=category,
            rating=rating,
            technician_rating=technician_rating,
            review="Solid work",
        )
        self.db.add(review)
        self.db.commit()
        return review


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def factory(db) -> Factory:
    return Factory(db)


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def side_effects(notifier, publisher) -> SideEffects:
    return SideEffects(notifier, publisher)


@pytest.fixture
def booking_service(db, side_effects) -> BookingService:
    return BookingService(db, side_effects)


@pytest.fixture
def aggregator(db, side_effects) -> RatingAggregator:
    return RatingAggregator(db, side_effects)


@pytest.fixture
def review_service(db, side_effects, aggregator) -> ReviewService:
    return ReviewService(db, side_effects, aggregator)


@pytest.fixture
def customer(factory) -> User:
    return factory.user(RoleName.CUSTOMER, name="Asha Customer")


@pytest.fixture
def technician(factory) -> User:
    return factory.user(RoleName.TECHNICIAN, name="Ravi Technician")


@pytest.fixture
def technician_2(factory) -> User:
    return factory.user(RoleName.TECHNICIAN, name="Meera Technician")


@pytest.fixture
def admin(factory) -> User:
    return factory.user(RoleName.ADMIN, name="Ops Admin")


@pytest.fixture
def category(factory) -> Category:
    return factory.category()


def actor_for(user: User) -> Actor:
    return Actor(user_id=user.id, role=RoleName(user.role))


@pytest.fixture
def as_actor():
    return actor_for


@pytest.fixture
def client(db, side_effects, publisher):
    """TestClient bound to the per-test database and recording fakes."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_side_effects] = lambda: side_effects
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    test_client = TestClient(app)
    try:
        yield test_client
    finally:
        app.dependency_overrides.clear()


def headers_for(user: User) -> Dict[str, str]:
    return {"X-User-Id": user.id, "X-User-Role": user.role}


@pytest.fixture
def auth_headers():
    return headers_for
