"""Pytest configuration and fixtures for the hotel backend tests.

This module provides reusable fixtures for testing:
- An in-memory SQLite database rebuilt for every test
- Seeded roles and staff/guest accounts with bearer tokens
- TestClients for the auth and hotel services
- Factories for room types, rooms, reservations and payments
"""

import os
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Callable, Dict, Generator

# === Environment Setup ===

# Set environment variables for testing before imports
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_ENABLED"] = "false"
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from auth_service.app.main import app as auth_app
from hotel_service.app.main import app as hotel_app
from hotel_service.app.models.financials.payments import Payment
from hotel_service.app.models.hospitality.guests import Guest
from hotel_service.app.models.hospitality.reservations import Reservation
from hotel_service.app.models.hospitality.room_types import RoomType
from hotel_service.app.models.hospitality.rooms import Room
from shared.core.auth import build_token_payload, create_access_token
from shared.core.database import Base, SessionLocal, engine
from shared.models.roles import Roles
from shared.models.staff import Staff
from shared.models.users import Users, bcrypt_context
from shared.utils.enums import DEFAULT_ROLE_PERMISSIONS, UserRole

PASSWORD = "secret123"
# hashing once keeps the per-test reset fast
PASSWORD_HASH = bcrypt_context.hash(PASSWORD)


# === Database Fixtures ===


@pytest.fixture(autouse=True)
def reset_database() -> Generator[None, None, None]:
    """Drop and recreate every table so each test starts from an empty schema."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Session for arranging data and asserting on stored rows."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def roles(db: Session) -> Dict[str, Roles]:
    """Seed the three built-in roles with their default permissions."""
    created = {}
    for name, permissions in DEFAULT_ROLE_PERMISSIONS.items():
        role = Roles(name=name, description=f"{name} role", permissions=permissions)
        db.add(role)
        created[name] = role
    db.commit()
    return created


def _create_user(db: Session, role: Roles, email: str, verified: bool = True) -> Users:
    user = Users(email=email, role_id=role.id, password_hash=PASSWORD_HASH,
                 is_active=True, is_verified=verified)
    db.add(user)
    db.flush()
    return user


@pytest.fixture
def admin_user(db: Session, roles: Dict[str, Roles]) -> Users:
    """Active admin with a Management staff profile."""
    user = _create_user(db, roles[UserRole.ADMIN.value], "admin@hotel.example.com")
    db.add(Staff(user_id=user.id, first_name="Ada", last_name="Admin",
                 email=user.email, position="Manager", department="Management"))
    db.commit()
    return user


@pytest.fixture
def receptionist_user(db: Session, roles: Dict[str, Roles]) -> Users:
    """Active receptionist working at the front office."""
    user = _create_user(db, roles[UserRole.RECEPTIONIST.value], "desk@hotel.example.com")
    db.add(Staff(user_id=user.id, first_name="Rita", last_name="Reception",
                 email=user.email, position="Receptionist", department="Front Office"))
    db.commit()
    return user


@pytest.fixture
def guest_user(db: Session, roles: Dict[str, Roles]) -> Users:
    """Verified guest account with an online guest profile."""
    user = _create_user(db, roles[UserRole.GUEST.value], "guest@example.com")
    db.add(Guest(user_id=user.id, first_name="Gina", last_name="Guest",
                 email=user.email, guest_type="online"))
    db.commit()
    return user


@pytest.fixture
def guest_profile(db: Session, guest_user: Users) -> Guest:
    return db.query(Guest).filter(Guest.user_id == guest_user.id).first()


@pytest.fixture
def walk_in_guest(db: Session) -> Guest:
    """Guest without a login, registered at the front desk."""
    guest = Guest(first_name="Walter", last_name="Walkin",
                  email="walter@example.com", guest_type="walk-in")
    db.add(guest)
    db.commit()
    return guest


# === Token Fixtures ===


def bearer(user: Users) -> Dict[str, str]:
    token = create_access_token(build_token_payload(user))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user: Users) -> Dict[str, str]:
    return bearer(admin_user)


@pytest.fixture
def receptionist_headers(receptionist_user: Users) -> Dict[str, str]:
    return bearer(receptionist_user)


@pytest.fixture
def guest_headers(guest_user: Users) -> Dict[str, str]:
    return bearer(guest_user)


# === Client Fixtures ===


@pytest.fixture
def auth_client() -> TestClient:
    return TestClient(auth_app)


@pytest.fixture
def hotel_client() -> TestClient:
    return TestClient(hotel_app)


# === Inventory Factories ===


@pytest.fixture
def room_type(db: Session) -> RoomType:
    """Standard room: 100.00 per night, sleeps two."""
    rt = RoomType(name="Standard", description="Queen bed", base_price=Decimal("100.00"),
                  max_occupancy=2, amenities=["wifi", "tv"], size_sqft=250)
    db.add(rt)
    db.commit()
    return rt


@pytest.fixture
def make_room(db: Session, room_type: RoomType) -> Callable[..., Room]:
    def _make(room_number: str = "101", floor: int = 1, price_adjustment: str = "0",
              status: str = "available", room_type_id: int = None) -> Room:
        room = Room(room_type_id=room_type_id or room_type.id, room_number=room_number,
                    floor=floor, status=status, price_adjustment=Decimal(price_adjustment),
                    special_features=[], is_active=True)
        db.add(room)
        db.commit()
        return room

    return _make


@pytest.fixture
def room(make_room: Callable[..., Room]) -> Room:
    """Room 101 priced at 120.00 per night."""
    return make_room("101", price_adjustment="20")


@pytest.fixture
def make_reservation(db: Session) -> Callable[..., Reservation]:
    """Insert a reservation directly, bypassing the booking rules."""
    def _make(guest: Guest, room: Room, check_in: date, nights: int = 2,
              status: str = "confirmed", guests: int = 1) -> Reservation:
        reservation = Reservation(
            guest_id=guest.id,
            room_id=room.id,
            check_in_date=check_in,
            check_out_date=check_in + timedelta(days=nights),
            number_of_guests=guests,
            total_amount=room.final_price * nights,
            status=status,
            payment_status="pending",
        )
        db.add(reservation)
        db.commit()
        return reservation

    return _make


@pytest.fixture
def make_payment(db: Session) -> Callable[..., Payment]:
    """Insert a payment directly in any status."""
    def _make(reservation: Reservation, amount: str = "100.00", status: str = "pending",
              method: str = "cash") -> Payment:
        payment = Payment(
            reservation_id=reservation.id,
            guest_id=reservation.guest_id,
            amount=Decimal(amount),
            payment_method=method,
            payment_status=status,
            refund_amount=Decimal("0"),
            payment_date=datetime.now(),
        )
        db.add(payment)
        db.commit()
        return payment

    return _make
