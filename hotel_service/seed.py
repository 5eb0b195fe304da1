import logging
import random
from datetime import date, timedelta
from faker import Faker
from sqlalchemy.orm import Session

from shared.core.database import Base, SessionLocal, engine
from shared.models import audit_logs
from shared.models.roles import Roles
from shared.models.staff import Staff
from shared.models.users import Users
from shared.utils.enums import DEFAULT_ROLE_PERMISSIONS, UserRole
from .app.enum.hospitality_enum import GuestType
from .app.models.financials import payments
from .app.models.hospitality import reservations, saved_rooms
from .app.models.hospitality.guests import Guest
from .app.models.hospitality.room_types import RoomType
from .app.models.hospitality.rooms import Room

logger = logging.getLogger(__name__)

# Create tables
Base.metadata.create_all(bind=engine)

fake = Faker()

ROLE_DESCRIPTIONS = {
    UserRole.ADMIN.value: "Full access to every hotel operation",
    UserRole.RECEPTIONIST.value: "Front desk: guests, reservations, payments and reports",
    UserRole.GUEST.value: "Books and manages own reservations",
}

ROOM_TYPES = [
    {"name": "Standard", "base_price": 100, "max_occupancy": 2, "size_sqft": 300,
     "amenities": ["wifi", "tv", "air_conditioning"]},
    {"name": "Deluxe", "base_price": 150, "max_occupancy": 3, "size_sqft": 400,
     "amenities": ["wifi", "tv", "air_conditioning", "minibar"]},
    {"name": "Suite", "base_price": 250, "max_occupancy": 4, "size_sqft": 600,
     "amenities": ["wifi", "tv", "air_conditioning", "minibar", "jacuzzi", "living_room"]},
    {"name": "Family", "base_price": 180, "max_occupancy": 5, "size_sqft": 500,
     "amenities": ["wifi", "tv", "air_conditioning", "kitchenette"]},
]

STAFF_ACCOUNTS = [
    {"email": "admin@hotel.example.com", "password": "admin123", "role": UserRole.ADMIN.value,
     "first_name": "Hotel", "last_name": "Admin", "position": "General Manager",
     "department": "Management"},
    {"email": "reception@hotel.example.com", "password": "reception123",
     "role": UserRole.RECEPTIONIST.value, "first_name": "Front", "last_name": "Desk",
     "position": "Receptionist", "department": "Front Office"},
]


def seed_roles(db: Session) -> dict:
    roles = {}
    for name, permissions in DEFAULT_ROLE_PERMISSIONS.items():
        role = db.query(Roles).filter(Roles.name == name).first()
        if not role:
            role = Roles(name=name, description=ROLE_DESCRIPTIONS[name], permissions=permissions)
            db.add(role)
            db.flush()
        roles[name] = role
    return roles


def seed_staff(db: Session, roles: dict):
    for account in STAFF_ACCOUNTS:
        if db.query(Users).filter(Users.email == account["email"]).first():
            continue
        user = Users(email=account["email"], role_id=roles[account["role"]].id,
                     is_active=True, is_verified=True)
        user.set_password(account["password"])
        db.add(user)
        db.flush()
        db.add(Staff(
            user_id=user.id,
            email=user.email,
            first_name=account["first_name"],
            last_name=account["last_name"],
            phone=fake.phone_number()[:20],
            position=account["position"],
            department=account["department"],
            hire_date=date.today() - timedelta(days=random.randint(30, 2000)),
        ))


def seed_rooms(db: Session):
    if db.query(RoomType).first():
        return
    for floor, attrs in enumerate(ROOM_TYPES, start=1):
        room_type = RoomType(description=fake.sentence(nb_words=10), **attrs)
        db.add(room_type)
        db.flush()
        for index in range(1, 6):  # 5 rooms per type, one floor per type
            db.add(Room(
                room_type_id=room_type.id,
                room_number=f"{floor}{index:02d}",
                floor=floor,
                status="available",
                price_adjustment=random.choice([0, 0, 10, -5, 15]),
                special_features=random.sample(["sea_view", "balcony", "corner", "quiet"], k=1),
            ))


def seed_guests(db: Session, count: int = 20):
    for _ in range(count):
        email = fake.unique.email()
        db.add(Guest(
            first_name=fake.first_name(),
            last_name=fake.last_name(),
            email=email,
            phone=fake.phone_number()[:20],
            address=fake.address(),
            id_type=random.choice(["passport", "national_id", "driver_license"]),
            id_number=fake.bothify(text="??######").upper(),
            date_of_birth=fake.date_of_birth(minimum_age=18, maximum_age=80),
            nationality=fake.country()[:100],
            guest_type=GuestType.walk_in.value,
        ))


def seed_data():
    db: Session = SessionLocal()
    try:
        roles = seed_roles(db)
        seed_staff(db, roles)
        seed_rooms(db)
        if not db.query(Guest).first():
            seed_guests(db)
        db.commit()
        logger.info("Seed data inserted successfully")
    except Exception:
        db.rollback()
        logger.exception("Seeding failed")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed_data()
