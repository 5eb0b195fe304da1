from sqlalchemy import TIMESTAMP, CheckConstraint, Column, Date, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship
from shared.core.database import Base


class Guest(Base):
    __tablename__ = "guests"
    __table_args__ = (
        CheckConstraint("guest_type IN ('online', 'walk-in')", name="ck_guests_guest_type"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"),
                     unique=True, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=True, index=True)
    phone = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    id_type = Column(String(50), nullable=True)
    id_number = Column(String(100), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    nationality = Column(String(100), nullable=True)
    guest_type = Column(String(16), nullable=False, default="online")
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    user = relationship("Users", foreign_keys=[user_id])
    reservations = relationship("Reservation", back_populates="guest")
    saved_rooms = relationship("SavedRoom", back_populates="guest", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
