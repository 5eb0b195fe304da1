from decimal import Decimal
from sqlalchemy import (JSON, TIMESTAMP, Boolean, CheckConstraint, Column, ForeignKey,
                        Integer, Numeric, String, func)
from sqlalchemy.orm import relationship
from shared.core.database import Base


class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (
        CheckConstraint("floor >= 0", name="ck_rooms_floor"),
        CheckConstraint("status IN ('available', 'occupied', 'maintenance', 'cleaning')",
                        name="ck_rooms_status"),
        CheckConstraint("price_adjustment >= -1000 AND price_adjustment <= 1000",
                        name="ck_rooms_price_adjustment"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    room_type_id = Column(Integer, ForeignKey("room_types.id", ondelete="RESTRICT"),
                          nullable=False, index=True)
    room_number = Column(String(10), unique=True, nullable=False)
    floor = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="available")
    price_adjustment = Column(Numeric(10, 2), nullable=False, default=0)
    special_features = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    room_type = relationship("RoomType", back_populates="rooms", lazy="joined")
    reservations = relationship("Reservation", back_populates="room")

    @property
    def final_price(self) -> Decimal:
        base = Decimal(self.room_type.base_price) if self.room_type else Decimal(0)
        return base + Decimal(self.price_adjustment or 0)
