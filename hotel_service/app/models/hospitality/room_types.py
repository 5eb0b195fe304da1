from sqlalchemy import JSON, TIMESTAMP, CheckConstraint, Column, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship
from shared.core.database import Base


class RoomType(Base):
    __tablename__ = "room_types"
    __table_args__ = (
        CheckConstraint("base_price >= 0 AND base_price <= 10000", name="ck_room_types_base_price"),
        CheckConstraint("max_occupancy >= 1 AND max_occupancy <= 20", name="ck_room_types_max_occupancy"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    base_price = Column(Numeric(10, 2), nullable=False)
    max_occupancy = Column(Integer, nullable=False)
    amenities = Column(JSON, nullable=False, default=list)
    size_sqft = Column(Integer, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    rooms = relationship("Room", back_populates="room_type")
