from sqlalchemy import TIMESTAMP, Column, ForeignKey, Integer, UniqueConstraint, func
from sqlalchemy.orm import relationship
from shared.core.database import Base


class SavedRoom(Base):
    __tablename__ = "saved_rooms"
    __table_args__ = (
        UniqueConstraint("guest_id", "room_id", name="uq_saved_rooms_guest_room"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    guest_id = Column(Integer, ForeignKey("guests.id", ondelete="CASCADE"), nullable=False)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    guest = relationship("Guest", back_populates="saved_rooms")
    room = relationship("Room", lazy="joined")
