from sqlalchemy import (TIMESTAMP, CheckConstraint, Column, Date, ForeignKey, Integer,
                        Numeric, String, Text, func)
from sqlalchemy.orm import relationship
from shared.core.database import Base


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("check_out_date > check_in_date", name="ck_reservations_dates"),
        CheckConstraint("number_of_guests > 0", name="ck_reservations_guests"),
        CheckConstraint(
            "status IN ('confirmed', 'checked-in', 'checked-out', 'cancelled', 'no-show')",
            name="ck_reservations_status"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    guest_id = Column(Integer, ForeignKey("guests.id", ondelete="RESTRICT"),
                      nullable=False, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="RESTRICT"),
                     nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    check_in_date = Column(Date, nullable=False, index=True)
    check_out_date = Column(Date, nullable=False, index=True)
    actual_check_in = Column(TIMESTAMP(timezone=True), nullable=True)
    actual_check_out = Column(TIMESTAMP(timezone=True), nullable=True)
    number_of_guests = Column(Integer, nullable=False, default=1)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default="confirmed", index=True)
    payment_status = Column(String(20), nullable=False, default="pending")
    special_requests = Column(Text, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    guest = relationship("Guest", back_populates="reservations", lazy="joined")
    room = relationship("Room", back_populates="reservations", lazy="joined")
    payments = relationship("Payment", back_populates="reservation")

    @property
    def nights(self) -> int:
        return (self.check_out_date - self.check_in_date).days
