from sqlalchemy import (TIMESTAMP, CheckConstraint, Column, ForeignKey, Integer, Numeric,
                        String, Text, func)
from sqlalchemy.orm import relationship
from shared.core.database import Base


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount"),
        CheckConstraint("refund_amount >= 0 AND refund_amount <= amount",
                        name="ck_payments_refund_amount"),
        CheckConstraint(
            "payment_method IN ('cash', 'credit_card', 'debit_card', 'bank_transfer', "
            "'online_payment', 'voucher')",
            name="ck_payments_method"),
        CheckConstraint(
            "payment_status IN ('pending', 'completed', 'failed', 'refunded', "
            "'partially_refunded')",
            name="ck_payments_status"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    reservation_id = Column(Integer, ForeignKey("reservations.id", ondelete="RESTRICT"),
                            nullable=False, index=True)
    guest_id = Column(Integer, ForeignKey("guests.id", ondelete="RESTRICT"),
                      nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String(20), nullable=False)
    payment_status = Column(String(20), nullable=False, default="pending", index=True)
    refund_amount = Column(Numeric(10, 2), nullable=False, default=0)
    refund_reason = Column(Text, nullable=True)
    failure_reason = Column(Text, nullable=True)
    transaction_id = Column(String(100), nullable=True, unique=True)
    payment_date = Column(TIMESTAMP(timezone=True), nullable=True, index=True)
    processed_by = Column(Integer, ForeignKey("staff.id", ondelete="SET NULL"), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    reservation = relationship("Reservation", back_populates="payments")
    guest = relationship("Guest")
    processor = relationship("Staff")
