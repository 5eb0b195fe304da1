from sqlalchemy import JSON, TIMESTAMP, CheckConstraint, Column, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship
from shared.core.database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"
    __table_args__ = (
        CheckConstraint("action IN ('INSERT', 'UPDATE', 'DELETE')", name="ck_audit_logs_action"),
        CheckConstraint(
            "(action = 'INSERT' AND old_values IS NULL AND new_values IS NOT NULL) OR "
            "(action = 'UPDATE' AND old_values IS NOT NULL AND new_values IS NOT NULL) OR "
            "(action = 'DELETE' AND old_values IS NOT NULL AND new_values IS NULL)",
            name="ck_audit_logs_values",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    table_name = Column(String(50), nullable=False, index=True)
    record_id = Column(Integer, nullable=False)
    action = Column(String(10), nullable=False)
    old_values = Column(JSON(none_as_null=True), nullable=True)
    new_values = Column(JSON(none_as_null=True), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), index=True)

    user = relationship("Users")
