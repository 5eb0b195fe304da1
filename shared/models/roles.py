from sqlalchemy import JSON, TIMESTAMP, Column, Integer, String, Text, func
from sqlalchemy.orm import relationship
from shared.core.database import Base


class Roles(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False)  # admin, receptionist, guest
    description = Column(Text, nullable=True)
    permissions = Column(JSON, nullable=False, default=list)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    users = relationship("Users", back_populates="role")

    def has_permission(self, permission: str) -> bool:
        perms = self.permissions or []
        return "*" in perms or permission in perms
