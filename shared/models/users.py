from passlib.context import CryptContext
from sqlalchemy import TIMESTAMP, Boolean, Column, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship
from shared.core.database import Base

bcrypt_context = CryptContext(schemes=['bcrypt'], deprecated='auto')


class Users(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="RESTRICT"), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    verification_token = Column(String(128), nullable=True, index=True)
    last_login = Column(TIMESTAMP(timezone=True), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    role = relationship("Roles", back_populates="users", lazy="joined")

    @property
    def role_name(self) -> str | None:
        return self.role.name if self.role else None

    @property
    def permissions(self) -> list:
        return list(self.role.permissions or []) if self.role else []

    def set_password(self, password: str):
        self.password_hash = bcrypt_context.hash(password)

    def verify_password(self, password: str) -> bool:
        return bcrypt_context.verify(password, self.password_hash)
