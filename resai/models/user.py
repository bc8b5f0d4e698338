from __future__ import annotations

from enum import Enum

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from resai.core.clock import utc_now
from resai.db.session import Base


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=True)
    full_name = Column(String(200), nullable=True)
    auth_provider = Column(String(20), nullable=False, default="LOCAL")
    role = Column(String(10), nullable=False, default=Role.USER.value)
    premium_until = Column(DateTime, nullable=True)

    # Monthly AI usage; counters belong to usage_period (YYYY-MM).
    tailor_count = Column(Integer, nullable=False, default=0)
    cover_letter_count = Column(Integer, nullable=False, default=0)
    usage_period = Column(String(7), nullable=True)

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=True, onupdate=utc_now)

    resumes = relationship("Resume", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_premium(self) -> bool:
        return self.premium_until is not None and self.premium_until > utc_now()

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value
