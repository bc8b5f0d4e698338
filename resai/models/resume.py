from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from resai.core.clock import utc_now
from resai.db.session import Base


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    # JSON columns are replaced, never mutated in place, so changes are tracked.
    data = Column(JSON, nullable=False, default=dict)
    ai_metadata = Column(JSON, nullable=True)
    version = Column(Integer, nullable=False, default=1)
    language = Column(String(5), nullable=False, default="en")
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    user = relationship("User", back_populates="resumes")
