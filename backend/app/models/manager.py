from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from sqlalchemy.sql import func
from app.database import Base


class Manager(Base):
    __tablename__ = "managers"

    id = Column(Uuid, primary_key=True)
    full_name = Column(String(200), nullable=False)
    email = Column(String(200), nullable=True)

    can_create_shifts = Column(Boolean, default=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
