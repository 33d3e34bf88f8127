from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from app.db.base import Base


class Patient(Base):
    """Patient identified by phone. Upserted on every prescription save."""
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    phone = Column(String(64), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    age = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Patient phone={self.phone} name={self.name}>"
