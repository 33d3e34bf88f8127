"""FastAPI dependencies: DB session and the prescription unit of work."""
from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.db.unit_of_work import PrescriptionUnitOfWork


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_unit_of_work(db: Session = Depends(get_db)) -> PrescriptionUnitOfWork:
    return PrescriptionUnitOfWork(db)
