"""Patient model definitions."""

from sqlalchemy import Column, Integer, String
from therapy_backend.database import Base


class Patient(Base):
    """Represents a patient that can be assigned to a schedule slot."""
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String)
    last_name = Column(String)
    email = Column(String, index=True)
