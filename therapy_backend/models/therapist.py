"""Therapist model definitions."""

from sqlalchemy import Column, Integer, String
from therapy_backend.database import Base


class Therapist(Base):
    """Represents a therapist who owns a schedule."""
    __tablename__ = "therapists"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True)
    first_name = Column(String)
    last_name = Column(String)
    phone = Column(String)
    profile_pic = Column(String)
