"""Topic model definitions."""

from sqlalchemy import Column, Integer, String
from virtual_teacher.database import Base


class Topic(Base):
    """Subject area a course belongs to."""
    __tablename__ = "topics"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
