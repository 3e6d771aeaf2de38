"""Role model definitions."""

from sqlalchemy import Column, Integer, String
from virtual_teacher.database import Base


class Role(Base):
    """A role type a user holds, looked up by name."""
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    role_type = Column(String, unique=True, nullable=False)
