"""Lecture and solution model definitions."""

from sqlalchemy import Column, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from virtual_teacher.database import Base


class Lecture(Base):
    """A lecture belonging to a course."""
    __tablename__ = "lectures"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    video_url = Column(String)
    assignment_url = Column(String)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)

    course = relationship("Course", back_populates="lectures")
    description = relationship(
        "LectureDescription",
        uselist=False,
        back_populates="lecture",
        cascade="all, delete",
    )
    solutions = relationship("Solution", back_populates="lecture", cascade="all, delete")


class LectureDescription(Base):
    """Optional free-text body of a lecture."""
    __tablename__ = "lecture_descriptions"

    id = Column(Integer, primary_key=True)
    lecture_id = Column(Integer, ForeignKey("lectures.id", ondelete="CASCADE"), unique=True, nullable=False)
    description = Column(Text, nullable=False)

    lecture = relationship("Lecture", back_populates="description")


class Solution(Base):
    """A user's submitted assignment for a lecture."""
    __tablename__ = "solutions"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    lecture_id = Column(Integer, ForeignKey("lectures.id", ondelete="CASCADE"), nullable=False, index=True)
    file_url = Column(String, nullable=False)
    grade = Column(Float)

    __table_args__ = (
        UniqueConstraint("user_id", "lecture_id", name="uq_solutions_user_lecture"),
    )

    user = relationship("User", back_populates="solutions")
    lecture = relationship("Lecture", back_populates="solutions")
