"""Course model definitions."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from virtual_teacher.database import Base


class Course(Base):
    """A course created by a teacher or admin."""
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, unique=True, index=True, nullable=False)
    topic_id = Column(Integer, ForeignKey("topics.id"), nullable=False)
    start_date = Column(Date)
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    is_published = Column(Boolean, default=False, nullable=False)
    passing_grade = Column(Integer, default=0, nullable=False)

    topic = relationship("Topic", lazy="joined")
    creator = relationship("User", lazy="joined")
    description = relationship(
        "CourseDescription",
        uselist=False,
        back_populates="course",
        cascade="all, delete",
    )
    ratings = relationship("Rating", back_populates="course", cascade="all, delete")
    enrollments = relationship("Enrollment", back_populates="course", cascade="all, delete")
    lectures = relationship("Lecture", back_populates="course", cascade="all, delete")


class CourseDescription(Base):
    """Optional free-text body of a course."""
    __tablename__ = "course_descriptions"

    id = Column(Integer, primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), unique=True, nullable=False)
    description = Column(Text, nullable=False)

    course = relationship("Course", back_populates="description")


class Rating(Base):
    """One user's rating of a course. Several rows per user are allowed."""
    __tablename__ = "ratings"

    id = Column(Integer, primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    rating = Column(Float, nullable=False)
    comment = Column(String)

    course = relationship("Course", back_populates="ratings")
    user = relationship("User", back_populates="ratings")


class Enrollment(Base):
    """Join row between a user and a course; ongoing=False means completed."""
    __tablename__ = "course_user"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    ongoing = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_course_user_user_course"),
    )

    user = relationship("User", back_populates="enrollments")
    course = relationship("Course", back_populates="enrollments")
