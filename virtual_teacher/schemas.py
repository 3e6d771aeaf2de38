"""Domain value objects and the command payloads services accept.

Value objects are frozen and built from ORM rows with ``model_validate``.
Command payloads normalize their input the way incoming requests are
normalized before they reach a service.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, field_validator


class Role(BaseModel):
    id: int
    role_type: str

    class Config:
        from_attributes = True
        frozen = True


class Topic(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True
        frozen = True


class Description(BaseModel):
    description: str

    class Config:
        from_attributes = True
        frozen = True


class User(BaseModel):
    id: int
    email: str
    password: str
    first_name: str | None = None
    last_name: str | None = None
    picture_url: str | None = None
    is_verified: bool = False
    role: Role
    # Only populated by lookups by id; listings leave it empty.
    courses: list[Course] = []

    class Config:
        from_attributes = True
        frozen = True


class Course(BaseModel):
    id: int | None = None
    title: str
    topic: Topic
    start_date: date | None = None
    creator: User
    is_published: bool = False
    passing_grade: int = 0
    description: Description | None = None
    rating: float | None = None

    class Config:
        from_attributes = True
        frozen = True


class Lecture(BaseModel):
    id: int
    title: str
    video_url: str | None = None
    assignment_url: str | None = None
    course_id: int
    description: Description | None = None

    class Config:
        from_attributes = True
        frozen = True


class Rating(BaseModel):
    course_id: int
    user_id: int
    rating: float
    comment: str | None = None

    class Config:
        from_attributes = True
        frozen = True


class Enrollment(BaseModel):
    user_id: int
    course_id: int
    ongoing: bool

    class Config:
        from_attributes = True
        frozen = True


class Solution(BaseModel):
    user_id: int
    lecture_id: int
    file_url: str
    grade: float | None = None

    class Config:
        from_attributes = True
        frozen = True


User.model_rebuild()


def _normalize_description(value: str | None) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if not normalized:
        return None

    return normalized


def _require_text(value: str, field_name: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError(f'{field_name} is required.')
    return normalized


class CourseCreate(BaseModel):
    title: str
    topic_id: int
    start_date: date | None = None
    is_published: bool = False
    passing_grade: int = 0
    description: str | None = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _require_text(value, 'Title')

    @field_validator('passing_grade')
    @classmethod
    def validate_passing_grade(cls, value: int) -> int:
        if value < 0:
            raise ValueError('Passing grade cannot be negative.')
        return value

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        return _normalize_description(value)


class CourseUpdate(CourseCreate):
    id: int


class LectureCreate(BaseModel):
    title: str
    video_url: str | None = None
    assignment_url: str | None = None
    description: str | None = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _require_text(value, 'Title')

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        return _normalize_description(value)


class LectureUpdate(LectureCreate):
    id: int


class UserRegistration(BaseModel):
    email: str
    password: str
    first_name: str | None = None
    last_name: str | None = None
    picture_url: str | None = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _require_text(value, 'Email')


class UserUpdate(BaseModel):
    email: str
    role: str
    password: str
    first_name: str | None = None
    last_name: str | None = None
    picture_url: str | None = None


class RatingCreate(BaseModel):
    rating: float
    comment: str | None = None

    @field_validator('comment')
    @classmethod
    def validate_comment(cls, value: str | None) -> str | None:
        return _normalize_description(value)
