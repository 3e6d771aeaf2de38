"""Filtering and ordering of course and user listings.

Options carry optional criteria; a missing or empty criterion imposes no
constraint. String criteria match by case-sensitive substring containment
and all present criteria must hold. Sorting is stable, so rows that compare
equal keep their storage order, and an unknown sort key leaves the input
order untouched.
"""

from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any, NamedTuple

from pydantic import BaseModel, field_validator

from virtual_teacher.schemas import Course, User


class CourseSortKey(str, Enum):
    TITLE = 'title'
    RATING = 'rating'


class UserSortKey(str, Enum):
    EMAIL = 'email'
    FIRST_NAME = 'firstName'
    LAST_NAME = 'lastName'
    ROLE_TYPE = 'roleType'


class Ordering(NamedTuple):
    key: Callable[[Any], Any]
    descending: bool


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class CourseFilterOptions(BaseModel):
    title: str | None = None
    topic: str | None = None
    teacher: str | None = None
    min_rating: float | None = None
    is_published: bool | None = None
    sort_by: str | None = None
    sort_order: str | None = None

    @field_validator('min_rating', 'is_published', mode='before')
    @classmethod
    def validate_optional_scalar(cls, value: Any) -> Any:
        return _blank_to_none(value)


class UserFilterOptions(BaseModel):
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    role_type: str | None = None
    sort_by: str | None = None
    sort_order: str | None = None


def _present(value: str | None) -> bool:
    return value is not None and value != ''


def _contains(haystack: str | None, needle: str) -> bool:
    return haystack is not None and needle in haystack


def _parse_sort_key(enum_type: type[Enum], value: str | None) -> Enum | None:
    if not value:
        return None
    try:
        return enum_type(value)
    except ValueError:
        return None


def is_descending(sort_order: str | None) -> bool:
    return sort_order is not None and sort_order.lower() == 'desc'


def _nullable_key(value: Any) -> tuple[bool, Any]:
    # Missing values sort before every present value.
    return (value is not None, value if value is not None else 0)


def _nullable_text_key(value: str | None) -> tuple[bool, str]:
    return (value is not None, value or '')


def _all_of(clauses: list[Callable[[Any], bool]]) -> Callable[[Any], bool]:
    return lambda item: all(clause(item) for clause in clauses)


def _minimum_rating_clause(min_rating: float) -> Callable[[Course], bool]:
    if min_rating == 0:
        # Unrated courses count as meeting a zero minimum.
        return lambda course: course.rating is None or course.rating >= 0
    return lambda course: course.rating is not None and course.rating >= min_rating


def course_predicate(options: CourseFilterOptions) -> Callable[[Course], bool]:
    clauses: list[Callable[[Course], bool]] = []

    if _present(options.title):
        clauses.append(lambda course: _contains(course.title, options.title))

    if _present(options.topic):
        clauses.append(lambda course: _contains(course.topic.name, options.topic))

    if _present(options.teacher):
        clauses.append(lambda course: _contains(course.creator.email, options.teacher))

    if options.is_published is not None:
        clauses.append(lambda course: course.is_published == options.is_published)

    if options.min_rating is not None:
        clauses.append(_minimum_rating_clause(options.min_rating))

    return _all_of(clauses)


def course_ordering(options: CourseFilterOptions) -> Ordering | None:
    sort_key = _parse_sort_key(CourseSortKey, options.sort_by)
    if sort_key is None:
        return None

    if sort_key is CourseSortKey.TITLE:
        key = lambda course: course.title  # noqa: E731
    else:
        key = lambda course: _nullable_key(course.rating)  # noqa: E731

    return Ordering(key=key, descending=is_descending(options.sort_order))


def user_predicate(options: UserFilterOptions) -> Callable[[User], bool]:
    clauses: list[Callable[[User], bool]] = []

    if _present(options.email):
        clauses.append(lambda user: _contains(user.email, options.email))

    if _present(options.first_name):
        clauses.append(lambda user: _contains(user.first_name, options.first_name))

    if _present(options.last_name):
        clauses.append(lambda user: _contains(user.last_name, options.last_name))

    if _present(options.role_type):
        clauses.append(lambda user: _contains(user.role.role_type, options.role_type))

    return _all_of(clauses)


_USER_SORT_FIELDS: dict[UserSortKey, Callable[[User], Any]] = {
    UserSortKey.EMAIL: lambda user: user.email,
    UserSortKey.FIRST_NAME: lambda user: _nullable_text_key(user.first_name),
    UserSortKey.LAST_NAME: lambda user: _nullable_text_key(user.last_name),
    UserSortKey.ROLE_TYPE: lambda user: user.role.role_type,
}


def user_ordering(options: UserFilterOptions) -> Ordering | None:
    sort_key = _parse_sort_key(UserSortKey, options.sort_by)
    if sort_key is None:
        return None

    return Ordering(key=_USER_SORT_FIELDS[sort_key], descending=is_descending(options.sort_order))


def _apply(items: Iterable[Any], predicate: Callable[[Any], bool], ordering: Ordering | None) -> list[Any]:
    selected = [item for item in items if predicate(item)]
    if ordering is None:
        return selected
    return sorted(selected, key=ordering.key, reverse=ordering.descending)


def filter_courses(courses: Iterable[Course], options: CourseFilterOptions) -> list[Course]:
    return _apply(courses, course_predicate(options), course_ordering(options))


def filter_users(users: Iterable[User], options: UserFilterOptions) -> list[User]:
    return _apply(users, user_predicate(options), user_ordering(options))
