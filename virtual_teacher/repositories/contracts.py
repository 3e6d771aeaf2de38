"""Repository contracts the domain services depend on.

Lookups raise ``EntityNotFoundError`` when nothing matches. Writes only
flush; committing is left to the caller's unit of work.
"""

from typing import Protocol

from virtual_teacher.filters import CourseFilterOptions, UserFilterOptions
from virtual_teacher.schemas import (
    Course,
    CourseCreate,
    CourseUpdate,
    Enrollment,
    Lecture,
    LectureCreate,
    LectureUpdate,
    Rating,
    Role,
    Solution,
    User,
    UserRegistration,
)


class DescriptionStore(Protocol):
    def exists(self, parent_id: int) -> bool: ...

    def insert(self, parent_id: int, text: str) -> None: ...

    def replace(self, parent_id: int, text: str) -> None: ...

    def delete(self, parent_id: int) -> None: ...


class CourseRepository(Protocol):
    descriptions: DescriptionStore

    def get(self, course_id: int) -> Course: ...

    def get_by_title(self, title: str) -> Course: ...

    def get_all(self) -> list[Course]: ...

    def get_filtered(self, options: CourseFilterOptions) -> list[Course]: ...

    def get_by_creator(self, creator_id: int) -> list[Course]: ...

    def get_by_user_state(self, user_id: int, ongoing: bool) -> list[Course]: ...

    def create(self, course: CourseCreate, creator_id: int) -> int: ...

    def update(self, course: CourseUpdate) -> None: ...

    def delete(self, course_id: int) -> None: ...

    def transfer_teacher_courses(self, from_teacher_id: int, to_teacher_id: int) -> int: ...

    def published_count(self) -> int: ...

    def rate(self, course_id: int, user_id: int, rating: float, comment: str | None) -> None: ...

    def get_ratings(self, course_id: int) -> list[Rating]: ...

    def get_enrollment(self, user_id: int, course_id: int) -> Enrollment | None: ...

    def add_enrollment(self, user_id: int, course_id: int) -> None: ...

    def set_enrollment_ongoing(self, user_id: int, course_id: int, ongoing: bool) -> int: ...

    def delete_enrollment(self, user_id: int, course_id: int) -> int: ...

    def get_enrolled_users(self, course_id: int) -> list[User]: ...


class UserRepository(Protocol):
    def get(self, user_id: int) -> User: ...

    def get_by_email(self, email: str) -> User: ...

    def get_all(self) -> list[User]: ...

    def get_filtered(self, options: UserFilterOptions) -> list[User]: ...

    def create(self, registration: UserRegistration, role: Role) -> int: ...

    def update(self, user: User) -> None: ...

    def delete(self, user_id: int) -> None: ...

    def get_role(self, role_type: str) -> Role: ...


class LectureRepository(Protocol):
    descriptions: DescriptionStore

    def get(self, lecture_id: int) -> Lecture: ...

    def get_all_by_course(self, course_id: int) -> list[Lecture]: ...

    def create(self, course_id: int, lecture: LectureCreate) -> int: ...

    def update(self, lecture: LectureUpdate) -> None: ...

    def delete(self, lecture_id: int) -> int: ...


class SolutionRepository(Protocol):
    def get_all_by_lecture(self, lecture_id: int) -> list[Solution]: ...

    def get_all_by_user(self, user_id: int) -> list[Solution]: ...

    def get_solution(self, user_id: int, lecture_id: int) -> Solution: ...

    def add_solution(self, user_id: int, lecture_id: int, file_url: str) -> None: ...

    def update_solution_url(self, user_id: int, lecture_id: int, file_url: str) -> None: ...

    def add_grade(self, user_id: int, lecture_id: int, grade: float) -> None: ...
