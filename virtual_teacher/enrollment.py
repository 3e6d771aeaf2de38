"""Lifecycle of a user's relationship to a course.

    UNENROLLED --enroll--> ONGOING --complete--> COMPLETED
    ONGOING / COMPLETED --remove--> UNENROLLED

A (user, course) pair has at most one enrollment row, so a pair is never
both enrolled and completed. ``enroll`` does not look for an existing row;
callers run ``check_can_enroll`` first.
"""

import logging
from enum import Enum

from virtual_teacher.errors import EntityDuplicateError, UnauthorizedError
from virtual_teacher.repositories.contracts import CourseRepository
from virtual_teacher.schemas import Course, User

logger = logging.getLogger(__name__)

COURSE_NOT_PUBLISHED_EXCEPTION = 'Enrollment is possible only for published courses.'


class EnrollmentState(str, Enum):
    UNENROLLED = 'unenrolled'
    ONGOING = 'ongoing'
    COMPLETED = 'completed'


class EnrollmentStateMachine:
    def __init__(self, courses: CourseRepository) -> None:
        self.courses = courses

    def state_of(self, user_id: int, course_id: int) -> EnrollmentState:
        enrollment = self.courses.get_enrollment(user_id, course_id)
        if enrollment is None:
            return EnrollmentState.UNENROLLED
        if enrollment.ongoing:
            return EnrollmentState.ONGOING
        return EnrollmentState.COMPLETED

    def is_enrolled(self, user_id: int, course_id: int) -> bool:
        return self.state_of(user_id, course_id) is EnrollmentState.ONGOING

    def has_completed(self, user_id: int, course_id: int) -> bool:
        return self.state_of(user_id, course_id) is EnrollmentState.COMPLETED

    def check_can_enroll(self, user: User, course: Course) -> None:
        if not course.is_published:
            raise UnauthorizedError(COURSE_NOT_PUBLISHED_EXCEPTION)

        if self.state_of(user.id, course.id) is not EnrollmentState.UNENROLLED:
            raise EntityDuplicateError('Enrollment', 'course id', course.id)

    def enroll(self, user_id: int, course_id: int) -> None:
        self.courses.add_enrollment(user_id, course_id)
        logger.info('Enrolled user=%s course=%s', user_id, course_id)

    def complete(self, user_id: int, course_id: int) -> int:
        updated = self.courses.set_enrollment_ongoing(user_id, course_id, ongoing=False)
        logger.info('Completed user=%s course=%s rows=%s', user_id, course_id, updated)
        return updated

    def remove(self, user_id: int, course_id: int) -> int:
        removed = self.courses.delete_enrollment(user_id, course_id)
        logger.info('Removed user=%s course=%s rows=%s', user_id, course_id, removed)
        return removed

    def ongoing_courses(self, user_id: int) -> list[Course]:
        return self.courses.get_by_user_state(user_id, ongoing=True)

    def completed_courses(self, user_id: int) -> list[Course]:
        return self.courses.get_by_user_state(user_id, ongoing=False)

    def courses_by_user(self, user_id: int) -> list[Course]:
        # Completed courses are not part of this listing.
        return self.ongoing_courses(user_id)

    def students_enrolled(self, course_id: int) -> list[User]:
        return self.courses.get_enrolled_users(course_id)
