"""Course catalog use cases.

Each mutating method is one unit of work: the authorization reads, the row
changes and the description reconciliation commit together or not at all.
"""

import logging

from sqlalchemy.orm import Session

from virtual_teacher.authorization import AuthorizationPolicy, ensure_unique, require
from virtual_teacher.core.config import RoleConfig
from virtual_teacher.database import unit_of_work
from virtual_teacher.descriptions import DescriptionReconciler
from virtual_teacher.enrollment import EnrollmentState, EnrollmentStateMachine
from virtual_teacher.filters import CourseFilterOptions
from virtual_teacher.ratings import RatingAggregator
from virtual_teacher.repositories.contracts import CourseRepository, UserRepository
from virtual_teacher.repositories.course_repository import SqlCourseRepository
from virtual_teacher.repositories.user_repository import SqlUserRepository
from virtual_teacher.schemas import Course, CourseCreate, CourseUpdate, Rating, RatingCreate, User

logger = logging.getLogger(__name__)


class CourseCatalogService:
    def __init__(
        self,
        db: Session,
        roles: RoleConfig,
        courses: CourseRepository | None = None,
        users: UserRepository | None = None,
        ratings: RatingAggregator | None = None,
    ) -> None:
        self.db = db
        self.courses = courses or SqlCourseRepository(db)
        self.users = users or SqlUserRepository(db, self.courses)
        self.policy = AuthorizationPolicy(roles)
        self.enrollments = EnrollmentStateMachine(self.courses)
        self.descriptions = DescriptionReconciler()
        self.ratings = ratings or RatingAggregator()

    def get(self, course_id: int) -> Course:
        return self.courses.get(course_id)

    def get_all(self, options: CourseFilterOptions | None = None) -> list[Course]:
        return self.courses.get_filtered(options or CourseFilterOptions())

    def get_by_creator(self, creator_id: int) -> list[Course]:
        return self.courses.get_by_creator(creator_id)

    def published_count(self) -> int:
        return self.courses.published_count()

    def create(self, course: CourseCreate, user: User) -> Course:
        with unit_of_work(self.db):
            ensure_unique(lambda: self.courses.get_by_title(course.title), None, 'Course', 'title', course.title)
            require(self.policy.can_create_course(user))

            course_id = self.courses.create(course, creator_id=user.id)
            self.descriptions.attach_on_create(self.courses.descriptions, course_id, course.description)

        logger.info('Course created: id=%s, title=%s, by=%s', course_id, course.title, user.id)
        return self.courses.get(course_id)

    def update(self, course: CourseUpdate, user: User) -> Course:
        with unit_of_work(self.db):
            ensure_unique(lambda: self.courses.get_by_title(course.title), course.id, 'Course', 'title', course.title)
            stored = self.courses.get(course.id)
            require(self.policy.can_modify_course(stored, user))

            self.courses.update(course)
            action = self.descriptions.reconcile(self.courses.descriptions, course.id, course.description)

        logger.info('Course updated: id=%s, description=%s, by=%s', course.id, action.value, user.id)
        return self.courses.get(course.id)

    def delete(self, course_id: int, user: User) -> None:
        with unit_of_work(self.db):
            stored = self.courses.get(course_id)
            require(self.policy.can_delete_course(stored, user))
            self.courses.delete(course_id)

        logger.info('Course deleted: id=%s, by=%s', course_id, user.id)

    def transfer_teacher_courses(self, from_teacher_id: int, to_teacher_id: int, user: User) -> int:
        with unit_of_work(self.db):
            require(self.policy.can_transfer_courses(user))
            self.users.get(from_teacher_id)
            require(self.policy.can_receive_courses(self.users.get(to_teacher_id)))
            transferred = self.courses.transfer_teacher_courses(from_teacher_id, to_teacher_id)

        logger.info(
            'Courses transferred: from=%s, to=%s, count=%s, by=%s',
            from_teacher_id,
            to_teacher_id,
            transferred,
            user.id,
        )
        return transferred

    def enrollment_state(self, user_id: int, course_id: int) -> EnrollmentState:
        return self.enrollments.state_of(user_id, course_id)

    def enroll(self, course_id: int, user: User) -> None:
        with unit_of_work(self.db):
            course = self.courses.get(course_id)
            self.enrollments.check_can_enroll(user, course)
            self.enrollments.enroll(user.id, course_id)

    def complete(self, course_id: int, user: User) -> None:
        with unit_of_work(self.db):
            self.courses.get(course_id)
            self.enrollments.complete(user.id, course_id)

    def remove_student(self, course_id: int, student_id: int, user: User) -> None:
        """Drop ``student_id`` from the course.

        Students may leave on their own; removing somebody else takes the
        course creator or an admin.
        """
        with unit_of_work(self.db):
            course = self.courses.get(course_id)
            if student_id != user.id:
                require(self.policy.can_modify_course(course, user))
            self.enrollments.remove(student_id, course_id)

    def ongoing_courses(self, user_id: int) -> list[Course]:
        return self.enrollments.ongoing_courses(user_id)

    def completed_courses(self, user_id: int) -> list[Course]:
        return self.enrollments.completed_courses(user_id)

    def courses_by_user(self, user_id: int) -> list[Course]:
        return self.enrollments.courses_by_user(user_id)

    def students_enrolled(self, course_id: int) -> list[User]:
        return self.enrollments.students_enrolled(course_id)

    def rate(self, course_id: int, rating: RatingCreate, user: User) -> None:
        with unit_of_work(self.db):
            self.courses.get(course_id)
            self.ratings.validate(rating.rating, self.courses.get_enrollment(user.id, course_id))
            self.courses.rate(course_id, user.id, rating.rating, rating.comment)

        logger.info('Course rated: id=%s, rating=%s, by=%s', course_id, rating.rating, user.id)

    def get_ratings(self, course_id: int) -> list[Rating]:
        return self.courses.get_ratings(course_id)

    def average_rating(self, course_id: int) -> float | None:
        return self.ratings.average(self.courses.get_ratings(course_id))
