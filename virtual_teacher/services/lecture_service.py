import logging

from sqlalchemy.orm import Session

from virtual_teacher.authorization import AuthorizationPolicy, require
from virtual_teacher.core import config
from virtual_teacher.core.config import RoleConfig
from virtual_teacher.database import unit_of_work
from virtual_teacher.descriptions import DescriptionReconciler
from virtual_teacher.enrollment import EnrollmentStateMachine
from virtual_teacher.errors import EntityNotFoundError, InvalidArgumentError, UnauthorizedError
from virtual_teacher.repositories.contracts import CourseRepository, LectureRepository, SolutionRepository
from virtual_teacher.repositories.course_repository import SqlCourseRepository
from virtual_teacher.repositories.lecture_repository import SqlLectureRepository
from virtual_teacher.repositories.solution_repository import SqlSolutionRepository
from virtual_teacher.schemas import Lecture, LectureCreate, LectureUpdate, Solution, User

logger = logging.getLogger(__name__)

NOT_ENROLLED_SOLUTION_EXCEPTION = 'Only users enrolled in the course can submit solutions.'


class LectureService:
    """Lectures of a course and the solutions students hand in for them."""

    def __init__(
        self,
        db: Session,
        roles: RoleConfig,
        lectures: LectureRepository | None = None,
        courses: CourseRepository | None = None,
        solutions: SolutionRepository | None = None,
    ) -> None:
        self.db = db
        self.lectures = lectures or SqlLectureRepository(db)
        self.courses = courses or SqlCourseRepository(db)
        self.solutions = solutions or SqlSolutionRepository(db)
        self.policy = AuthorizationPolicy(roles)
        self.enrollments = EnrollmentStateMachine(self.courses)
        self.descriptions = DescriptionReconciler()

    def get(self, lecture_id: int) -> Lecture:
        return self.lectures.get(lecture_id)

    def get_all_by_course(self, course_id: int) -> list[Lecture]:
        return self.lectures.get_all_by_course(course_id)

    def create(self, course_id: int, lecture: LectureCreate, user: User) -> Lecture:
        with unit_of_work(self.db):
            require(self.policy.can_modify_course(self.courses.get(course_id), user))
            lecture_id = self.lectures.create(course_id, lecture)
            self.descriptions.attach_on_create(self.lectures.descriptions, lecture_id, lecture.description)

        logger.info('Lecture created: id=%s, course=%s, by=%s', lecture_id, course_id, user.id)
        return self.lectures.get(lecture_id)

    def update(self, lecture: LectureUpdate, user: User) -> Lecture:
        with unit_of_work(self.db):
            stored = self.lectures.get(lecture.id)
            require(self.policy.can_modify_course(self.courses.get(stored.course_id), user))

            self.lectures.update(lecture)
            action = self.descriptions.reconcile(self.lectures.descriptions, lecture.id, lecture.description)

        logger.info('Lecture updated: id=%s, description=%s, by=%s', lecture.id, action.value, user.id)
        return self.lectures.get(lecture.id)

    def delete(self, lecture_id: int, user: User) -> None:
        with unit_of_work(self.db):
            stored = self.lectures.get(lecture_id)
            require(self.policy.can_modify_course(self.courses.get(stored.course_id), user))
            self.lectures.delete(lecture_id)

        logger.info('Lecture deleted: id=%s, by=%s', lecture_id, user.id)

    def submit_solution(self, lecture_id: int, file_url: str, user: User) -> Solution:
        """Store ``file_url`` as the user's solution, replacing an earlier one."""
        with unit_of_work(self.db):
            lecture = self.lectures.get(lecture_id)
            if not self.enrollments.is_enrolled(user.id, lecture.course_id):
                raise UnauthorizedError(NOT_ENROLLED_SOLUTION_EXCEPTION)

            try:
                self.solutions.get_solution(user.id, lecture_id)
            except EntityNotFoundError:
                self.solutions.add_solution(user.id, lecture_id, file_url)
            else:
                self.solutions.update_solution_url(user.id, lecture_id, file_url)

        return self.solutions.get_solution(user.id, lecture_id)

    def grade_solution(self, lecture_id: int, student_id: int, grade: float, user: User) -> Solution:
        if not config.GRADE_MIN <= grade <= config.GRADE_MAX:
            raise InvalidArgumentError(f'Grade must be between {config.GRADE_MIN} and {config.GRADE_MAX}.')

        with unit_of_work(self.db):
            lecture = self.lectures.get(lecture_id)
            require(self.policy.can_grade(self.courses.get(lecture.course_id), user))
            self.solutions.add_grade(student_id, lecture_id, grade)

        logger.info('Solution graded: lecture=%s, student=%s, grade=%s, by=%s', lecture_id, student_id, grade, user.id)
        return self.solutions.get_solution(student_id, lecture_id)

    def solutions_for_lecture(self, lecture_id: int, user: User) -> list[Solution]:
        lecture = self.lectures.get(lecture_id)
        require(self.policy.can_grade(self.courses.get(lecture.course_id), user))
        return self.solutions.get_all_by_lecture(lecture_id)

    def solutions_for_user(self, user_id: int) -> list[Solution]:
        return self.solutions.get_all_by_user(user_id)
