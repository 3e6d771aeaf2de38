import logging

from sqlalchemy.orm import Session

from virtual_teacher.authorization import AuthorizationPolicy, ensure_unique, require
from virtual_teacher.core.config import RoleConfig
from virtual_teacher.database import unit_of_work
from virtual_teacher.filters import UserFilterOptions
from virtual_teacher.repositories.contracts import CourseRepository, UserRepository
from virtual_teacher.repositories.course_repository import SqlCourseRepository
from virtual_teacher.repositories.user_repository import SqlUserRepository
from virtual_teacher.schemas import User, UserRegistration, UserUpdate

logger = logging.getLogger(__name__)


class UserDirectoryService:
    def __init__(
        self,
        db: Session,
        roles: RoleConfig,
        users: UserRepository | None = None,
        courses: CourseRepository | None = None,
    ) -> None:
        self.db = db
        self.courses = courses or SqlCourseRepository(db)
        self.users = users or SqlUserRepository(db, self.courses)
        self.policy = AuthorizationPolicy(roles)

    def get(self, user_id: int) -> User:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> User:
        return self.users.get_by_email(email)

    def get_all(self, options: UserFilterOptions | None = None) -> list[User]:
        return self.users.get_filtered(options or UserFilterOptions())

    def create(self, registration: UserRegistration, requested_role: str) -> User:
        """Register a user under ``requested_role`` ("User" or "Teacher")."""
        with unit_of_work(self.db):
            ensure_unique(
                lambda: self.users.get_by_email(registration.email),
                None,
                'User',
                'email',
                registration.email,
            )
            role = self.users.get_role(self.policy.registration_role(requested_role))
            user_id = self.users.create(registration, role)

        logger.info('User registered: id=%s, role=%s', user_id, role.role_type)
        return self.users.get(user_id)

    def update(self, update: UserUpdate, user: User) -> User:
        with unit_of_work(self.db):
            current = self.users.get(user.id)
            require(self.policy.can_update_own_profile(update, current))

            self.users.update(
                current.model_copy(
                    update={
                        'first_name': update.first_name,
                        'last_name': update.last_name,
                        'password': update.password,
                        'picture_url': update.picture_url,
                    }
                )
            )

        logger.info('User updated: id=%s', user.id)
        return self.users.get(user.id)

    def delete(self, user_id: int, user: User) -> None:
        with unit_of_work(self.db):
            require(self.policy.can_delete_user(user_id, user))
            target = self.users.get(user_id)
            require(self.policy.can_delete_course_owner(target, self.courses.get_by_creator(user_id)))
            self.users.delete(user_id)

        logger.info('User deleted: id=%s, by=%s', user_id, user.id)
