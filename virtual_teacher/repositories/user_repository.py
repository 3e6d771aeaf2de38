from sqlalchemy import func
from sqlalchemy.orm import Session

from virtual_teacher import schemas
from virtual_teacher.errors import EntityNotFoundError
from virtual_teacher.filters import UserFilterOptions, filter_users
from virtual_teacher.models.role import Role
from virtual_teacher.models.user import User
from virtual_teacher.repositories.contracts import CourseRepository


class SqlUserRepository:
    """User storage on an injected SQLAlchemy session.

    Looking a user up by id also attaches the courses the user is currently
    enrolled in, which the course repository provides.
    """

    def __init__(self, db: Session, courses: CourseRepository) -> None:
        self.db = db
        self.courses = courses

    def _get_row(self, user_id: int) -> User:
        row = self.db.query(User).filter(User.id == user_id).first()
        if row is None:
            raise EntityNotFoundError('User', 'id', user_id)
        return row

    def get(self, user_id: int) -> schemas.User:
        user = schemas.User.model_validate(self._get_row(user_id))
        return user.model_copy(update={'courses': self.courses.get_by_user_state(user_id, ongoing=True)})

    def get_by_email(self, email: str) -> schemas.User:
        row = self.db.query(User).filter(User.email == email).first()
        if row is None:
            raise EntityNotFoundError('User', 'email', email)
        return schemas.User.model_validate(row)

    def get_all(self) -> list[schemas.User]:
        rows = self.db.query(User).order_by(User.id.asc()).all()
        return [schemas.User.model_validate(row) for row in rows]

    def get_filtered(self, options: UserFilterOptions) -> list[schemas.User]:
        return filter_users(self.get_all(), options)

    def create(self, registration: schemas.UserRegistration, role: schemas.Role) -> int:
        row = User(
            email=registration.email,
            password=registration.password,
            first_name=registration.first_name,
            last_name=registration.last_name,
            picture_url=registration.picture_url,
            is_verified=False,
            role_id=role.id,
        )
        self.db.add(row)
        self.db.flush()
        return row.id

    def update(self, user: schemas.User) -> None:
        row = self._get_row(user.id)
        row.email = user.email
        row.password = user.password
        row.first_name = user.first_name
        row.last_name = user.last_name
        row.picture_url = user.picture_url
        row.role_id = user.role.id
        self.db.flush()

    def delete(self, user_id: int) -> None:
        # Enrollment, rating and solution rows go with the user.
        self.db.delete(self._get_row(user_id))
        self.db.flush()

    def get_role(self, role_type: str) -> schemas.Role:
        row = self.db.query(Role).filter(func.lower(Role.role_type) == role_type.lower()).first()
        if row is None:
            raise EntityNotFoundError(f'Role {role_type}')
        return schemas.Role.model_validate(row)
