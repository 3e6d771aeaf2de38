import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


APP_ENV = os.getenv("APP_ENV", "development")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./virtual_teacher.db")
DATABASE_ECHO = _get_bool(os.getenv("DATABASE_ECHO"), default=False)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

RATING_MIN = _get_int(os.getenv("RATING_MIN"), 1)
RATING_MAX = _get_int(os.getenv("RATING_MAX"), 5)
GRADE_MIN = _get_int(os.getenv("GRADE_MIN"), 0)
GRADE_MAX = _get_int(os.getenv("GRADE_MAX"), 100)

ROLE_STUDENT = os.getenv("ROLE_STUDENT", "Student")
ROLE_TEACHER = os.getenv("ROLE_TEACHER", "Teacher")
ROLE_PENDING_TEACHER = os.getenv("ROLE_PENDING_TEACHER", "PendingTeacher")
ROLE_ADMIN = os.getenv("ROLE_ADMIN", "Admin")


class RoleConfig(BaseModel):
    """Role type names the policy and services compare against."""

    student: str = "Student"
    teacher: str = "Teacher"
    pending_teacher: str = "PendingTeacher"
    admin: str = "Admin"

    class Config:
        frozen = True

    def all(self) -> tuple[str, ...]:
        return (self.student, self.teacher, self.pending_teacher, self.admin)


def load_role_config() -> RoleConfig:
    return RoleConfig(
        student=ROLE_STUDENT,
        teacher=ROLE_TEACHER,
        pending_teacher=ROLE_PENDING_TEACHER,
        admin=ROLE_ADMIN,
    )


def configure_logging(level: str | None = None) -> None:
    log_level = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        level=log_level,
    )
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("virtual_teacher").setLevel(log_level)


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and DATABASE_URL.startswith("sqlite"):
        raise RuntimeError("DATABASE_URL must point to a server database in production.")
    if RATING_MIN > RATING_MAX:
        raise RuntimeError("RATING_MIN must not be greater than RATING_MAX.")
    if GRADE_MIN > GRADE_MAX:
        raise RuntimeError("GRADE_MIN must not be greater than GRADE_MAX.")
