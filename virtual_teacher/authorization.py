"""Who may create, change or delete courses and users.

Every check is a pure function of the acting user and the target and
returns a ``Decision``. Services turn a denial into ``UnauthorizedError``
with ``require``. Role names are compared case-insensitively against the
``RoleConfig`` the policy was built with.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from virtual_teacher.core.config import RoleConfig
from virtual_teacher.errors import (
    EntityDuplicateError,
    EntityNotFoundError,
    InvalidArgumentError,
    UnauthorizedError,
)
from virtual_teacher.schemas import Course, User, UserUpdate

ONLY_TEACHER_OR_ADMIN_CAN_CREATE_COURSE = 'Only teacher or admin can create course.'
ONLY_CREATOR_CAN_MODIFY_A_COURSE = 'Only creator or admin can modify a course.'
EMAIL_UPDATE_EXCEPTION = 'Email cannot be updated.'
ROLE_UPDATE_EXCEPTION = 'Role cannot be updated.'
PENDING_VALIDATION_EXCEPTION = (
    'Your registration is being reviewed and currently you cannot update profile details.'
)
DELETE_USER_EXCEPTION = 'You are not authorized to delete this user.'
DELETE_TEACHER_EXCEPTION = 'Teachers cannot be deleted until all courses created by them are transferred.'
DELETE_COURSE_OWNER_EXCEPTION = 'Users cannot be deleted until all courses created by them are transferred.'
ONLY_ADMIN_CAN_TRANSFER_COURSES = 'Only admin can transfer courses.'
TRANSFER_TARGET_EXCEPTION = 'Courses can only be transferred to a teacher or admin.'

REGISTRATION_ROLE_TEACHER = 'teacher'
REGISTRATION_ROLE_USER = 'user'


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str | None = None


ALLOW = Decision(allowed=True)


def deny(reason: str) -> Decision:
    return Decision(allowed=False, reason=reason)


def require(decision: Decision) -> None:
    if not decision.allowed:
        raise UnauthorizedError(decision.reason or 'Action not allowed.')


def ensure_unique(
    probe: Callable[[], Any],
    own_id: int | None,
    entity: str,
    attribute: str,
    value: object,
) -> None:
    """Raise ``EntityDuplicateError`` if ``probe`` finds a different entity.

    ``probe`` looks the value up and raises ``EntityNotFoundError`` when it
    is free. Finding the entity identified by ``own_id`` is not a duplicate.
    """
    try:
        existing = probe()
    except EntityNotFoundError:
        return

    if own_id is not None and existing.id == own_id:
        return

    raise EntityDuplicateError(entity, attribute, value)


class AuthorizationPolicy:
    def __init__(self, roles: RoleConfig) -> None:
        self.roles = roles

    def has_role(self, user: User, role_type: str) -> bool:
        return user.role.role_type.lower() == role_type.lower()

    def is_admin(self, user: User) -> bool:
        return self.has_role(user, self.roles.admin)

    def can_create_course(self, user: User) -> Decision:
        if self.has_role(user, self.roles.teacher) or self.is_admin(user):
            return ALLOW
        return deny(ONLY_TEACHER_OR_ADMIN_CAN_CREATE_COURSE)

    def can_modify_course(self, course: Course, user: User) -> Decision:
        """``course`` must be the stored course, never a submitted payload."""
        if course.creator.id == user.id or self.is_admin(user):
            return ALLOW
        return deny(ONLY_CREATOR_CAN_MODIFY_A_COURSE)

    def can_delete_course(self, course: Course, user: User) -> Decision:
        return self.can_modify_course(course, user)

    def can_grade(self, course: Course, user: User) -> Decision:
        return self.can_modify_course(course, user)

    def can_update_own_profile(self, update: UserUpdate, user: User) -> Decision:
        if update.email != user.email:
            return deny(EMAIL_UPDATE_EXCEPTION)
        if self.has_role(user, self.roles.pending_teacher):
            return deny(PENDING_VALIDATION_EXCEPTION)
        if update.role != user.role.role_type:
            return deny(ROLE_UPDATE_EXCEPTION)
        return ALLOW

    def can_delete_user(self, target_id: int, user: User) -> Decision:
        if user.id == target_id or self.is_admin(user):
            return ALLOW
        return deny(DELETE_USER_EXCEPTION)

    def can_delete_course_owner(self, target: User, created_courses: Sequence[Course]) -> Decision:
        # Applies to every caller and every target role, admins included.
        if not created_courses:
            return ALLOW
        if self.has_role(target, self.roles.teacher):
            return deny(DELETE_TEACHER_EXCEPTION)
        return deny(DELETE_COURSE_OWNER_EXCEPTION)

    def can_transfer_courses(self, user: User) -> Decision:
        if self.is_admin(user):
            return ALLOW
        return deny(ONLY_ADMIN_CAN_TRANSFER_COURSES)

    def can_receive_courses(self, target: User) -> Decision:
        if self.has_role(target, self.roles.teacher) or self.is_admin(target):
            return ALLOW
        return deny(TRANSFER_TARGET_EXCEPTION)

    def registration_role(self, requested_role: str) -> str:
        """Role type stored for a registration asking for ``requested_role``.

        Teacher applicants start out as pending teachers until an admin
        reviews them.
        """
        normalized = requested_role.lower()
        if normalized == REGISTRATION_ROLE_TEACHER:
            return self.roles.pending_teacher
        if normalized == REGISTRATION_ROLE_USER:
            return self.roles.student
        raise InvalidArgumentError(f'Role {requested_role} does not exist!')
