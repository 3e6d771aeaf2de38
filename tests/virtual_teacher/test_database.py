import pytest
from sqlalchemy.exc import IntegrityError

from virtual_teacher.database import unit_of_work
from virtual_teacher.repositories.course_repository import SqlCourseRepository
from virtual_teacher.repositories.user_repository import SqlUserRepository


def test_deleting_course_creator_row_is_rejected_and_rolled_back(db, make_user, make_course) -> None:
    admin = make_user('Admin')
    course = make_course(admin, 'Owned by admin')
    courses = SqlCourseRepository(db)
    users = SqlUserRepository(db, courses)

    with pytest.raises(IntegrityError):
        with unit_of_work(db):
            users.delete(admin.id)

    assert users.get(admin.id).id == admin.id
    assert courses.get(course.id).creator.id == admin.id


def test_unit_of_work_commits_on_success(db, make_user) -> None:
    user = make_user()
    users = SqlUserRepository(db, SqlCourseRepository(db))

    with unit_of_work(db):
        users.update(user.model_copy(update={'first_name': 'Committed'}))
    db.rollback()

    assert users.get(user.id).first_name == 'Committed'
