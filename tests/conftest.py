import itertools
import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')

from virtual_teacher.core.config import RoleConfig  # noqa: E402
from virtual_teacher.database import Base, init_db  # noqa: E402
from virtual_teacher.main import seed_roles  # noqa: E402
from virtual_teacher.models.course import Course as CourseRow  # noqa: E402
from virtual_teacher.models.course import CourseDescription, Rating  # noqa: E402
from virtual_teacher.models.role import Role  # noqa: E402
from virtual_teacher.models.topic import Topic  # noqa: E402
from virtual_teacher.models.user import User as UserRow  # noqa: E402
from virtual_teacher.repositories.course_repository import SqlCourseRepository  # noqa: E402
from virtual_teacher.repositories.user_repository import SqlUserRepository  # noqa: E402


@pytest.fixture
def roles() -> RoleConfig:
    return RoleConfig()


@pytest.fixture
def db(roles):
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    init_db(bind=engine)

    session = testing_session_local()
    seed_roles(session, roles)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def topic_id(db) -> int:
    topic = Topic(name='Programming')
    db.add(topic)
    db.commit()
    return topic.id


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make_user(role_type: str = 'Student', email: str | None = None, first_name: str = 'Test', last_name: str = 'User'):
        number = next(counter)
        role = db.query(Role).filter(Role.role_type == role_type).one()
        row = UserRow(
            email=email or f'user{number}@example.com',
            password='hashed-password',
            first_name=first_name,
            last_name=last_name,
            role_id=role.id,
        )
        db.add(row)
        db.commit()
        return SqlUserRepository(db, SqlCourseRepository(db)).get(row.id)

    return _make_user


@pytest.fixture
def make_course(db, topic_id):
    def _make_course(creator, title: str, is_published: bool = True, description: str | None = None, ratings=()):
        row = CourseRow(
            title=title,
            topic_id=topic_id,
            creator_id=creator.id,
            is_published=is_published,
            passing_grade=60,
        )
        db.add(row)
        db.flush()
        if description is not None:
            db.add(CourseDescription(course_id=row.id, description=description))
        for value in ratings:
            db.add(Rating(course_id=row.id, user_id=creator.id, rating=value))
        db.commit()
        return SqlCourseRepository(db).get(row.id)

    return _make_course
