import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from virtual_teacher.core import config
from virtual_teacher.core.config import RoleConfig
from virtual_teacher.database import SessionLocal, engine, init_db, unit_of_work
from virtual_teacher.models.role import Role

logger = logging.getLogger(__name__)


def seed_roles(db: Session, roles: RoleConfig) -> None:
    with unit_of_work(db):
        # Role lookups ignore case, so names differing only in case are one role.
        existing = {role_type.lower() for (role_type,) in db.query(Role.role_type).all()}
        for role_type in roles.all():
            if role_type.lower() not in existing:
                db.add(Role(role_type=role_type))
                existing.add(role_type.lower())


def initialize_database(roles: RoleConfig | None = None) -> None:
    config.configure_logging()
    config.validate_runtime_config()

    db = SessionLocal()
    try:
        init_db(bind=engine)
        seed_roles(db, roles or config.load_role_config())
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL.')
        raise
    finally:
        db.close()


if __name__ == '__main__':
    initialize_database()
