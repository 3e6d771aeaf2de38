from sqlalchemy import func
from sqlalchemy.orm import Session

from virtual_teacher import schemas
from virtual_teacher.errors import EntityNotFoundError
from virtual_teacher.filters import CourseFilterOptions, filter_courses
from virtual_teacher.models.course import Course, CourseDescription, Enrollment, Rating
from virtual_teacher.models.user import User


class CourseDescriptionStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _get_row(self, course_id: int) -> CourseDescription | None:
        return self.db.query(CourseDescription).filter(CourseDescription.course_id == course_id).first()

    def _expire_parent(self, course_id: int) -> None:
        # Keep an already loaded course from serving its old description.
        course = self.db.get(Course, course_id)
        if course is not None:
            self.db.expire(course, ['description'])

    def exists(self, course_id: int) -> bool:
        return self._get_row(course_id) is not None

    def insert(self, course_id: int, text: str) -> None:
        self.db.add(CourseDescription(course_id=course_id, description=text))
        self.db.flush()
        self._expire_parent(course_id)

    def replace(self, course_id: int, text: str) -> None:
        row = self._get_row(course_id)
        if row is None:
            raise EntityNotFoundError('Course description', 'course id', course_id)
        row.description = text
        self.db.flush()
        self._expire_parent(course_id)

    def delete(self, course_id: int) -> None:
        row = self._get_row(course_id)
        if row is None:
            raise EntityNotFoundError('Course description', 'course id', course_id)
        self.db.delete(row)
        self.db.flush()
        self._expire_parent(course_id)


class SqlCourseRepository:
    """Course storage on an injected SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.descriptions = CourseDescriptionStore(db)

    def _average_ratings(self, course_ids: list[int]) -> dict[int, float]:
        if not course_ids:
            return {}

        rows = self.db.query(Rating.course_id, func.avg(Rating.rating)).filter(
            Rating.course_id.in_(course_ids),
        ).group_by(Rating.course_id).all()

        return {course_id: float(average) for course_id, average in rows}

    def _to_domain(self, rows: list[Course]) -> list[schemas.Course]:
        averages = self._average_ratings([row.id for row in rows])
        return [
            schemas.Course.model_validate(row).model_copy(update={'rating': averages.get(row.id)})
            for row in rows
        ]

    def _get_row(self, course_id: int) -> Course:
        row = self.db.query(Course).filter(Course.id == course_id).first()
        if row is None:
            raise EntityNotFoundError('Course', 'id', course_id)
        return row

    def get(self, course_id: int) -> schemas.Course:
        return self._to_domain([self._get_row(course_id)])[0]

    def get_by_title(self, title: str) -> schemas.Course:
        row = self.db.query(Course).filter(Course.title == title).first()
        if row is None:
            raise EntityNotFoundError('Course', 'title', title)
        return self._to_domain([row])[0]

    def get_all(self) -> list[schemas.Course]:
        return self._to_domain(self.db.query(Course).order_by(Course.id.asc()).all())

    def get_filtered(self, options: CourseFilterOptions) -> list[schemas.Course]:
        return filter_courses(self.get_all(), options)

    def get_by_creator(self, creator_id: int) -> list[schemas.Course]:
        rows = self.db.query(Course).filter(Course.creator_id == creator_id).order_by(Course.id.asc()).all()
        return self._to_domain(rows)

    def get_by_user_state(self, user_id: int, ongoing: bool) -> list[schemas.Course]:
        rows = self.db.query(Course).join(Enrollment, Enrollment.course_id == Course.id).filter(
            Enrollment.user_id == user_id,
            Enrollment.ongoing == ongoing,
        ).order_by(Course.id.asc()).all()
        return self._to_domain(rows)

    def create(self, course: schemas.CourseCreate, creator_id: int) -> int:
        row = Course(
            title=course.title,
            topic_id=course.topic_id,
            start_date=course.start_date,
            creator_id=creator_id,
            is_published=course.is_published,
            passing_grade=course.passing_grade,
        )
        self.db.add(row)
        self.db.flush()
        return row.id

    def update(self, course: schemas.CourseUpdate) -> None:
        row = self._get_row(course.id)
        row.title = course.title
        row.topic_id = course.topic_id
        row.start_date = course.start_date
        row.is_published = course.is_published
        row.passing_grade = course.passing_grade
        self.db.flush()

    def delete(self, course_id: int) -> None:
        self.db.delete(self._get_row(course_id))
        self.db.flush()

    def transfer_teacher_courses(self, from_teacher_id: int, to_teacher_id: int) -> int:
        transferred = self.db.query(Course).filter(Course.creator_id == from_teacher_id).update(
            {Course.creator_id: to_teacher_id},
            synchronize_session='fetch',
        )
        self.db.flush()
        return transferred

    def published_count(self) -> int:
        return self.db.query(func.count(Course.id)).filter(Course.is_published.is_(True)).scalar() or 0

    def rate(self, course_id: int, user_id: int, rating: float, comment: str | None) -> None:
        self.db.add(Rating(course_id=course_id, user_id=user_id, rating=rating, comment=comment))
        self.db.flush()

    def get_ratings(self, course_id: int) -> list[schemas.Rating]:
        rows = self.db.query(Rating).filter(Rating.course_id == course_id).order_by(Rating.id.asc()).all()
        return [schemas.Rating.model_validate(row) for row in rows]

    def _enrollment_query(self, user_id: int, course_id: int):
        return self.db.query(Enrollment).filter(
            Enrollment.user_id == user_id,
            Enrollment.course_id == course_id,
        )

    def get_enrollment(self, user_id: int, course_id: int) -> schemas.Enrollment | None:
        row = self._enrollment_query(user_id, course_id).first()
        if row is None:
            return None
        return schemas.Enrollment.model_validate(row)

    def add_enrollment(self, user_id: int, course_id: int) -> None:
        self.db.add(Enrollment(user_id=user_id, course_id=course_id, ongoing=True))
        self.db.flush()

    def set_enrollment_ongoing(self, user_id: int, course_id: int, ongoing: bool) -> int:
        updated = self._enrollment_query(user_id, course_id).update(
            {Enrollment.ongoing: ongoing},
            synchronize_session='fetch',
        )
        self.db.flush()
        return updated

    def delete_enrollment(self, user_id: int, course_id: int) -> int:
        deleted = self._enrollment_query(user_id, course_id).delete(synchronize_session='fetch')
        self.db.flush()
        return deleted

    def get_enrolled_users(self, course_id: int) -> list[schemas.User]:
        rows = self.db.query(User).join(Enrollment, Enrollment.user_id == User.id).filter(
            Enrollment.course_id == course_id,
        ).order_by(User.id.asc()).all()
        return [schemas.User.model_validate(row) for row in rows]
