from sqlalchemy.orm import Session

from virtual_teacher import schemas
from virtual_teacher.errors import EntityNotFoundError
from virtual_teacher.models.lecture import Lecture, LectureDescription


class LectureDescriptionStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _get_row(self, lecture_id: int) -> LectureDescription | None:
        return self.db.query(LectureDescription).filter(LectureDescription.lecture_id == lecture_id).first()

    def _expire_parent(self, lecture_id: int) -> None:
        lecture = self.db.get(Lecture, lecture_id)
        if lecture is not None:
            self.db.expire(lecture, ['description'])

    def exists(self, lecture_id: int) -> bool:
        return self._get_row(lecture_id) is not None

    def insert(self, lecture_id: int, text: str) -> None:
        self.db.add(LectureDescription(lecture_id=lecture_id, description=text))
        self.db.flush()
        self._expire_parent(lecture_id)

    def replace(self, lecture_id: int, text: str) -> None:
        row = self._get_row(lecture_id)
        if row is None:
            raise EntityNotFoundError('Lecture description', 'lecture id', lecture_id)
        row.description = text
        self.db.flush()
        self._expire_parent(lecture_id)

    def delete(self, lecture_id: int) -> None:
        row = self._get_row(lecture_id)
        if row is None:
            raise EntityNotFoundError('Lecture description', 'lecture id', lecture_id)
        self.db.delete(row)
        self.db.flush()
        self._expire_parent(lecture_id)


class SqlLectureRepository:
    """Lecture storage on an injected SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.descriptions = LectureDescriptionStore(db)

    def _get_row(self, lecture_id: int) -> Lecture:
        row = self.db.query(Lecture).filter(Lecture.id == lecture_id).first()
        if row is None:
            raise EntityNotFoundError('Lecture', 'id', lecture_id)
        return row

    def get(self, lecture_id: int) -> schemas.Lecture:
        return schemas.Lecture.model_validate(self._get_row(lecture_id))

    def get_all_by_course(self, course_id: int) -> list[schemas.Lecture]:
        rows = self.db.query(Lecture).filter(Lecture.course_id == course_id).order_by(Lecture.id.asc()).all()
        return [schemas.Lecture.model_validate(row) for row in rows]

    def create(self, course_id: int, lecture: schemas.LectureCreate) -> int:
        row = Lecture(
            title=lecture.title,
            video_url=lecture.video_url,
            assignment_url=lecture.assignment_url,
            course_id=course_id,
        )
        self.db.add(row)
        self.db.flush()
        return row.id

    def update(self, lecture: schemas.LectureUpdate) -> None:
        row = self._get_row(lecture.id)
        row.title = lecture.title
        row.video_url = lecture.video_url
        row.assignment_url = lecture.assignment_url
        self.db.flush()

    def delete(self, lecture_id: int) -> int:
        row = self.db.query(Lecture).filter(Lecture.id == lecture_id).first()
        if row is None:
            return 0
        self.db.delete(row)
        self.db.flush()
        return 1
