from sqlalchemy.orm import Session

from virtual_teacher import schemas
from virtual_teacher.errors import EntityNotFoundError
from virtual_teacher.models.lecture import Solution


class SqlSolutionRepository:
    """Submitted assignment storage on an injected SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _get_row(self, user_id: int, lecture_id: int) -> Solution:
        row = self.db.query(Solution).filter(
            Solution.user_id == user_id,
            Solution.lecture_id == lecture_id,
        ).first()
        if row is None:
            raise EntityNotFoundError('Solution', 'user and lecture', f'{user_id}/{lecture_id}')
        return row

    def get_all_by_lecture(self, lecture_id: int) -> list[schemas.Solution]:
        rows = self.db.query(Solution).filter(Solution.lecture_id == lecture_id).order_by(Solution.id.asc()).all()
        return [schemas.Solution.model_validate(row) for row in rows]

    def get_all_by_user(self, user_id: int) -> list[schemas.Solution]:
        rows = self.db.query(Solution).filter(Solution.user_id == user_id).order_by(Solution.id.asc()).all()
        return [schemas.Solution.model_validate(row) for row in rows]

    def get_solution(self, user_id: int, lecture_id: int) -> schemas.Solution:
        return schemas.Solution.model_validate(self._get_row(user_id, lecture_id))

    def add_solution(self, user_id: int, lecture_id: int, file_url: str) -> None:
        self.db.add(Solution(user_id=user_id, lecture_id=lecture_id, file_url=file_url))
        self.db.flush()

    def update_solution_url(self, user_id: int, lecture_id: int, file_url: str) -> None:
        row = self._get_row(user_id, lecture_id)
        row.file_url = file_url
        row.grade = None
        self.db.flush()

    def add_grade(self, user_id: int, lecture_id: int, grade: float) -> None:
        row = self._get_row(user_id, lecture_id)
        row.grade = grade
        self.db.flush()
