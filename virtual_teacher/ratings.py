from collections.abc import Iterable

from virtual_teacher.core import config
from virtual_teacher.errors import InvalidArgumentError, UnauthorizedError
from virtual_teacher.schemas import Enrollment, Rating

NOT_ENROLLED_RATING_EXCEPTION = 'Only users enrolled in the course can rate it.'


class RatingAggregator:
    """Average rating of a course and the checks a new rating must pass.

    Ratings are append-only: rating the same course again adds another row
    and both count towards the average.
    """

    def __init__(self, minimum: int = config.RATING_MIN, maximum: int = config.RATING_MAX) -> None:
        self.minimum = minimum
        self.maximum = maximum

    def average(self, ratings: Iterable[Rating]) -> float | None:
        values = [rating.rating for rating in ratings]
        if not values:
            return None
        return sum(values) / len(values)

    def validate(self, value: float, enrollment: Enrollment | None) -> None:
        if not self.minimum <= value <= self.maximum:
            raise InvalidArgumentError(f'Rating must be between {self.minimum} and {self.maximum}.')

        if enrollment is None:
            raise UnauthorizedError(NOT_ENROLLED_RATING_EXCEPTION)
