import pytest

from virtual_teacher.authorization import (
    ONLY_ADMIN_CAN_TRANSFER_COURSES,
    ONLY_CREATOR_CAN_MODIFY_A_COURSE,
    ONLY_TEACHER_OR_ADMIN_CAN_CREATE_COURSE,
    TRANSFER_TARGET_EXCEPTION,
)
from virtual_teacher.enrollment import EnrollmentState
from virtual_teacher.errors import (
    EntityDuplicateError,
    EntityNotFoundError,
    InvalidArgumentError,
    UnauthorizedError,
)
from virtual_teacher.filters import CourseFilterOptions
from virtual_teacher.ratings import NOT_ENROLLED_RATING_EXCEPTION
from virtual_teacher.repositories.course_repository import CourseDescriptionStore, SqlCourseRepository
from virtual_teacher.schemas import CourseCreate, CourseUpdate, RatingCreate
from virtual_teacher.services.course_service import CourseCatalogService


@pytest.fixture
def service(db, roles) -> CourseCatalogService:
    return CourseCatalogService(db, roles)


def _ids(items) -> list[int]:
    return [item.id for item in items]


def _update(course, **changes) -> CourseUpdate:
    values = {
        'id': course.id,
        'title': course.title,
        'topic_id': course.topic.id,
        'is_published': course.is_published,
        'passing_grade': course.passing_grade,
        'description': course.description.description if course.description else None,
    }
    values.update(changes)
    return CourseUpdate(**values)


def test_teacher_creates_course_with_description(service, make_user, topic_id) -> None:
    teacher = make_user('Teacher')

    course = service.create(
        CourseCreate(title='  Intro  ', topic_id=topic_id, is_published=True, description='  Body  '),
        teacher,
    )

    assert course.title == 'Intro'
    assert course.creator.id == teacher.id
    assert course.description.description == 'Body'
    assert course.rating is None


def test_create_without_description_leaves_it_absent(service, make_user, topic_id) -> None:
    course = service.create(CourseCreate(title='Intro', topic_id=topic_id, description='   '), make_user('Admin'))

    assert course.description is None


def test_student_cannot_create_course(service, make_user, topic_id) -> None:
    with pytest.raises(UnauthorizedError) as exception_info:
        service.create(CourseCreate(title='Intro', topic_id=topic_id), make_user('Student'))

    assert exception_info.value.reason == ONLY_TEACHER_OR_ADMIN_CAN_CREATE_COURSE
    with pytest.raises(EntityNotFoundError):
        service.courses.get_by_title('Intro')


def test_duplicate_title_is_rejected(service, make_user, make_course, topic_id) -> None:
    teacher = make_user('Teacher')
    make_course(teacher, 'Intro')

    with pytest.raises(EntityDuplicateError):
        service.create(CourseCreate(title='Intro', topic_id=topic_id), teacher)


def test_failed_create_rolls_back_course_row(db, roles, make_user, topic_id) -> None:
    class BrokenDescriptionStore(CourseDescriptionStore):
        def insert(self, course_id: int, text: str) -> None:
            raise RuntimeError('description storage unavailable')

    courses = SqlCourseRepository(db)
    courses.descriptions = BrokenDescriptionStore(db)
    service = CourseCatalogService(db, roles, courses=courses)

    with pytest.raises(RuntimeError):
        service.create(CourseCreate(title='Intro', topic_id=topic_id, description='Body'), make_user('Teacher'))

    with pytest.raises(EntityNotFoundError):
        courses.get_by_title('Intro')


def test_update_keeping_own_title_is_not_a_duplicate(service, make_user, make_course) -> None:
    teacher = make_user('Teacher')
    course = make_course(teacher, 'Intro')

    updated = service.update(_update(course, passing_grade=75), teacher)

    assert updated.title == 'Intro'
    assert updated.passing_grade == 75


def test_update_to_other_course_title_is_rejected(service, make_user, make_course) -> None:
    teacher = make_user('Teacher')
    make_course(teacher, 'Intro')
    course = make_course(teacher, 'Advanced')

    with pytest.raises(EntityDuplicateError):
        service.update(_update(course, title='Intro'), teacher)


def test_only_creator_or_admin_can_update(service, make_user, make_course) -> None:
    creator = make_user('Teacher')
    course = make_course(creator, 'Intro')

    with pytest.raises(UnauthorizedError) as exception_info:
        service.update(_update(course, title='Renamed'), make_user('Teacher'))
    assert exception_info.value.reason == ONLY_CREATOR_CAN_MODIFY_A_COURSE
    assert service.get(course.id).title == 'Intro'

    updated = service.update(_update(course, title='Renamed'), make_user('Admin'))
    assert updated.title == 'Renamed'
    assert updated.creator.id == creator.id


@pytest.mark.parametrize(('stored_description', 'new_description'), [('First', 'Second'), ('First', None)])
def test_failed_description_change_rolls_back_course_update(
    db,
    roles,
    make_user,
    make_course,
    stored_description: str,
    new_description: str | None,
) -> None:
    class BrokenDescriptionStore(CourseDescriptionStore):
        def replace(self, course_id: int, text: str) -> None:
            raise RuntimeError('description storage unavailable')

        def delete(self, course_id: int) -> None:
            raise RuntimeError('description storage unavailable')

    teacher = make_user('Teacher')
    course = make_course(teacher, 'Intro', description=stored_description)
    courses = SqlCourseRepository(db)
    courses.descriptions = BrokenDescriptionStore(db)
    service = CourseCatalogService(db, roles, courses=courses)

    with pytest.raises(RuntimeError):
        service.update(_update(course, title='Renamed', passing_grade=90, description=new_description), teacher)

    stored = service.get(course.id)
    assert stored.title == 'Intro'
    assert stored.passing_grade == 60
    assert stored.description.description == stored_description


def test_update_reconciles_description(service, make_user, make_course) -> None:
    teacher = make_user('Teacher')
    course = make_course(teacher, 'Intro', description='First')

    cleared = service.update(_update(course, description=None), teacher)
    assert cleared.description is None

    added = service.update(_update(course, description='Second'), teacher)
    assert added.description.description == 'Second'

    replaced = service.update(_update(course, description='Third'), teacher)
    assert replaced.description.description == 'Third'
    assert service.courses.descriptions.exists(course.id)


def test_delete_course_removes_dependents(service, make_user, make_course) -> None:
    teacher = make_user('Teacher')
    student = make_user()
    course = make_course(teacher, 'Intro', description='Body', ratings=(4,))
    service.enroll(course.id, student)

    with pytest.raises(UnauthorizedError):
        service.delete(course.id, make_user('Teacher'))

    service.delete(course.id, teacher)

    with pytest.raises(EntityNotFoundError):
        service.get(course.id)
    assert service.ongoing_courses(student.id) == []
    assert service.get_ratings(course.id) == []


def test_get_all_applies_filter_options(service, make_user, make_course) -> None:
    teacher = make_user('Teacher')
    rated = make_course(teacher, 'Rated', ratings=(4, 5))
    unrated = make_course(teacher, 'Unrated')
    draft = make_course(teacher, 'Draft', is_published=False)

    assert _ids(service.get_all()) == [rated.id, unrated.id, draft.id]
    assert _ids(service.get_all(CourseFilterOptions(min_rating=0))) == [rated.id, unrated.id, draft.id]
    assert _ids(service.get_all(CourseFilterOptions(min_rating=1))) == [rated.id]
    assert _ids(service.get_all(CourseFilterOptions(is_published=True, sort_by='title', sort_order='desc'))) == [
        unrated.id,
        rated.id,
    ]
    assert service.get_all(CourseFilterOptions(min_rating=1))[0].rating == pytest.approx(4.5)
    assert service.published_count() == 2


def test_enrollment_lifecycle(service, make_user, make_course) -> None:
    student = make_user()
    course = make_course(make_user('Teacher'), 'Intro')

    service.enroll(course.id, student)
    assert service.enrollment_state(student.id, course.id) is EnrollmentState.ONGOING
    assert _ids(service.courses_by_user(student.id)) == [course.id]
    assert _ids(service.students_enrolled(course.id)) == [student.id]

    with pytest.raises(EntityDuplicateError):
        service.enroll(course.id, student)

    service.complete(course.id, student)
    assert service.enrollment_state(student.id, course.id) is EnrollmentState.COMPLETED
    assert service.courses_by_user(student.id) == []
    assert _ids(service.completed_courses(student.id)) == [course.id]


def test_enroll_in_unpublished_course_is_rejected(service, make_user, make_course) -> None:
    student = make_user()
    course = make_course(make_user('Teacher'), 'Draft', is_published=False)

    with pytest.raises(UnauthorizedError):
        service.enroll(course.id, student)

    assert service.enrollment_state(student.id, course.id) is EnrollmentState.UNENROLLED


def test_remove_student_rules(service, make_user, make_course) -> None:
    creator = make_user('Teacher')
    course = make_course(creator, 'Intro')
    first = make_user()
    second = make_user()
    service.enroll(course.id, first)
    service.enroll(course.id, second)

    with pytest.raises(UnauthorizedError):
        service.remove_student(course.id, second.id, first)
    with pytest.raises(UnauthorizedError):
        service.remove_student(course.id, second.id, make_user('Teacher'))

    service.remove_student(course.id, first.id, first)
    service.remove_student(course.id, second.id, creator)

    assert service.students_enrolled(course.id) == []


def test_rating_requires_enrollment_and_valid_range(service, make_user, make_course) -> None:
    student = make_user()
    course = make_course(make_user('Teacher'), 'Intro')

    with pytest.raises(UnauthorizedError) as exception_info:
        service.rate(course.id, RatingCreate(rating=4), student)
    assert exception_info.value.reason == NOT_ENROLLED_RATING_EXCEPTION

    service.enroll(course.id, student)
    with pytest.raises(InvalidArgumentError):
        service.rate(course.id, RatingCreate(rating=6), student)

    assert service.average_rating(course.id) is None
    assert service.get(course.id).rating is None


def test_ratings_append_and_average(service, make_user, make_course) -> None:
    student = make_user()
    course = make_course(make_user('Teacher'), 'Intro')
    service.enroll(course.id, student)

    service.rate(course.id, RatingCreate(rating=5, comment='Great'), student)
    service.complete(course.id, student)
    service.rate(course.id, RatingCreate(rating=2), student)

    assert [rating.rating for rating in service.get_ratings(course.id)] == [5, 2]
    assert service.average_rating(course.id) == pytest.approx(3.5)
    assert service.get(course.id).rating == pytest.approx(3.5)


def test_admin_transfers_teacher_courses(service, make_user, make_course) -> None:
    source = make_user('Teacher')
    target = make_user('Teacher')
    first = make_course(source, 'First')
    second = make_course(source, 'Second')

    transferred = service.transfer_teacher_courses(source.id, target.id, make_user('Admin'))

    assert transferred == 2
    assert service.get_by_creator(source.id) == []
    assert _ids(service.get_by_creator(target.id)) == [first.id, second.id]
    assert service.get(first.id).creator.id == target.id


@pytest.mark.parametrize(('actor_role', 'target_role', 'reason'), [
    ('Teacher', 'Teacher', ONLY_ADMIN_CAN_TRANSFER_COURSES),
    ('Admin', 'Student', TRANSFER_TARGET_EXCEPTION),
])
def test_transfer_denials(service, make_user, make_course, actor_role, target_role, reason) -> None:
    source = make_user('Teacher')
    course = make_course(source, 'Intro')
    target = make_user(target_role)

    with pytest.raises(UnauthorizedError) as exception_info:
        service.transfer_teacher_courses(source.id, target.id, make_user(actor_role))

    assert exception_info.value.reason == reason
    assert service.get(course.id).creator.id == source.id
