import logging
import re

from errors import ValidationError

logger = logging.getLogger(__name__)

# -------------------- Grading -------------------- #
# Highest matching band wins; compared against the unrounded average.
GRADE_BANDS = [
    (90, 'O'),
    (80, 'A+'),
    (70, 'A'),
    (60, 'B+'),
    (50, 'B'),
    (40, 'C'),
]
FAIL_GRADE = 'F'


def grade_for_average(average: float) -> str:
    for bound, grade in GRADE_BANDS:
        if average >= bound:
            return grade
    return FAIL_GRADE


def calc_grade_summary(marks):
    """
    Compute total, average and grade for a sequence of subject marks.

    Example:
        [100, 100, 100, 100, 100] -> {'total': 500, 'average': 100.0, 'grade': 'O'}
    """
    marks = list(marks)
    if not marks:
        raise ValueError('at least one mark is required')
    total = sum(marks)
    average = total / len(marks)
    return {'total': total, 'average': average, 'grade': grade_for_average(average)}


def _is_mark(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def augment_student(student, subjects):
    """
    Return a copy of a serialized student with total/average/grade attached.

    Records missing a configured mark (older subject layouts, manual inserts)
    get None for all three instead of failing the whole list.
    """
    marks = [student.get(s) for s in subjects]
    if not all(_is_mark(m) for m in marks):
        logger.warning('Student %s has incomplete marks for %s',
                       student.get('registerNumber'), ', '.join(subjects))
        return {**student, 'total': None, 'average': None, 'grade': None}
    return {**student, **calc_grade_summary(marks)}


def sort_newest_first(students):
    # createdAt is an ISO-8601 string once serialized, so it sorts lexically.
    return sorted(students, key=lambda s: s.get('createdAt') or '', reverse=True)


# -------------------- Validation -------------------- #
MIN_MARK = 0
MAX_MARK = 100

MARK_PATTERN = re.compile(r'-?[0-9]+')


def _clean_string(value) -> str:
    return str(value).strip() if value is not None else ''


def parse_mark(value) -> int:
    """
    Coerce a submitted mark to an int in [0, 100].
    Raises ValueError with a user-facing reason if it can't be.
    """
    if isinstance(value, bool):
        raise ValueError('must be a whole number')
    if isinstance(value, int):
        mark = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError('must be a whole number')
        mark = int(value)
    elif isinstance(value, str):
        text = value.strip()
        # int() alone would also take '1_0' and non-ASCII digits
        if not MARK_PATTERN.fullmatch(text):
            raise ValueError('must be a whole number')
        mark = int(text)
    else:
        raise ValueError('must be a whole number')

    if not MIN_MARK <= mark <= MAX_MARK:
        raise ValueError(f'must be between {MIN_MARK} and {MAX_MARK}')
    return mark


def validate_student_payload(payload, subjects):
    """
    Check a create-student request body and return the cleaned record.

    Name and register number must be non-blank and every subject mark must be
    present and parse as a whole number in range. All problems are collected
    into one ValidationError keyed by field.
    """
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object.')

    errors = {}
    cleaned = {}

    for field, label in (('studentName', 'Student name'), ('registerNumber', 'Register number')):
        value = _clean_string(payload.get(field))
        if not value:
            errors[field] = f'{label} is required.'
        else:
            cleaned[field] = value

    for subject in subjects:
        raw = payload.get(subject)
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            errors[subject] = f'{subject} mark is required.'
            continue
        try:
            cleaned[subject] = parse_mark(raw)
        except ValueError as e:
            errors[subject] = f'{subject} mark {e}.'

    if errors:
        missing = any(k not in payload or payload.get(k) in (None, '') for k in errors)
        message = 'Please provide all required fields.' if missing else 'Please correct the highlighted marks.'
        raise ValidationError(message, details=errors)
    return cleaned
