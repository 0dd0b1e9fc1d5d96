import os
from dotenv import load_dotenv

load_dotenv()

DEFAULT_SUBJECTS = ('tamil', 'english', 'maths', 'science', 'social')

# Stored or derived record fields a subject name would collide with (lowercased).
RESERVED_FIELDS = frozenset({
    '_id', 'studentname', 'registernumber', 'createdat', 'updatedat',
    'total', 'average', 'grade',
})


class ConfigError(RuntimeError):
    """Raised when a required setting is missing or malformed."""


def _required(name):
    value = os.getenv(name, '').strip()
    if not value:
        raise ConfigError(f'{name} must be set in the environment or .env file')
    return value


def _parse_subjects(raw):
    subjects = tuple(s.strip().lower() for s in raw.split(',') if s.strip())
    if not subjects:
        raise ConfigError('SUBJECTS must name at least one subject')
    if len(set(subjects)) != len(subjects):
        raise ConfigError('SUBJECTS must not repeat a subject')
    clashes = sorted(set(subjects) & RESERVED_FIELDS)
    if clashes:
        raise ConfigError(f'SUBJECTS uses reserved field names: {", ".join(clashes)}')
    return subjects


class Config:
    """Settings built once at startup and handed to the app factory."""

    def __init__(self, mongo_uri, gemini_api_key, mongo_db_name='student_marks',
                 gemini_model='gemini-2.0-flash', gemini_timeout=30.0,
                 subjects=DEFAULT_SUBJECTS, port=5000, log_level='INFO'):
        self.MONGO_URI = mongo_uri
        self.MONGO_DB_NAME = mongo_db_name
        self.GEMINI_API_KEY = gemini_api_key
        self.GEMINI_MODEL = gemini_model
        self.GEMINI_TIMEOUT = float(gemini_timeout)
        self.SUBJECTS = tuple(subjects)
        self.PORT = int(port)
        self.LOG_LEVEL = log_level

    @classmethod
    def from_env(cls):
        try:
            port = int(os.getenv('PORT', 5000))
            timeout = float(os.getenv('GEMINI_TIMEOUT', 30))
        except ValueError as e:
            raise ConfigError(f'Invalid numeric setting: {e}') from e

        return cls(
            mongo_uri=_required('MONGO_URI'),
            gemini_api_key=_required('GEMINI_API_KEY'),
            mongo_db_name=os.getenv('MONGO_DB_NAME', 'student_marks'),
            gemini_model=os.getenv('GEMINI_MODEL', 'gemini-2.0-flash'),
            gemini_timeout=timeout,
            subjects=_parse_subjects(os.getenv('SUBJECTS', ','.join(DEFAULT_SUBJECTS))),
            port=port,
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        )
