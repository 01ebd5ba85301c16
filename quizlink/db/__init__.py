from quizlink.db.connection import ensure_schema, get_session, make_engine
from quizlink.db.local_store import LocalStore
from quizlink.db.models import ParticipantRow, QuizResultRow, QuizSessionRow
from quizlink.db.remote_store import RemoteNotConfiguredError, RemoteStore, RemoteUnavailableError

__all__ = [
    "ensure_schema",
    "get_session",
    "make_engine",
    "LocalStore",
    "ParticipantRow",
    "QuizResultRow",
    "QuizSessionRow",
    "RemoteNotConfiguredError",
    "RemoteStore",
    "RemoteUnavailableError",
]
