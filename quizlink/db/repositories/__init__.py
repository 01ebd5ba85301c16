from quizlink.db.repositories.participant import participant_repo
from quizlink.db.repositories.quiz_result import quiz_result_repo
from quizlink.db.repositories.quiz_session import quiz_session_repo

__all__ = [
    "participant_repo",
    "quiz_result_repo",
    "quiz_session_repo",
]
