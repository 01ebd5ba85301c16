from quizlink.services.persistence import PersistenceService, persistence_service
from quizlink.services.quiz_lifecycle import QuizLifecycleService, quiz_lifecycle_service

__all__ = [
    "PersistenceService",
    "persistence_service",
    "QuizLifecycleService",
    "quiz_lifecycle_service",
]
