"""로컬 컬렉션 이름과 퀴즈 상수."""

PARTICIPANTS_COLLECTION = "quizParticipants"
SESSIONS_COLLECTION = "activeQuizSessions"
RESULTS_COLLECTION = "quizResults"
DEVICE_ID_KEY = "deviceId"

POINTS_PER_QUESTION = 10

# 퀴즈 유형별 제한 시간(초)
QUIZ_TIME_LIMITS = {
    "refresh": 120,
    "final": 240,
}
