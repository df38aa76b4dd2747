"""Helpers shared by the test modules."""

from eventquiz_backend.model.quiz import LeaderboardEntry, Question, Quiz
from eventquiz_backend.permissions.auth import create_access_token
from eventquiz_backend.permissions.principal import Principal

TEST_JWT_SECRET = "test-jwt-secret"
TEST_IDENTITY_SECRET = "test-identity-secret"


def principal_of(user) -> Principal:
    return Principal(user_id=user.id, email=user.email)


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


def make_quiz(db, creator, title="Quiz", is_active=True, questions=0, entries=0) -> Quiz:
    """Insert a quiz with children directly, bypassing authorization."""
    quiz = Quiz(title=title, created_by=creator.id, is_active=is_active)
    db.add(quiz)
    db.flush()
    for i in range(questions):
        db.add(Question(quiz_id=quiz.id, question_text=f"Question {i + 1}", correct_answer="a", question_order=i + 1))
    for i in range(entries):
        db.add(LeaderboardEntry(quiz_id=quiz.id, participant_name=f"Team {i + 1}", score=10 * i, position=i + 1))
    db.commit()
    db.refresh(quiz)
    return quiz
