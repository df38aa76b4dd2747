from sqlalchemy import (
    Boolean, CheckConstraint, Column, ForeignKey, Index,
    Integer, String, Text, text
)
from sqlalchemy.orm import relationship

from .base import Base, created_at_column, id_column, updated_at_column


class Quiz(Base):
    __tablename__ = 'quiz'
    __table_args__ = (
        Index('idx_quiz_created_by', 'created_by'),
    )

    id = id_column()
    created_at = created_at_column()
    updated_at = updated_at_column()
    title = Column(String(255), nullable=False)
    description = Column(Text)
    # creator cascade: removing a principal removes the quizzes it created
    created_by = Column(ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("true"))

    creator = relationship('User', back_populates='quizzes')
    questions = relationship('Question', back_populates='quiz', cascade='all, delete-orphan', passive_deletes=True, order_by='Question.question_order')
    leaderboard_entries = relationship('LeaderboardEntry', back_populates='quiz', cascade='all, delete-orphan', passive_deletes=True)


class Question(Base):
    __tablename__ = 'question'
    __table_args__ = (
        CheckConstraint('points > 0', name='ck_question_points_positive'),
        Index('idx_question_quiz_id', 'quiz_id'),
        Index('idx_question_order', 'quiz_id', 'question_order'),
    )

    id = id_column()
    created_at = created_at_column()
    updated_at = updated_at_column()
    quiz_id = Column(ForeignKey('quiz.id', ondelete='CASCADE'), nullable=False)
    question_text = Column(Text, nullable=False)
    correct_answer = Column(Text, nullable=False)
    option_a = Column(Text)
    option_b = Column(Text)
    option_c = Column(Text)
    option_d = Column(Text)
    question_order = Column(Integer, nullable=False, default=1, server_default=text("1"))
    points = Column(Integer, nullable=False, default=1, server_default=text("1"))

    quiz = relationship('Quiz', back_populates='questions')


class LeaderboardEntry(Base):
    __tablename__ = 'leaderboard_entry'
    __table_args__ = (
        Index('idx_leaderboard_quiz_id', 'quiz_id'),
        Index('idx_leaderboard_position', 'quiz_id', 'position'),
    )

    id = id_column()
    created_at = created_at_column()
    updated_at = updated_at_column()
    quiz_id = Column(ForeignKey('quiz.id', ondelete='CASCADE'), nullable=False)
    participant_name = Column(String(255), nullable=False)
    score = Column(Integer, nullable=False, default=0, server_default=text("0"))
    # advisory display order, ties and gaps allowed
    position = Column(Integer)
    notes = Column(Text)

    quiz = relationship('Quiz', back_populates='leaderboard_entries')
