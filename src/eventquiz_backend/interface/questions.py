from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from eventquiz_backend.interface.base import BaseEntityGet, BaseEntityList, EntityInterface, ListQuery, reject_null, strip_required
from eventquiz_backend.model.quiz import Question
from eventquiz_backend.permissions.principal import Principal

class QuestionCreate(BaseModel):
    quiz_id: str = Field(description="Quiz the question belongs to")
    question_text: str = Field(min_length=1, description="Question text")
    correct_answer: str = Field(description="Correct answer")
    option_a: Optional[str] = Field(None, description="Option A")
    option_b: Optional[str] = Field(None, description="Option B")
    option_c: Optional[str] = Field(None, description="Option C")
    option_d: Optional[str] = Field(None, description="Option D")
    question_order: Optional[int] = Field(None, description="Display order, appended when omitted")
    points: int = Field(1, gt=0, description="Point value")

    @field_validator('question_text')
    @classmethod
    def validate_question_text(cls, v):
        return strip_required(v, "Question text")

class QuestionGet(BaseEntityGet):
    id: str
    quiz_id: str
    question_text: str
    correct_answer: str
    option_a: Optional[str] = None
    option_b: Optional[str] = None
    option_c: Optional[str] = None
    option_d: Optional[str] = None
    question_order: int
    points: int

    model_config = ConfigDict(from_attributes=True)

class QuestionList(QuestionGet):
    pass

class QuestionUpdate(BaseModel):
    question_text: Optional[str] = Field(None, min_length=1)
    correct_answer: Optional[str] = None
    option_a: Optional[str] = None
    option_b: Optional[str] = None
    option_c: Optional[str] = None
    option_d: Optional[str] = None
    question_order: Optional[int] = None
    points: Optional[int] = Field(None, gt=0)

    @field_validator('question_text', 'correct_answer', 'question_order', 'points')
    @classmethod
    def check_not_null(cls, v):
        return reject_null(v)

    @field_validator('question_text')
    @classmethod
    def validate_question_text(cls, v):
        return strip_required(v, "Question text")

class QuestionQuery(ListQuery):
    quiz_id: Optional[str] = Field(None, description="Filter by quiz")

def question_search(db: Session, query, params: Optional[QuestionQuery]):
    if params.quiz_id is not None:
        query = query.filter(Question.quiz_id == params.quiz_id)

    return query.order_by(Question.quiz_id, Question.question_order)

def question_pre_create(values: dict, principal: Principal, db: Session):
    if values.get("question_order") is None:
        count = (
            db.query(func.count(Question.id))
            .filter(Question.quiz_id == values["quiz_id"])
            .scalar()
        )
        values["question_order"] = (count or 0) + 1
    return values

class QuestionInterface(EntityInterface):
    create = QuestionCreate
    get = QuestionGet
    list = QuestionList
    update = QuestionUpdate
    query = QuestionQuery
    search = question_search
    endpoint = "questions"
    model = Question
    pre_create = question_pre_create
