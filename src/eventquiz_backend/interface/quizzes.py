from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from sqlalchemy.orm import Session
from eventquiz_backend.interface.base import BaseEntityGet, BaseEntityList, EntityInterface, ListQuery, reject_null, strip_required
from eventquiz_backend.model.quiz import Quiz
from eventquiz_backend.permissions.principal import Principal

class QuizCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255, description="Quiz title")
    description: Optional[str] = Field(None, description="Quiz description")
    is_active: bool = Field(True, description="Visible to everyone while active")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return strip_required(v, "Title")

class QuizGet(BaseEntityGet):
    id: str = Field(description="Quiz unique identifier")
    title: str = Field(description="Quiz title")
    description: Optional[str] = Field(None, description="Quiz description")
    created_by: str = Field(description="Principal that created the quiz")
    is_active: bool = Field(description="Visible to everyone while active")

    model_config = ConfigDict(from_attributes=True)

class QuizList(BaseEntityList):
    id: str = Field(description="Quiz unique identifier")
    title: str = Field(description="Quiz title")
    description: Optional[str] = Field(None, description="Quiz description")
    is_active: bool = Field(description="Visible to everyone while active")

    model_config = ConfigDict(from_attributes=True)

class QuizUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255, description="Quiz title")
    description: Optional[str] = Field(None, description="Quiz description")
    is_active: Optional[bool] = Field(None, description="Visible to everyone while active")

    @field_validator('title', 'is_active')
    @classmethod
    def check_not_null(cls, v):
        return reject_null(v)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return strip_required(v, "Title")

class QuizQuery(ListQuery):
    title: Optional[str] = Field(None, description="Filter by title")
    is_active: Optional[bool] = Field(None, description="Filter by active flag")

def quiz_search(db: Session, query, params: Optional[QuizQuery]):
    if params.title is not None:
        query = query.filter(Quiz.title.ilike(f"%{params.title}%"))
    if params.is_active is not None:
        query = query.filter(Quiz.is_active == params.is_active)

    return query.order_by(Quiz.created_at.desc())

def quiz_pre_create(values: dict, principal: Principal, db: Session):
    # the creator is always the caller and never taken from the payload
    values["created_by"] = principal.user_id
    return values

class QuizInterface(EntityInterface):
    create = QuizCreate
    get = QuizGet
    list = QuizList
    update = QuizUpdate
    query = QuizQuery
    search = quiz_search
    endpoint = "quizzes"
    model = Quiz
    pre_create = quiz_pre_create
