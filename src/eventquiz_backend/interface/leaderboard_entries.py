from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from sqlalchemy.orm import Session
from eventquiz_backend.interface.base import BaseEntityGet, BaseEntityList, EntityInterface, ListQuery, reject_null, strip_required
from eventquiz_backend.model.quiz import LeaderboardEntry

class LeaderboardEntryCreate(BaseModel):
    quiz_id: str = Field(description="Quiz the entry belongs to")
    participant_name: str = Field(min_length=1, max_length=255, description="Participant display name")
    score: int = Field(0, description="Score")
    position: Optional[int] = Field(None, description="Advisory display position, ties and gaps allowed")
    notes: Optional[str] = Field(None, description="Free text notes")

    @field_validator('participant_name')
    @classmethod
    def validate_participant_name(cls, v):
        return strip_required(v, "Participant name")

class LeaderboardEntryGet(BaseEntityGet):
    id: str
    quiz_id: str
    participant_name: str
    score: int
    position: Optional[int] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class LeaderboardEntryList(LeaderboardEntryGet):
    pass

class LeaderboardEntryUpdate(BaseModel):
    participant_name: Optional[str] = Field(None, min_length=1, max_length=255)
    score: Optional[int] = None
    position: Optional[int] = None
    notes: Optional[str] = None

    @field_validator('participant_name', 'score')
    @classmethod
    def check_not_null(cls, v):
        return reject_null(v)

    @field_validator('participant_name')
    @classmethod
    def validate_participant_name(cls, v):
        return strip_required(v, "Participant name")

class LeaderboardEntryQuery(ListQuery):
    quiz_id: Optional[str] = Field(None, description="Filter by quiz")

def leaderboard_entry_search(db: Session, query, params: Optional[LeaderboardEntryQuery]):
    if params.quiz_id is not None:
        query = query.filter(LeaderboardEntry.quiz_id == params.quiz_id)

    return query.order_by(
        LeaderboardEntry.position.is_(None),
        LeaderboardEntry.position,
        LeaderboardEntry.score.desc(),
    )

class LeaderboardEntryInterface(EntityInterface):
    create = LeaderboardEntryCreate
    get = LeaderboardEntryGet
    list = LeaderboardEntryList
    update = LeaderboardEntryUpdate
    query = LeaderboardEntryQuery
    search = leaderboard_entry_search
    endpoint = "leaderboard-entries"
    model = LeaderboardEntry
