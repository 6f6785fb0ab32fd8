from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class RecordModel(BaseModel):
    """
    Base for uploaded records.

    Uploads are validated in strict mode (see store.decode_users), so values
    must already have the declared JSON type: "950" is not a score.
    Missing keys and explicit nulls both fall back to the field default, so
    documents that serialize empty lists as null load as empty lists.
    Unknown keys are ignored.
    """

    @model_validator(mode="before")
    @classmethod
    def _nulls_to_defaults(cls, data: Any) -> Any:
        if data is None:
            return {}
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class Project(RecordModel):
    name: str = ""
    completed: bool = False


class Team(RecordModel):
    name: str = ""
    leader: bool = False
    projects: List[Project] = Field(default_factory=list)


class LogEntry(RecordModel):
    date: str = Field("", description="Day granularity, e.g. 2024-01-01")
    action: str = ""


class User(RecordModel):
    id: str = ""
    name: str = ""
    age: int = 0
    score: int = 0
    active: bool = False
    country: str = ""
    team: Team = Field(default_factory=Team)
    logs: List[LogEntry] = Field(default_factory=list)


# Derived views are serialized with camelCase keys.


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CountryRank(CamelModel):
    country: str
    count: int


class TeamInsight(CamelModel):
    name: str
    member_count: int = 0
    leader_names: List[str] = Field(default_factory=list)
    finished_project_names: List[str] = Field(default_factory=list)
    active_member_count: int = 0
    percent_active: float = 0.0


class DailyActiveCount(CamelModel):
    date: str
    count: int = 0


class EvaluationRecord(CamelModel):
    path: str
    response_success: bool
    duration_ms: Optional[int] = None
    valid_json: bool = Field(alias="validJSON")


# Response envelopes


class IngestResponse(CamelModel):
    message: str
    duration_ms: int


class EliteUsersResponse(CamelModel):
    users: List[User]
    duration_ms: int
    count: int


class TopCountriesResponse(CamelModel):
    countries: List[CountryRank]
    duration_ms: int


class TeamInsightsResponse(CamelModel):
    teams: List[TeamInsight]
    duration_ms: int


class ActiveUsersPerDayResponse(CamelModel):
    days: List[DailyActiveCount]
    duration_ms: int


class EvaluationResponse(BaseModel):
    evaluation: List[EvaluationRecord]
