from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SECTION = "default"

# Records written by older clients may hold fractional scores
Number = Union[int, float]


def normalize_section(value: Optional[str]) -> str:
    """Empty or missing sections fall back to "default"."""
    if not value:
        return DEFAULT_SECTION
    # Section names become keys of the stored `scores` sub-document
    if "." in value or value.startswith("$"):
        raise ValueError("section must not contain '.' or start with '$'")
    return value


class Question(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(alias="q")
    options: List[str]
    answer: str


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    username: str
    password: Optional[str] = None
    scores: Dict[str, Number] = Field(default_factory=dict)


class LoginRequest(BaseModel):
    username: str
    password: str


class SubmitRequest(BaseModel):
    username: str
    answers: Optional[List[Any]] = None
    section: Optional[str] = Field(default=None, validate_default=True)
    score: Optional[int] = None

    @field_validator("section")
    @classmethod
    def check_section(cls, v: Optional[str]) -> str:
        return normalize_section(v)

    @field_validator("score", mode="before")
    @classmethod
    def numeric_score_only(cls, v: Any) -> Optional[int]:
        # Anything that isn't a JSON number is ignored and the answers get graded
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return None
        if isinstance(v, float) and not v.is_integer():
            raise ValueError("score must be a whole number")
        if v < 0:
            raise ValueError("score must not be negative")
        return int(v)


class ScoreResult(BaseModel):
    score: Number


class LeaderboardEntry(BaseModel):
    username: str
    score: Number


class Health(BaseModel):
    ok: bool = True
    db: str
