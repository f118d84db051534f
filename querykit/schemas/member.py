from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MemberBase(BaseModel):
    username: str | None = Field(default=None, max_length=80)
    age: int = Field(default=0, ge=0)


class MemberCreate(MemberBase):
    team_id: int | None = None


class MemberUpdate(BaseModel):
    username: str | None = Field(default=None, max_length=80)
    age: int | None = Field(default=None, ge=0)
    team_id: int | None = None


class MemberRead(MemberBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    team_id: int | None = None


class MemberSearchCondition(BaseModel):
    """Optional search parameters. An unset or blank field adds no constraint."""

    model_config = ConfigDict(extra="forbid")

    username: str | None = None
    team_name: str | None = None
    age_goe: int | None = None
    age_loe: int | None = None


class MemberDto(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    username: str | None = None
    age: int | None = None


class MemberTeamDto(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    member_id: int
    username: str | None = None
    age: int
    team_id: int | None = None
    team_name: str | None = None


class MemberPage(BaseModel):
    items: list[MemberTeamDto] = Field(default_factory=list)
    total: int = 0
    limit: int
    offset: int = 0


class MemberAgeStats(BaseModel):
    count: int = 0
    total_age: int | None = None
    average_age: float | None = None
    max_age: int | None = None
    min_age: int | None = None
