from __future__ import annotations

import builtins

from sqlalchemy import func
from sqlalchemy.orm import Session

from querykit.models.member import Member
from querykit.models.team import Team
from querykit.queries.members import MemberQuery, TeamQuery
from querykit.schemas.team import TeamCreate, TeamRead


class TeamRepository:
    @staticmethod
    def save(db: Session, payload: TeamCreate | Team) -> Team:
        team = payload if isinstance(payload, Team) else Team(**payload.model_dump())
        db.add(team)
        db.flush()
        return team

    @staticmethod
    def get(db: Session, team_id: int) -> Team:
        return TeamQuery(db).by_id(team_id).one()

    @staticmethod
    def read(db: Session, team_id: int) -> TeamRead:
        return TeamRead.model_validate(TeamRepository.get(db, team_id))

    @staticmethod
    def find_by_name(db: Session, name: str) -> Team | None:
        return TeamQuery(db).where(Team.name == name).one_or_none()

    @staticmethod
    def average_age_by_team(db: Session) -> builtins.list[tuple[str, float]]:
        """Average member age per team name, ordered by team name.

        Members without a team are left out.
        """
        rows = (
            MemberQuery(db)
            .in_team()
            .select(Team.name, func.avg(Member.age))
            .group_by(Team.name)
            .order_by(Team.name)
            .all()
        )
        return [(name, float(average)) for name, average in rows]


teams = TeamRepository()
