"""Query builders for members and teams."""

from __future__ import annotations

from typing import Any, ClassVar

from querykit.models.member import Member
from querykit.models.team import Team
from querykit.queries.base import BaseQuery
from querykit.queries.conditions import member_search_builder, member_search_predicate
from querykit.queries.expressions import between, eq, is_absent
from querykit.schemas.member import MemberSearchCondition


class MemberQuery(BaseQuery[Member]):
    """Query builder for Member model.

    Usage:
        members = (
            MemberQuery(db)
            .with_team_columns()
            .search(MemberSearchCondition(team_name="teamB", age_goe=35))
            .order_by("age", "desc")
            .order_by("username", nulls="last")
            .paginate(limit=10, offset=0)
            .all()
        )
    """

    model_class = Member
    ordering_fields: ClassVar[dict[str, Any]] = {
        "id": Member.id,
        "username": Member.username,
        "age": Member.age,
        "team_name": Team.name,
    }

    def by_username(self, username: str | None) -> MemberQuery:
        """Filter by exact username."""
        return self.where(eq(Member.username, username))

    def by_team_name(self, team_name: str | None) -> MemberQuery:
        """Filter by team name, left joining the team when it is not joined yet."""
        return self._joining_team_for(team_name).where(eq(Team.name, team_name))

    def age_between(self, low: int | None, high: int | None) -> MemberQuery:
        return self.where(between(Member.age, low, high))

    def in_team(self) -> MemberQuery:
        """Inner join the member's team; members without one are dropped."""
        return self.join(Member.team)

    def with_team_columns(self) -> MemberQuery:
        """Left join the team so team columns are available to filters and projections."""
        return self.outer_join(Member.team)

    def with_team(self) -> MemberQuery:
        """Fetch join: load ``Member.team`` in the same round trip."""
        return self.fetch_join(Member.team)

    def search(self, condition: MemberSearchCondition) -> MemberQuery:
        """Apply every present field of ``condition`` as an AND-ed filter.

        A team name filter left joins the team unless a join to it exists.
        """
        return self._joining_team_for(condition.team_name).where(member_search_predicate(condition))

    def search_with_builder(self, condition: MemberSearchCondition) -> MemberQuery:
        return self._joining_team_for(condition.team_name).where(member_search_builder(condition).value)

    def _joining_team_for(self, team_name: str | None) -> MemberQuery:
        if is_absent(team_name) or self.has_joined(Team):
            return self
        return self.with_team_columns()


class TeamQuery(BaseQuery[Team]):
    """Query builder for Team model."""

    model_class = Team
    ordering_fields: ClassVar[dict[str, Any]] = {
        "id": Team.id,
        "name": Team.name,
    }

    def by_name(self, name: str | None) -> TeamQuery:
        return self.where(eq(Team.name, name))
