from __future__ import annotations

import builtins

from sqlalchemy import func
from sqlalchemy.orm import Session

from querykit.config import settings
from querykit.logging import get_logger
from querykit.models.member import Member
from querykit.models.team import Team
from querykit.queries.members import MemberQuery
from querykit.queries.projections import Projections
from querykit.schemas.member import (
    MemberAgeStats,
    MemberCreate,
    MemberDto,
    MemberPage,
    MemberRead,
    MemberSearchCondition,
    MemberTeamDto,
    MemberUpdate,
)

logger = get_logger(__name__)

member_team_projection = Projections.constructor(
    MemberTeamDto,
    member_id=Member.id,
    username=Member.username,
    age=Member.age,
    team_id=Team.id,
    team_name=Team.name,
)


class MemberRepository:
    """Finder and write operations for members.

    Every method runs inside the caller's session; committing is left to the
    surrounding transaction (see ``querykit.db.transaction``).
    """

    @staticmethod
    def save(db: Session, payload: MemberCreate | Member) -> Member:
        member = payload if isinstance(payload, Member) else Member(**payload.model_dump())
        db.add(member)
        db.flush()
        return member

    @staticmethod
    def find_by_id(db: Session, member_id: int) -> Member | None:
        return db.get(Member, member_id)

    @staticmethod
    def get(db: Session, member_id: int) -> Member:
        return MemberQuery(db).by_id(member_id).one()

    @staticmethod
    def read(db: Session, member_id: int) -> MemberRead:
        return MemberRead.model_validate(MemberRepository.get(db, member_id))

    @staticmethod
    def find_all(db: Session) -> builtins.list[Member]:
        return MemberQuery(db).order_by("id").all()

    @staticmethod
    def find_by_username(db: Session, username: str | None) -> builtins.list[Member]:
        return MemberQuery(db).where(Member.username == username).order_by("id").all()

    @staticmethod
    def update(db: Session, member_id: int, payload: MemberUpdate) -> Member:
        member = MemberRepository.get(db, member_id)
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(member, field, value)
        db.flush()
        return member

    @staticmethod
    def delete(db: Session, member_id: int) -> None:
        member = MemberRepository.get(db, member_id)
        db.delete(member)
        db.flush()

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    @staticmethod
    def search(db: Session, condition: MemberSearchCondition) -> builtins.list[MemberTeamDto]:
        """Members matching every present field of ``condition``, ordered by id."""
        rows = (
            MemberQuery(db)
            .with_team_columns()
            .search(condition)
            .order_by("id")
            .project(member_team_projection)
        )
        logger.debug(
            "member_search condition=%s rows=%s",
            condition.model_dump(exclude_none=True),
            len(rows),
        )
        return rows

    @staticmethod
    def search_by_builder(db: Session, condition: MemberSearchCondition) -> builtins.list[MemberTeamDto]:
        return (
            MemberQuery(db)
            .with_team_columns()
            .search_with_builder(condition)
            .order_by("id")
            .project(member_team_projection)
        )

    @staticmethod
    def search_page(
        db: Session,
        condition: MemberSearchCondition,
        limit: int | None = None,
        offset: int = 0,
    ) -> MemberPage:
        if limit is None:
            limit = settings.query_default_limit
        filtered = MemberQuery(db).with_team_columns().search(condition)
        items = filtered.order_by("id").paginate(limit=limit, offset=offset).project(member_team_projection)
        return MemberPage(items=items, total=filtered.count(), limit=limit, offset=offset)

    # -------------------------------------------------------------------------
    # Projections and aggregates
    # -------------------------------------------------------------------------

    @staticmethod
    def find_dtos(db: Session, strategy: str = "constructor") -> builtins.list[MemberDto]:
        """Username and age of every member, populated with the named strategy."""
        projection = Projections.by_strategy(
            strategy,
            MemberDto,
            username=Member.username,
            age=Member.age,
        )
        return MemberQuery(db).order_by("id").project(projection)

    @staticmethod
    def age_statistics(db: Session) -> MemberAgeStats:
        row = MemberQuery(db).aggregate(
            func.count(Member.id),
            func.sum(Member.age),
            func.avg(Member.age),
            func.max(Member.age),
            func.min(Member.age),
        )
        count, total, average, oldest, youngest = row
        return MemberAgeStats(
            count=count,
            total_age=total,
            average_age=average,
            max_age=oldest,
            min_age=youngest,
        )

    # -------------------------------------------------------------------------
    # Bulk writes
    # -------------------------------------------------------------------------

    @staticmethod
    def bulk_rename_younger_than(db: Session, age: int, username: str) -> int:
        """Rename every member younger than ``age``; members already loaded stay stale."""
        return MemberQuery(db).where(Member.age < age).update({Member.username: username})

    @staticmethod
    def bulk_add_age(db: Session, amount: int = 1) -> int:
        return MemberQuery(db).update({Member.age: Member.age + amount})

    @staticmethod
    def bulk_delete_older_than(db: Session, age: int) -> int:
        return MemberQuery(db).where(Member.age > age).delete()


members = MemberRepository()
