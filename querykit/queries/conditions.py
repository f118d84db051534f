"""Turn a ``MemberSearchCondition`` into a single filter.

Each field maps to one optional predicate; absent fields contribute nothing.
The present predicates are AND-ed, so an empty condition matches every row.
"""

from __future__ import annotations

from querykit.errors import InvalidConditionError
from querykit.models.member import Member
from querykit.models.team import Team
from querykit.queries.expressions import Predicate, PredicateBuilder, all_of, eq, goe, is_absent, loe
from querykit.schemas.member import MemberSearchCondition


def username_eq(username: str | None) -> Predicate | None:
    return eq(Member.username, username)


def team_name_eq(team_name: str | None) -> Predicate | None:
    return eq(Team.name, team_name)


def age_goe(age: int | None) -> Predicate | None:
    return goe(Member.age, age)


def age_loe(age: int | None) -> Predicate | None:
    return loe(Member.age, age)


def member_search_predicates(condition: MemberSearchCondition) -> list[Predicate]:
    candidates = [
        username_eq(condition.username),
        team_name_eq(condition.team_name),
        age_goe(condition.age_goe),
        age_loe(condition.age_loe),
    ]
    return [predicate for predicate in candidates if predicate is not None]


def member_search_predicate(condition: MemberSearchCondition) -> Predicate | None:
    return all_of(*member_search_predicates(condition))


def member_search_builder(condition: MemberSearchCondition) -> PredicateBuilder:
    """Same filter as ``member_search_predicate``, accumulated field by field."""
    builder = PredicateBuilder()
    if not is_absent(condition.username):
        builder.and_(Member.username == condition.username)
    if not is_absent(condition.team_name):
        builder.and_(Team.name == condition.team_name)
    if condition.age_goe is not None:
        builder.and_(Member.age >= condition.age_goe)
    if condition.age_loe is not None:
        builder.and_(Member.age <= condition.age_loe)
    return builder


def ensure_consistent(condition: MemberSearchCondition) -> MemberSearchCondition:
    """Reject an age range whose lower bound exceeds the upper bound.

    Searching never calls this; callers that want the check opt in.
    """
    if (
        condition.age_goe is not None
        and condition.age_loe is not None
        and condition.age_goe > condition.age_loe
    ):
        raise InvalidConditionError(
            "age_range_inverted",
            f"age_goe ({condition.age_goe}) is greater than age_loe ({condition.age_loe}).",
        )
    return condition
