"""Bulk statements skip the session's identity map.

Objects loaded before a bulk write keep their old state until the session is
expired; these tests pin that behaviour down rather than assume fresh reads.
"""

from __future__ import annotations

import logging

from querykit.db import clear_cache
from querykit.models import Member
from querykit.queries import MemberQuery
from querykit.services.members import members as member_repository


def _usernames(db_session) -> list[str | None]:
    return [member.username for member in MemberQuery(db_session).order_by("id").all()]


def test_bulk_update_returns_affected_rows(db_session, members):
    assert member_repository.bulk_rename_younger_than(db_session, 28, "guest") == 2


def test_bulk_update_leaves_loaded_members_stale(db_session, members):
    member_repository.bulk_rename_younger_than(db_session, 28, "guest")

    stale = MemberQuery(db_session).order_by("id").all()

    assert stale[0] is members[0]
    assert [member.username for member in stale] == ["member1", "member2", "member3", "member4"]


def test_clear_cache_exposes_bulk_update(db_session, members):
    member_repository.bulk_rename_younger_than(db_session, 28, "guest")

    clear_cache(db_session)

    assert _usernames(db_session) == ["guest", "guest", "member3", "member4"]


def test_bulk_update_with_expression(db_session, members):
    assert member_repository.bulk_add_age(db_session) == 4
    assert [member.age for member in members] == [10, 20, 30, 40]

    clear_cache(db_session)

    assert [member.age for member in MemberQuery(db_session).order_by("id").all()] == [11, 21, 31, 41]


def test_bulk_delete(db_session, members):
    assert member_repository.bulk_delete_older_than(db_session, 18) == 3

    clear_cache(db_session)

    assert _usernames(db_session) == ["member1"]


def test_bulk_update_through_query_builder(db_session, members):
    rows = MemberQuery(db_session).by_username("member4").update({Member.age: 44})

    clear_cache(db_session)

    assert rows == 1
    assert MemberQuery(db_session).by_username("member4").one().age == 44


def test_bulk_operations_are_logged(db_session, members, caplog):
    with caplog.at_level(logging.INFO, logger="querykit"):
        MemberQuery(db_session).where(Member.age > 100).delete()

    assert "query_bulk_delete model=Member rows=0" in caplog.text
