from __future__ import annotations

import pytest

from querykit.errors import NotFoundError
from querykit.models import Member
from querykit.schemas.member import MemberCreate, MemberRead, MemberSearchCondition, MemberUpdate
from querykit.schemas.team import TeamCreate, TeamRead
from querykit.services.members import members as member_repository
from querykit.services.teams import teams as team_repository


def test_basic_finders(db_session):
    member = member_repository.save(db_session, MemberCreate(username="member1", age=10))

    assert member.id is not None
    assert member_repository.find_by_id(db_session, member.id) is member
    assert member_repository.find_all(db_session) == [member]
    assert member_repository.find_by_username(db_session, "member1") == [member]


def test_save_accepts_entities(db_session):
    member = member_repository.save(db_session, Member(username="member1", age=10))

    assert member_repository.get(db_session, member.id) is member


def test_find_by_id_returns_none_for_missing_member(db_session):
    assert member_repository.find_by_id(db_session, 9999) is None


def test_get_raises_for_missing_member(db_session):
    with pytest.raises(NotFoundError):
        member_repository.get(db_session, 9999)


def test_find_by_username_without_match(db_session, members):
    assert member_repository.find_by_username(db_session, "nobody") == []


def test_update_and_delete(db_session, members, teams):
    updated = member_repository.update(
        db_session,
        members[0].id,
        MemberUpdate(age=11, team_id=teams["teamB"].id),
    )

    assert updated.age == 11
    assert updated.username == "member1"
    assert updated.team_id == teams["teamB"].id

    member_repository.delete(db_session, members[0].id)

    assert member_repository.find_by_username(db_session, "member1") == []


def test_search(db_session, members):
    condition = MemberSearchCondition(age_goe=35, age_loe=40, team_name="teamB")

    result = member_repository.search(db_session, condition)

    assert [dto.username for dto in result] == ["member4"]
    assert result[0].team_name == "teamB"
    assert result[0].member_id == members[3].id


def test_search_without_condition_returns_every_member(db_session, members):
    db_session.add(Member(username="loner", age=50))
    db_session.flush()

    result = member_repository.search(db_session, MemberSearchCondition())

    assert [(dto.username, dto.team_name) for dto in result] == [
        ("member1", "teamA"),
        ("member2", "teamA"),
        ("member3", "teamB"),
        ("member4", "teamB"),
        ("loner", None),
    ]


@pytest.mark.parametrize(
    "condition",
    [
        MemberSearchCondition(),
        MemberSearchCondition(username="member2"),
        MemberSearchCondition(team_name="teamA"),
        MemberSearchCondition(age_goe=35, age_loe=40, team_name="teamB"),
    ],
)
def test_search_by_builder_matches_search(db_session, members, condition):
    assert member_repository.search_by_builder(db_session, condition) == member_repository.search(
        db_session, condition
    )


def test_search_page(db_session, members):
    page = member_repository.search_page(db_session, MemberSearchCondition(), limit=2, offset=1)

    assert page.total == 4
    assert page.limit == 2
    assert page.offset == 1
    assert [dto.username for dto in page.items] == ["member2", "member3"]


def test_search_page_counts_filtered_rows(db_session, members):
    page = member_repository.search_page(db_session, MemberSearchCondition(team_name="teamA"), limit=1)

    assert page.total == 2
    assert [dto.username for dto in page.items] == ["member1"]


def test_search_keeps_team_references(db_session, members, teams):
    member_repository.search(db_session, MemberSearchCondition(team_name="teamA"))

    assert members[2].team is teams["teamB"]
    assert members[3].team is teams["teamB"]


def test_age_statistics(db_session, members):
    stats = member_repository.age_statistics(db_session)

    assert stats.count == 4
    assert stats.total_age == 100
    assert stats.average_age == 25
    assert stats.max_age == 40
    assert stats.min_age == 10


def test_age_statistics_on_empty_table(db_session):
    stats = member_repository.age_statistics(db_session)

    assert stats.count == 0
    assert stats.average_age is None


def test_team_repository(db_session, members):
    created = team_repository.save(db_session, TeamCreate(name="teamC"))

    assert team_repository.find_by_name(db_session, "teamC") is created
    assert team_repository.find_by_name(db_session, "teamZ") is None
    assert team_repository.get(db_session, created.id) is created
    assert team_repository.average_age_by_team(db_session) == [("teamA", 15.0), ("teamB", 35.0)]


def test_change_team_keeps_both_sides_in_sync(db_session, members, teams):
    member = members[0]

    member.change_team(teams["teamB"])
    db_session.flush()

    assert member in teams["teamB"].members
    assert member not in teams["teamA"].members


def test_read_returns_schemas(db_session, members, teams):
    member = member_repository.read(db_session, members[0].id)
    team = team_repository.read(db_session, teams["teamA"].id)

    assert member == MemberRead(id=members[0].id, username="member1", age=10, team_id=teams["teamA"].id)
    assert team == TeamRead(id=teams["teamA"].id, name="teamA")


def test_read_raises_for_missing_rows(db_session):
    with pytest.raises(NotFoundError):
        member_repository.read(db_session, 9999)
    with pytest.raises(NotFoundError):
        team_repository.read(db_session, 9999)
