from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from querykit.db import Base

if TYPE_CHECKING:
    from querykit.models.team import Team


class Member(Base):
    __tablename__ = "members"
    __table_args__ = (Index("ix_members_username", "username"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str | None] = mapped_column(String(80))
    age: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    team_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("teams.id"), index=True)

    team: Mapped[Team | None] = relationship("Team", back_populates="members")

    def change_team(self, team: Team | None) -> None:
        """Move the member to ``team``, keeping both sides of the relation in sync."""
        self.team = team

    def __repr__(self) -> str:
        return f"Member(id={self.id!r}, username={self.username!r}, age={self.age!r})"
