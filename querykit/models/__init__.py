from querykit.models.member import Member  # noqa: F401
from querykit.models.team import Team  # noqa: F401

__all__ = ["Member", "Team"]
