"""Exchange ORM — persists a named group of stocks and its live-in-market flag.

Invariants:
    - name is unique and non-nullable
    - live_in_market defaults to False; True only while members >= the live threshold
      (enforced by services/exchange_membership.py, not by the schema)
    - version changes with every write to the row AND every membership change, so a
      go-live decision and a concurrent add/remove cannot both commit

Design Decisions:
    - Members are not a relationship collection: every membership read and write goes
      through exchange_members so counts are never served from a stale identity map
    - version_id_generator=False: the store bumps version itself (touch) because
      membership rows live in another table and would not dirty this one
"""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from stockhub.core.domain_types import DESCRIPTION_MAX_LENGTH, NAME_MAX_LENGTH
from stockhub.db.base import Base


class Exchange(Base):
    """Exchange entity — may be live in market once it holds enough stocks."""
    __tablename__ = "exchanges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(NAME_MAX_LENGTH), nullable=False, unique=True,
    )
    description: Mapped[str | None] = mapped_column(
        String(DESCRIPTION_MAX_LENGTH), nullable=True,
    )
    live_in_market: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __mapper_args__ = {
        "version_id_col": version,
        "version_id_generator": False,
    }

    def touch(self) -> None:
        """Advance the version; the next flush checks the previously loaded one."""
        self.version = (self.version or 0) + 1
