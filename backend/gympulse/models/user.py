"""User model: the slice of the account record the analytics engine reads."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from gympulse.database import Base, UUIDPrimaryKeyMixin


class User(UUIDPrimaryKeyMixin, Base):
    """A registered gym member, staff or faculty account."""

    __tablename__ = "users"

    user_role: Mapped[str] = mapped_column(String(50), default="student", nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<User id={self.id} user_role={self.user_role!r}>"
