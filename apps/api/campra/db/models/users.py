"""User accounts."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, String, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campra.db.base import Base
from campra.utils.ids import gen_id

if TYPE_CHECKING:
    from campra.db.models import School


class User(Base):
    """
    A local or remote account.

    Role flags (admin, moderator, school admin, teacher) gate the admin
    endpoints. `token` is the API credential for local users.
    """

    __tablename__ = "user"
    __table_args__ = (
        Index("IDX_user_isTeacher", "isTeacher"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=gen_id)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", server_default=func.now(), nullable=False
    )
    username: Mapped[str] = mapped_column(String(128), nullable=False)
    username_lower: Mapped[str] = mapped_column(
        "usernameLower", String(128), nullable=False, unique=True
    )
    name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    host: Mapped[str | None] = mapped_column(String(512), nullable=True)
    token: Mapped[str | None] = mapped_column(String(16), nullable=True, unique=True)

    is_admin: Mapped[bool] = mapped_column(
        "isAdmin", Boolean, server_default=false(), default=False, nullable=False
    )
    is_moderator: Mapped[bool] = mapped_column(
        "isModerator", Boolean, server_default=false(), default=False, nullable=False
    )
    is_school_admin: Mapped[bool] = mapped_column(
        "isSchoolAdmin", Boolean, server_default=false(), default=False, nullable=False
    )
    is_teacher: Mapped[bool] = mapped_column(
        "isTeacher",
        Boolean,
        server_default=false(),
        default=False,
        nullable=False,
        comment="Whether the User is a teacher.",
    )
    billing_exempt: Mapped[bool] = mapped_column(
        "billingExempt", Boolean, server_default=false(), default=False, nullable=False
    )

    school_id: Mapped[str | None] = mapped_column(
        "schoolId",
        String(32),
        ForeignKey("schools.id", ondelete="SET NULL"),
        nullable=True,
    )
    admin_for_school_id: Mapped[str | None] = mapped_column(
        "adminForSchoolId", String(32), nullable=True
    )

    school: Mapped["School | None"] = relationship(foreign_keys=[school_id])

    @property
    def is_local(self) -> bool:
        return self.host is None

    @property
    def can_moderate(self) -> bool:
        return self.is_admin or self.is_moderator
