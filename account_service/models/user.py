"""The single persisted entity: a registered account."""
from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin

USERNAME_MAX_LENGTH = 50


class User(TimestampMixin, Base):
    """Account row shared by both credential modes.

    ``password`` holds a passlib hash in hashed mode and the raw password in
    device mode. ``android_id`` is only populated in device mode and is never
    rewritten once set.
    """

    __tablename__ = "users"

    __table_args__ = (UniqueConstraint("username", name="uq_users_username"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(USERNAME_MAX_LENGTH), nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    android_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
