"""
Family models: parent profiles and their children.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import Date, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from klass_hero.models.base.base_model import TimestampModel
from klass_hero.models.base.enums import Gender, SubscriptionTier

__all__ = ["ParentProfile", "Child"]


class ParentProfile(TimestampModel):
    """
    Parent account profile.

    Linked to an external identity; the subscription tier drives the
    monthly booking quota.
    """

    __tablename__ = "parent_profiles"

    identity_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        unique=True,
        index=True,
    )
    display_name: Mapped[Optional[str]] = mapped_column(
        String(200),
        nullable=True,
    )
    subscription_tier: Mapped[SubscriptionTier] = mapped_column(
        Enum(SubscriptionTier, name="subscription_tier_enum"),
        nullable=False,
        default=SubscriptionTier.EXPLORER,
    )

    children: Mapped[List["Child"]] = relationship(
        back_populates="parent",
        cascade="all, delete-orphan",
        order_by="Child.first_name",
    )


class Child(TimestampModel):
    """Child belonging to a parent profile."""

    __tablename__ = "children"

    parent_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("parent_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    first_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    last_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    date_of_birth: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
    )
    gender: Mapped[Optional[Gender]] = mapped_column(
        Enum(Gender, name="gender_enum"),
        nullable=True,
    )
    school_grade: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    allergies: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    support_needs: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    parent: Mapped["ParentProfile"] = relationship(back_populates="children")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
