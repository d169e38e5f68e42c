"""
Per-program enrollment capacity policy.
"""

from typing import Optional, Union

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from klass_hero.core.exceptions import ValidationError
from klass_hero.models.base.base_model import TimestampModel

__all__ = ["EnrollmentPolicy", "UNLIMITED"]

UNLIMITED = "unlimited"


class EnrollmentPolicy(TimestampModel):
    """
    Minimum and maximum enrollment bounds of a program.

    At least one bound is set, each bound is >= 1 and min <= max.
    """

    __tablename__ = "enrollment_policies"

    program_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("programs.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    min_enrollment: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    max_enrollment: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )

    program = relationship("Program", back_populates="enrollment_policy")

    __table_args__ = (
        CheckConstraint(
            "min_enrollment IS NOT NULL OR max_enrollment IS NOT NULL",
            name="ck_enrollment_policy_has_bound",
        ),
    )

    @staticmethod
    def validate_bounds(min_enrollment: Optional[int], max_enrollment: Optional[int]) -> None:
        """Raise ValidationError unless the bounds form a valid policy."""
        field_errors = {}
        if min_enrollment is None and max_enrollment is None:
            field_errors["max_enrollment"] = ["at least one of min_enrollment or max_enrollment is required"]
        if min_enrollment is not None and min_enrollment < 1:
            field_errors["min_enrollment"] = ["must be greater than or equal to 1"]
        if max_enrollment is not None and max_enrollment < 1:
            field_errors["max_enrollment"] = ["must be greater than or equal to 1"]
        if (
            not field_errors
            and min_enrollment is not None
            and max_enrollment is not None
            and min_enrollment > max_enrollment
        ):
            field_errors["min_enrollment"] = ["must be less than or equal to max_enrollment"]

        if field_errors:
            raise ValidationError("Invalid enrollment policy", field_errors=field_errors)

    def remaining_capacity(self, active_count: int) -> Union[int, str]:
        if self.max_enrollment is None:
            return UNLIMITED
        return max(self.max_enrollment - active_count, 0)

    def has_capacity(self, active_count: int) -> bool:
        return self.max_enrollment is None or active_count < self.max_enrollment

    def meets_minimum(self, active_count: int) -> bool:
        return self.min_enrollment is None or active_count >= self.min_enrollment
