"""
Per-program participant restrictions: age, gender and school grade.

Providers configure the policy; enrollment refuses children who do not
satisfy it. A program without a policy accepts every child.
"""

from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import JSON, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from klass_hero.core.exceptions import ValidationError
from klass_hero.models.base.base_model import TimestampModel
from klass_hero.models.base.enums import EligibilityReference, Gender

__all__ = ["ParticipantPolicy", "gender_values"]


class ParticipantPolicy(TimestampModel):
    """
    Eligibility restrictions of one program.

    Age bounds are whole months, grade bounds are school grades 1-13 and
    every bound is optional. An empty `allowed_genders` list means no
    gender restriction. `eligibility_at` picks the date on which age is
    evaluated: the day of registration or the program's start date.
    """

    __tablename__ = "participant_policies"

    program_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("programs.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    min_age_months: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    max_age_months: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    allowed_genders: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )
    min_grade: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    max_grade: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    eligibility_at: Mapped[EligibilityReference] = mapped_column(
        Enum(EligibilityReference, name="eligibility_reference_enum"),
        nullable=False,
        default=EligibilityReference.REGISTRATION,
    )

    program = relationship("Program", back_populates="participant_policy")

    @staticmethod
    def validate_restrictions(
        min_age_months: Optional[int] = None,
        max_age_months: Optional[int] = None,
        min_grade: Optional[int] = None,
        max_grade: Optional[int] = None,
    ) -> None:
        """Raise ValidationError when a range is inverted or out of bounds."""
        field_errors = {}
        for name, value in (("min_age_months", min_age_months), ("max_age_months", max_age_months)):
            if value is not None and value < 0:
                field_errors[name] = ["must be greater than or equal to 0"]
        for name, value in (("min_grade", min_grade), ("max_grade", max_grade)):
            if value is not None and not 1 <= value <= 13:
                field_errors[name] = ["must be between 1 and 13"]

        if min_age_months is not None and max_age_months is not None and min_age_months > max_age_months:
            field_errors.setdefault("min_age_months", []).append("minimum age must not exceed maximum age")
        if min_grade is not None and max_grade is not None and min_grade > max_grade:
            field_errors.setdefault("min_grade", []).append("minimum grade must not exceed maximum grade")

        if field_errors:
            raise ValidationError("Invalid participant policy", field_errors=field_errors)

    @property
    def restricts_age(self) -> bool:
        return self.min_age_months is not None or self.max_age_months is not None

    def reference_date(self, today: date, program_start: Optional[date]) -> date:
        """Date on which age is measured; registration day when the program has no start date."""
        if self.eligibility_at == EligibilityReference.PROGRAM_START and program_start is not None:
            return program_start
        return today

    def ineligibility_reasons(
        self,
        age_months: Optional[int],
        gender: Optional[Gender],
        grade: Optional[int],
    ) -> List[str]:
        """Every restriction the participant fails; empty when eligible."""
        reasons = []

        if self.restricts_age and age_months is None:
            reasons.append("date of birth is required for this program")
        elif age_months is not None:
            if self.min_age_months is not None and age_months < self.min_age_months:
                reasons.append(f"child is too young (minimum age: {self.min_age_months} months)")
            if self.max_age_months is not None and age_months > self.max_age_months:
                reasons.append(f"child is too old (maximum age: {self.max_age_months} months)")

        allowed = self.allowed_genders or []
        if allowed and (gender is None or Gender(gender).value not in allowed):
            reasons.append(f"gender not allowed for this program (allowed: {', '.join(allowed)})")

        if self.min_grade is not None or self.max_grade is not None:
            if grade is None:
                reasons.append("school grade is required for this program")
            else:
                if self.min_grade is not None and grade < self.min_grade:
                    reasons.append(f"school grade too low (minimum: grade {self.min_grade})")
                if self.max_grade is not None and grade > self.max_grade:
                    reasons.append(f"school grade too high (maximum: grade {self.max_grade})")

        return reasons


def gender_values(genders: Optional[Iterable[Gender]]) -> List[str]:
    """Stored form of an allowed-genders list: distinct values in input order."""
    values = []
    for gender in genders or []:
        value = Gender(gender).value
        if value not in values:
            values.append(value)
    return values
