"""
Program catalog service.

Creates and looks up programs and reports their registration window state.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from klass_hero.core.exceptions import BaseAppException, ValidationError
from klass_hero.models.catalog.program import Program
from klass_hero.models.catalog.registration_period import RegistrationPeriod
from klass_hero.repositories.catalog.program_repository import ProgramRepository
from klass_hero.services.base import BaseService, ServiceResult
from klass_hero.services.catalog.registration_window import (
    OPEN_STATUSES,
    program_registration_status,
)
from klass_hero.utils.money import round2, to_decimal
from klass_hero.utils.date_utils import today_local


class ProgramService(BaseService[Program, ProgramRepository]):
    """Program catalog operations."""

    def __init__(self, db_session: Session):
        super().__init__(ProgramRepository(db_session), db_session)

    def create_program(
        self,
        title: str,
        provider_id: Optional[str] = None,
        description: Optional[str] = None,
        registration_start_date: Optional[date] = None,
        registration_end_date: Optional[date] = None,
        start_date: Optional[date] = None,
        weekly_fee: Optional[Any] = None,
        registration_fee: Optional[Any] = None,
        weeks_count: Optional[int] = None,
    ) -> ServiceResult[Program]:
        """
        Create a program.

        The registration period is validated (start before end) and fees,
        when given, must be non-negative.
        """
        try:
            if not title or not title.strip():
                raise ValidationError("Title is required", field_errors={"title": ["is required"]})
            RegistrationPeriod(registration_start_date, registration_end_date)
            if weeks_count is not None and weeks_count < 1:
                raise ValidationError(
                    "Weeks count must be positive",
                    field_errors={"weeks_count": ["must be a positive integer"]},
                )

            program = Program(
                title=title.strip(),
                provider_id=provider_id,
                description=description,
                registration_start_date=registration_start_date,
                registration_end_date=registration_end_date,
                start_date=start_date,
                weekly_fee=self._money(weekly_fee, "weekly_fee"),
                registration_fee=self._money(registration_fee, "registration_fee"),
                weeks_count=weeks_count,
            )

            with self.transaction():
                self.repository.create(program)

            self._log_operation("create program", program.id, {"title": program.title})
            return ServiceResult.success(program, message="Program created successfully")
        except BaseAppException as e:
            return self._handle_app_exception(e, "create program")
        except Exception as e:
            return self._handle_exception(e, "create program")

    def get_program(self, program_id: str) -> ServiceResult[Program]:
        return self.get_by_id(program_id)

    def list_programs(self, provider_id: Optional[str] = None) -> ServiceResult[List[Program]]:
        try:
            if provider_id:
                programs = self.repository.list_for_provider(provider_id)
            else:
                programs = sorted(self.repository.find_by(), key=lambda p: p.title)
            return ServiceResult.success(programs)
        except Exception as e:
            return self._handle_exception(e, "list programs")

    def get_registration_status(
        self,
        program_id: str,
        today: Optional[date] = None,
    ) -> ServiceResult[Dict[str, Any]]:
        """Registration window state of a program for `today`."""
        try:
            program = self.repository.get_by_id(program_id)
            today = today or today_local()
            status = program_registration_status(program, today)
            return ServiceResult.success(
                {
                    "program_id": program.id,
                    "status": status,
                    "open": status in OPEN_STATUSES,
                    "start_date": program.registration_start_date,
                    "end_date": program.registration_end_date,
                    "evaluated_on": today,
                }
            )
        except BaseAppException as e:
            return self._handle_app_exception(e, "get registration status", program_id)
        except Exception as e:
            return self._handle_exception(e, "get registration status", program_id)

    @staticmethod
    def _money(value: Optional[Any], field: str) -> Optional[Decimal]:
        if value is None:
            return None
        amount = to_decimal(value, field)
        if amount < 0:
            raise ValidationError(f"{field} must not be negative", field_errors={field: ["must not be negative"]})
        return round2(amount)
