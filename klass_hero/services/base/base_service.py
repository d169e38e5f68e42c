"""
Base service: shared session, logger, transaction scope and the mapping
from raised exceptions to failed ServiceResults.
"""

from typing import TypeVar, Generic, Optional, Dict, Any
from abc import ABC
from contextlib import contextmanager

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from klass_hero.core.exceptions import BaseAppException
from klass_hero.core.logging import get_logger
from klass_hero.repositories.base.base_repository import BaseRepository
from klass_hero.services.base.service_result import (
    ServiceResult,
    ServiceError,
    ErrorCode,
    ErrorSeverity,
)


TModel = TypeVar("TModel")
TRepo = TypeVar("TRepo", bound=BaseRepository)

# First match wins, so subclasses come before SQLAlchemyError
_ERROR_CODES = (
    (StaleDataError, ErrorCode.CONFLICT),
    (IntegrityError, ErrorCode.CONFLICT),
    (ValueError, ErrorCode.VALIDATION_ERROR),
    (KeyError, ErrorCode.NOT_FOUND),
    (PermissionError, ErrorCode.INSUFFICIENT_PERMISSIONS),
    (SQLAlchemyError, ErrorCode.DATABASE_ERROR),
)


def _ref(entity_ref: Optional[Any]) -> Optional[str]:
    return str(entity_ref) if entity_ref is not None else None


class BaseService(ABC, Generic[TModel, TRepo]):
    """
    Parent of every domain service.

    Public methods catch everything and return a ServiceResult. Domain
    exceptions (BaseAppException) become WARNING-level failures with their
    own code; anything else is logged with a traceback and mapped to a
    generic code.
    """

    def __init__(self, repository: TRepo, db_session: Session):
        self.repository: TRepo = repository
        self.db: Session = db_session
        self._logger = get_logger(type(self).__module__).bind(service=type(self).__name__)

    # -------------------------------------------------------------------------
    # Error handling
    # -------------------------------------------------------------------------

    def _handle_app_exception(
        self,
        exception: BaseAppException,
        operation: str,
        entity_ref: Optional[Any] = None,
    ) -> ServiceResult:
        self._logger.warning(
            f"{operation} rejected: {exception.error_code.value}",
            extra={
                "operation": operation,
                "entity_ref": _ref(entity_ref),
                "error_code": exception.error_code.value,
            },
        )
        return ServiceResult.from_app_exception(exception)

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
    ) -> ServiceResult:
        """Turn any exception raised inside `operation` into a failed result."""
        if isinstance(exception, BaseAppException):
            return self._handle_app_exception(exception, operation, entity_ref)

        error_code = self._error_code_for(exception)
        context = {
            "operation": operation,
            "entity_ref": _ref(entity_ref),
            "exception_type": type(exception).__name__,
        }

        if error_code == ErrorCode.CONFLICT:
            # No traceback for lost races
            self._logger.warning(f"Conflict during {operation}: {exception}", extra=context)
            severity = ErrorSeverity.WARNING
        else:
            self._logger.error(f"Error during {operation}: {exception}", exc_info=True, extra=context)
            severity = ErrorSeverity.CRITICAL

        return ServiceResult.failure(
            ServiceError(
                code=error_code,
                message=f"Failed to {operation}",
                details={"error": str(exception), "entity_ref": _ref(entity_ref)},
                severity=severity,
            )
        )

    @staticmethod
    def _error_code_for(exception: Exception) -> ErrorCode:
        for exc_type, error_code in _ERROR_CODES:
            if isinstance(exception, exc_type):
                return error_code
        return ErrorCode.INTERNAL_ERROR

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self):
        """
        Unit of work: commit when the block exits normally, roll back and
        re-raise otherwise.

            with self.transaction():
                self.repository.create(entity)
        """
        try:
            yield self.db
            self._commit()
        except Exception as e:
            self._rollback()
            if not isinstance(e, BaseAppException):
                self._logger.debug(f"Transaction failed: {e}")
            raise

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception as e:
            self._logger.warning(f"Commit failed: {e}")
            self._rollback()
            raise

    def _rollback(self) -> None:
        try:
            self.db.rollback()
        except SQLAlchemyError as e:
            # Keep the original error, not the rollback one
            self._logger.warning(f"Rollback failed: {e}")

    # -------------------------------------------------------------------------
    # Shared operations
    # -------------------------------------------------------------------------

    def get_by_id(self, entity_id: str) -> ServiceResult[TModel]:
        """Fetch one entity of this service's model; NOT_FOUND when absent."""
        try:
            entity = self.repository.find_by_id(entity_id)
            if not entity:
                return ServiceResult.not_found(self.repository.model.__name__, entity_id)
            return ServiceResult.success(entity)
        except Exception as e:
            return self._handle_exception(e, "get entity by ID", entity_id)

    def _log_operation(
        self,
        operation: str,
        entity_ref: Optional[Any] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = {"entity_ref": _ref(entity_ref)}
        if extra:
            context.update(extra)
        self._logger.info(f"Operation: {operation}", extra=context)
