"""
Base repository with standardized CRUD operations, transaction management,
and error handling.

Repositories never commit on their own unless asked to: services own the
transaction boundary so several repository calls can share one commit.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from klass_hero.models.base import BaseModel
from klass_hero.core.logging import get_logger
from klass_hero.core.exceptions import RepositoryError, ResourceNotFoundError

logger = get_logger(__name__)

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with standardized operations.

    Provides CRUD operations, transaction management, and error handling
    for all domain repositories.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    # ==================== Create Operations ====================

    def create(self, entity: ModelType, commit: bool = False) -> ModelType:
        """
        Add a new entity to the session.

        Args:
            entity: Entity to create
            commit: Whether to commit immediately (flush only otherwise)

        Returns:
            Created entity

        Raises:
            IntegrityError: If a unique constraint is violated
            RepositoryError: On any other database failure
        """
        try:
            self.db.add(entity)

            if commit:
                self.db.commit()
                self.db.refresh(entity)
            else:
                self.db.flush()

            logger.debug(f"Created {self.model.__name__} with id: {entity.id}")
            return entity

        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            raise RepositoryError(f"Create failed: {str(e)}") from e

    # ==================== Read Operations ====================

    def find_by_id(self, id: str) -> Optional[ModelType]:
        """
        Find entity by ID.

        Args:
            id: Entity ID

        Returns:
            Entity or None
        """
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by ID failed: {str(e)}") from e

    def get_by_id(self, id: str) -> ModelType:
        """
        Get entity by ID or raise exception.

        Raises:
            ResourceNotFoundError: If entity not found
        """
        entity = self.find_by_id(id)
        if not entity:
            raise ResourceNotFoundError(self.model.__name__, id)
        return entity

    def find_by(self, **criteria: Any) -> List[ModelType]:
        """Find all entities whose columns equal the given values."""
        try:
            stmt = select(self.model).filter_by(**criteria)
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by criteria failed: {str(e)}") from e

    def find_one_by(self, **criteria: Any) -> Optional[ModelType]:
        """Find the first entity matching the given column values."""
        try:
            stmt = select(self.model).filter_by(**criteria).limit(1)
            return self.db.scalars(stmt).first()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find one by criteria failed: {str(e)}") from e

    def count(self, **criteria: Any) -> int:
        """Count entities matching the given column values."""
        try:
            stmt = select(func.count()).select_from(self.model).filter_by(**criteria)
            return self.db.scalar(stmt) or 0
        except SQLAlchemyError as e:
            raise RepositoryError(f"Count failed: {str(e)}") from e

    # ==================== Update Operations ====================

    def update(self, entity: ModelType, data: Dict[str, Any]) -> ModelType:
        """
        Apply field values to an entity and flush.

        Args:
            entity: Entity to update
            data: Field values to apply

        Returns:
            Updated entity
        """
        for key, value in data.items():
            if not hasattr(entity, key):
                raise RepositoryError(
                    f"{self.model.__name__} has no attribute '{key}'",
                    {"field": key},
                )
            setattr(entity, key, value)
        self.db.flush()
        return entity
