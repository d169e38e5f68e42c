from klass_hero.schemas.common.base import (
    BaseDBSchema,
    BaseSchema,
    ErrorDetail,
    ErrorResponse,
    Money,
)

__all__ = ["BaseDBSchema", "BaseSchema", "ErrorDetail", "ErrorResponse", "Money"]
