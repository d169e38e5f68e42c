"""
Family service: parent profiles and children.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from klass_hero.core.exceptions import BaseAppException, NoParentProfileError, ValidationError
from klass_hero.models.base.enums import Gender, SubscriptionTier
from klass_hero.models.family.family import Child, ParentProfile
from klass_hero.repositories.family.family_repository import (
    ChildRepository,
    ParentProfileRepository,
)
from klass_hero.services.base import BaseService, ServiceResult
from klass_hero.services.enrollment.entitlements import resolve_tier


class FamilyService(BaseService[ParentProfile, ParentProfileRepository]):
    """Parent profile and child lookups and registration."""

    def __init__(self, db_session: Session):
        super().__init__(ParentProfileRepository(db_session), db_session)
        self.child_repo = ChildRepository(db_session)

    def create_parent_profile(
        self,
        identity_id: str,
        display_name: Optional[str] = None,
        subscription_tier: Optional[SubscriptionTier] = None,
    ) -> ServiceResult[ParentProfile]:
        try:
            if not identity_id:
                raise ValidationError("Identity is required", field_errors={"identity_id": ["is required"]})
            if self.repository.find_by_identity(identity_id) is not None:
                return ServiceResult.conflict(
                    f"Parent profile already exists for identity {identity_id}",
                    {"identity_id": identity_id},
                )

            parent = ParentProfile(
                identity_id=identity_id,
                display_name=display_name,
                subscription_tier=resolve_tier(subscription_tier),
            )
            with self.transaction():
                self.repository.create(parent)
            self._log_operation("create parent profile", parent.id)
            return ServiceResult.success(parent, message="Parent profile created")
        except BaseAppException as e:
            return self._handle_app_exception(e, "create parent profile", identity_id)
        except Exception as e:
            return self._handle_exception(e, "create parent profile", identity_id)

    def get_parent_by_identity(self, identity_id: str) -> ServiceResult[ParentProfile]:
        parent = self.repository.find_by_identity(identity_id)
        if parent is None:
            return ServiceResult.from_app_exception(NoParentProfileError(identity_id))
        return ServiceResult.success(parent)

    def add_child(
        self,
        parent_id: str,
        first_name: str,
        last_name: str,
        date_of_birth: Optional[date] = None,
        allergies: Optional[str] = None,
        support_needs: Optional[str] = None,
        gender: Optional[Gender] = None,
        school_grade: Optional[int] = None,
    ) -> ServiceResult[Child]:
        try:
            field_errors = {}
            if not first_name or not first_name.strip():
                field_errors["first_name"] = ["is required"]
            if not last_name or not last_name.strip():
                field_errors["last_name"] = ["is required"]
            if school_grade is not None and not 1 <= school_grade <= 13:
                field_errors["school_grade"] = ["must be between 1 and 13"]
            if field_errors:
                raise ValidationError("Invalid child", field_errors=field_errors)

            with self.transaction():
                self.repository.get_by_id(parent_id)
                child = Child(
                    parent_id=parent_id,
                    first_name=first_name.strip(),
                    last_name=last_name.strip(),
                    date_of_birth=date_of_birth,
                    allergies=allergies,
                    support_needs=support_needs,
                    gender=gender,
                    school_grade=school_grade,
                )
                self.child_repo.create(child)
            self._log_operation("add child", child.id, {"parent_id": parent_id})
            return ServiceResult.success(child, message="Child added")
        except BaseAppException as e:
            return self._handle_app_exception(e, "add child", parent_id)
        except Exception as e:
            return self._handle_exception(e, "add child", parent_id)

    def list_children(self, parent_id: str) -> ServiceResult[List[Child]]:
        try:
            return ServiceResult.success(self.child_repo.list_for_parent(parent_id))
        except Exception as e:
            return self._handle_exception(e, "list children", parent_id)
