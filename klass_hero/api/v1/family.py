"""
Parent profile and children endpoints for the calling identity.
"""
from typing import List

from fastapi import APIRouter, Depends, status

from klass_hero.api import deps
from klass_hero.api.errors import result_or_raise
from klass_hero.schemas.family import (
    ChildCreate,
    ChildResponse,
    ParentProfileCreate,
    ParentProfileResponse,
)
from klass_hero.services.family.family_service import FamilyService

router = APIRouter(prefix="/parents/me")


@router.post("", response_model=ParentProfileResponse, status_code=status.HTTP_201_CREATED)
def create_parent_profile(
    payload: ParentProfileCreate,
    identity_id: str = Depends(deps.get_identity_id),
    service: FamilyService = Depends(deps.get_family_service),
) -> ParentProfileResponse:
    parent = result_or_raise(
        service.create_parent_profile(identity_id, payload.display_name, payload.subscription_tier)
    )
    return ParentProfileResponse.model_validate(parent)


@router.get("", response_model=ParentProfileResponse)
def get_parent_profile(
    identity_id: str = Depends(deps.get_identity_id),
    service: FamilyService = Depends(deps.get_family_service),
) -> ParentProfileResponse:
    return ParentProfileResponse.model_validate(result_or_raise(service.get_parent_by_identity(identity_id)))


@router.post("/children", response_model=ChildResponse, status_code=status.HTTP_201_CREATED)
def add_child(
    payload: ChildCreate,
    identity_id: str = Depends(deps.get_identity_id),
    service: FamilyService = Depends(deps.get_family_service),
) -> ChildResponse:
    parent = result_or_raise(service.get_parent_by_identity(identity_id))
    child = result_or_raise(service.add_child(parent.id, **payload.model_dump()))
    return ChildResponse.model_validate(child)


@router.get("/children", response_model=List[ChildResponse])
def list_children(
    identity_id: str = Depends(deps.get_identity_id),
    service: FamilyService = Depends(deps.get_family_service),
) -> List[ChildResponse]:
    parent = result_or_raise(service.get_parent_by_identity(identity_id))
    return [ChildResponse.model_validate(child) for child in result_or_raise(service.list_children(parent.id))]
