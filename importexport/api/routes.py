"""HTTP route handlers for profile discovery and validation."""

from __future__ import annotations

from typing import AbstractSet, Dict, List, Mapping, Optional

from fastapi import APIRouter, HTTPException, status

from importexport.profiles.loader import ProfileRegistry, get_profile_registry
from importexport.profiles.models import BagProfile, ProfileSummary
from importexport.profiles.validation import validate

from .schemas import (
    ProfileDetailModel,
    ProfileValidateRequestModel,
    RulesValidateRequestModel,
    ValidationResponseModel,
)


router = APIRouter()


def _registry() -> ProfileRegistry:
    registry = get_profile_registry()
    if not registry.is_loaded():
        registry.load_catalog()
    return registry


def _require_profile(name: str) -> BagProfile:
    registry = _registry()
    profile = registry.get(name)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "unknown_profile",
                "profile": name,
                "available": registry.get_available_ids(),
            },
        )
    return profile


def _rules_view(
    rules: Mapping[str, Optional[AbstractSet[str]]]
) -> Dict[str, Optional[List[str]]]:
    return {
        name: sorted(allowed) if allowed is not None else None
        for name, allowed in rules.items()
    }


@router.get("/v1/profiles", response_model=List[ProfileSummary], tags=["profiles"])
async def list_profiles() -> List[ProfileSummary]:
    return _registry().list_profiles()


@router.get(
    "/v1/profiles/{name}", response_model=ProfileDetailModel, tags=["profiles"]
)
async def get_profile(name: str) -> ProfileDetailModel:
    profile = _require_profile(name)
    return ProfileDetailModel(
        name=profile.name,
        base_profile=profile.base_profile,
        payload_digest_algorithms=sorted(profile.payload_digest_algorithms),
        tag_digest_algorithms=sorted(profile.tag_digest_algorithms),
        required_fields=_rules_view(profile.required_fields),
        metadata_fields=_rules_view(profile.metadata_fields),
        generated_fields=sorted(profile.generated_fields),
    )


@router.post(
    "/v1/profiles/{name}/validate",
    response_model=ValidationResponseModel,
    tags=["validation"],
)
async def validate_against_profile(
    name: str, request: ProfileValidateRequestModel
) -> ValidationResponseModel:
    profile = _require_profile(name)
    if request.scope == "pre-export":
        rules = profile.pre_export_rules()
    elif request.scope == "metadata":
        rules = profile.metadata_fields
    else:
        rules = profile.required_fields

    # ProfileValidationError is rendered by the application exception handler
    validate(profile.name, rules, request.fields)
    return ValidationResponseModel(valid=True, section=profile.name)


@router.post("/v1/validate", response_model=ValidationResponseModel, tags=["validation"])
async def validate_rules(request: RulesValidateRequestModel) -> ValidationResponseModel:
    rules = {
        name: frozenset(allowed) if allowed is not None else None
        for name, allowed in request.rules.items()
    }
    validate(request.section, rules, request.fields)
    return ValidationResponseModel(valid=True, section=request.section)
