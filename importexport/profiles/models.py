"""Profile data models for bag import/export."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from importexport.profiles.validation import FieldViolation, collect_violations
from importexport.profiles.validation import validate as validate_fields

FieldRuleMap = Mapping[str, Optional[FrozenSet[str]]]

PROFILE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def _scalars_as_text(v: Any) -> Any:
    """Render numeric and boolean list entries as text, the way JSON tools print them."""
    if not isinstance(v, list):
        return v
    return [
        str(item).lower() if isinstance(item, bool)
        else str(item) if isinstance(item, (int, float))
        else item
        for item in v
    ]


class MetadataFieldSpec(BaseModel):
    """Definition of a single metadata field in a profile document."""

    required: bool = Field(default=False, description="Field must be supplied")
    generated: bool = Field(
        default=False, description="Field is populated by the export pipeline"
    )
    values: Optional[List[str]] = Field(
        default=None, description="Allowed values; absent or empty allows any value"
    )

    @field_validator("values", mode="before")
    @classmethod
    def values_as_text(cls, v: Any) -> Any:
        return _scalars_as_text(v)

    def allowed_values(self) -> Optional[FrozenSet[str]]:
        if self.values is None:
            return None
        return frozenset(self.values)


class ProfileDocument(BaseModel):
    """Declarative profile document as read from JSON or YAML."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    manifests_required: Optional[List[str]] = Field(
        default=None, alias="Manifests-Required"
    )
    tag_manifests_required: Optional[List[str]] = Field(
        default=None, alias="Tag-Manifests-Required"
    )
    base_profile: Optional[str] = Field(default=None, alias="baseProfile")
    metadata_fields: Dict[str, MetadataFieldSpec] = Field(
        default_factory=dict, alias="Metadata-Fields"
    )

    @field_validator("manifests_required", "tag_manifests_required", mode="before")
    @classmethod
    def manifests_as_text(cls, v: Any) -> Any:
        return _scalars_as_text(v)

    @field_validator("base_profile")
    @classmethod
    def validate_base_profile(cls, v: Optional[str]) -> Optional[str]:
        """Base profiles are catalog names, never paths."""
        if v is not None and not PROFILE_NAME_PATTERN.match(v):
            raise ValueError(f"Invalid baseProfile name: {v!r}")
        return v


@dataclass(frozen=True, slots=True)
class BagProfile:
    """Flattened, read-only rule set produced by the loader."""

    name: str
    payload_digest_algorithms: FrozenSet[str] = frozenset()
    tag_digest_algorithms: FrozenSet[str] = frozenset()
    required_fields: FieldRuleMap = field(default_factory=lambda: MappingProxyType({}))
    metadata_fields: FieldRuleMap = field(default_factory=lambda: MappingProxyType({}))
    generated_fields: FrozenSet[str] = frozenset()
    base_profile: Optional[str] = None

    def __post_init__(self) -> None:
        for attr in ("required_fields", "metadata_fields"):
            value = getattr(self, attr)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, attr, MappingProxyType(dict(value)))

    def pre_export_rules(self) -> FieldRuleMap:
        """Required fields that the export pipeline does not generate itself."""
        return MappingProxyType(
            {
                name: allowed
                for name, allowed in self.required_fields.items()
                if name not in self.generated_fields
            }
        )

    def check(self, fields: Mapping[str, str]) -> List[FieldViolation]:
        return collect_violations(self.name, self.required_fields, fields)

    def validate(self, fields: Mapping[str, str]) -> None:
        """Validate candidate bag-info fields against the required fields."""
        validate_fields(self.name, self.required_fields, fields)


class ProfileSummary(BaseModel):
    """Summary information about a profile for discovery."""

    name: str
    base_profile: Optional[str] = None
    payload_digest_algorithms: List[str]
    tag_digest_algorithms: List[str]
    required_fields: List[str]
