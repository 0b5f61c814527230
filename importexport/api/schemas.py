# importexport/api/schemas.py
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ScopeLiteral = Literal["required", "pre-export", "metadata"]


class ProfileValidateRequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    fields: Dict[str, str] = Field(
        default_factory=dict, description="Candidate bag-info field values."
    )
    scope: ScopeLiteral = Field(
        default="required",
        description="Rules to check: required fields, required minus generated, or all fields.",
    )


class RulesValidateRequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    section: str = Field(..., min_length=1, description="Label used in messages.")
    rules: Dict[str, Optional[List[str]]] = Field(
        ..., description="Field name to allowed values; null or empty allows any value."
    )
    fields: Dict[str, str] = Field(default_factory=dict)


class FieldViolationModel(BaseModel):
    field: str
    kind: Literal["missing", "invalid_value"]
    value: Optional[str] = None
    allowed: List[str] = Field(default_factory=list)
    message: str


class ValidationResponseModel(BaseModel):
    valid: bool
    section: str


class ProfileDetailModel(BaseModel):
    name: str
    base_profile: Optional[str] = None
    payload_digest_algorithms: List[str]
    tag_digest_algorithms: List[str]
    required_fields: Dict[str, Optional[List[str]]]
    metadata_fields: Dict[str, Optional[List[str]]]
    generated_fields: List[str]
