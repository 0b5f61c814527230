"""Bag profile system for repository import/export."""

from importexport.profiles.loader import ProfileRegistry, get_profile_registry, load_profile
from importexport.profiles.models import BagProfile, ProfileSummary
from importexport.profiles.validation import FieldViolation, collect_violations, validate

__all__ = [
    "BagProfile",
    "FieldViolation",
    "ProfileRegistry",
    "ProfileSummary",
    "collect_violations",
    "get_profile_registry",
    "load_profile",
    "validate",
]
