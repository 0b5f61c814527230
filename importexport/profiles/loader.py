"""Profile loading and registry management."""

from __future__ import annotations

import logging
import os
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import IO, Dict, FrozenSet, List, Literal, Optional, Tuple, Union

import orjson
import yaml
from pydantic import ValidationError

from importexport.config import Settings, get_settings
from importexport.exceptions import ProfileLoadError
from importexport.profiles.models import (
    PROFILE_NAME_PATTERN,
    BagProfile,
    ProfileDocument,
    ProfileSummary,
)

logger = logging.getLogger(__name__)

DocumentFormat = Literal["json", "yaml"]
ProfileSource = Union[str, os.PathLike, bytes, bytearray, IO[bytes], Traversable]

_YAML_SUFFIXES = (".yaml", ".yml")


def _format_for(name: str) -> DocumentFormat:
    return "yaml" if name.lower().endswith(_YAML_SUFFIXES) else "json"


def _read_source(
    profile_name: str, source: ProfileSource, max_bytes: int
) -> Tuple[bytes, Optional[DocumentFormat]]:
    """Read at most max_bytes of a profile document, inferring its format from a file name."""
    fmt: Optional[DocumentFormat] = None
    try:
        if isinstance(source, (bytes, bytearray)):
            data = bytes(source)
        elif hasattr(source, "read"):
            data = source.read(max_bytes + 1)
        else:
            path = Path(source) if isinstance(source, (str, os.PathLike)) else source
            fmt = _format_for(path.name)
            with path.open("rb") as f:
                data = f.read(max_bytes + 1)
    except OSError as e:
        raise ProfileLoadError(profile_name, f"unable to read document: {e}") from e

    if isinstance(data, str):
        data = data.encode("utf-8")
    if len(data) > max_bytes:
        raise ProfileLoadError(profile_name, f"document exceeds {max_bytes} bytes")
    return data, fmt


def parse_profile_document(
    profile_name: str, data: bytes, fmt: DocumentFormat = "json"
) -> ProfileDocument:
    """
    Parse raw bytes into a validated profile document.

    Raises:
        ProfileLoadError: If the bytes are not a well-formed profile document
    """
    try:
        if fmt == "yaml":
            raw = yaml.safe_load(data)
        else:
            raw = orjson.loads(data)
    except (yaml.YAMLError, orjson.JSONDecodeError) as e:
        logger.error(f"Parse error in profile {profile_name}: {e}")
        raise ProfileLoadError(profile_name, f"malformed {fmt} document: {e}") from e

    if not isinstance(raw, dict):
        raise ProfileLoadError(profile_name, "expected a mapping at the top level")

    try:
        return ProfileDocument.model_validate(raw)
    except ValidationError as e:
        logger.error(f"Validation error in profile {profile_name}: {e}")
        raise ProfileLoadError(profile_name, str(e)) from e


def _digest_sets(
    document: ProfileDocument, base: Optional[BagProfile]
) -> Tuple[FrozenSet[str], FrozenSet[str]]:
    if document.manifests_required is not None:
        payload = frozenset(document.manifests_required)
    else:
        payload = base.payload_digest_algorithms if base else frozenset()

    if document.tag_manifests_required is not None:
        tag = frozenset(document.tag_manifests_required)
    elif document.manifests_required is None and base is not None:
        tag = base.tag_digest_algorithms
    else:
        tag = payload
    return payload, tag


def build_profile(
    profile_name: str, document: ProfileDocument, base: Optional[BagProfile] = None
) -> BagProfile:
    """
    Flatten a document and its resolved base profile into one BagProfile.

    Each of the required, metadata and generated collections is merged on
    top of the base: document keys override, base-only keys are kept.
    """
    required = dict(base.required_fields) if base else {}
    metadata = dict(base.metadata_fields) if base else {}
    generated = set(base.generated_fields) if base else set()

    for field_name, spec in document.metadata_fields.items():
        allowed = spec.allowed_values()
        metadata[field_name] = allowed
        if spec.required:
            required[field_name] = allowed
        if spec.generated:
            generated.add(field_name)

    payload, tag = _digest_sets(document, base)
    return BagProfile(
        name=profile_name,
        payload_digest_algorithms=payload,
        tag_digest_algorithms=tag,
        required_fields=required,
        metadata_fields=metadata,
        generated_fields=frozenset(generated),
        base_profile=document.base_profile,
    )


def _load(
    profile_name: str,
    source: ProfileSource,
    fmt: Optional[DocumentFormat],
    registry: "ProfileRegistry",
    max_bytes: int,
    chain: Tuple[str, ...],
) -> BagProfile:
    data, inferred = _read_source(profile_name, source, max_bytes)
    document = parse_profile_document(profile_name, data, fmt or inferred or "json")

    base = None
    if document.base_profile is not None:
        base = registry.resolve(document.base_profile, chain, referrer=profile_name)

    profile = build_profile(profile_name, document, base)
    logger.debug(f"Loaded profile: {profile_name} (base: {document.base_profile})")
    return profile


def load_profile(
    profile_name: str,
    source: ProfileSource,
    *,
    fmt: Optional[DocumentFormat] = None,
    registry: Optional["ProfileRegistry"] = None,
    settings: Optional[Settings] = None,
) -> BagProfile:
    """
    Load a profile document, resolving its base profile from the catalog.

    Args:
        profile_name: Name used for the profile and in error messages
        source: File path (a str is always a path), raw document bytes,
            binary file object or catalog resource
        fmt: Force "json" or "yaml"; inferred from a file name otherwise
        registry: Catalog used to resolve baseProfile references
        settings: Settings providing the document size limit

    Returns:
        Flattened, immutable profile

    Raises:
        ProfileLoadError: If the document or any base profile cannot be loaded
    """
    settings = settings or get_settings()
    registry = registry or get_profile_registry()
    return _load(profile_name, source, fmt, registry, settings.max_profile_bytes, ())


class ProfileRegistry:
    """Registry for the fixed catalog of built-in base profiles."""

    def __init__(
        self,
        catalog: Optional[Traversable] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._catalog = catalog or resources.files("importexport.profiles") / "catalog"
        self._settings = settings
        self._profiles: Dict[str, BagProfile] = {}
        self._loaded = False

    def _max_bytes(self) -> int:
        return (self._settings or get_settings()).max_profile_bytes

    def _entry(self, profile_name: str) -> Optional[Traversable]:
        if not PROFILE_NAME_PATTERN.match(profile_name):
            return None
        for suffix in (".json",) + _YAML_SUFFIXES:
            entry = self._catalog / f"{profile_name}{suffix}"
            if entry.is_file():
                return entry
        return None

    def resolve(
        self,
        profile_name: str,
        chain: Tuple[str, ...] = (),
        referrer: Optional[str] = None,
    ) -> BagProfile:
        """
        Get a catalog profile, loading it and its ancestors on first use.

        Args:
            profile_name: Catalog profile name
            chain: Catalog names already being loaded below this one
            referrer: Profile whose baseProfile names this entry, for errors

        Raises:
            ProfileLoadError: If the name is not in the catalog, the chain of
                base profiles is circular, or the catalog entry is invalid
        """
        if profile_name in chain:
            cycle = " -> ".join(chain + (profile_name,))
            raise ProfileLoadError(chain[0], f"circular baseProfile chain: {cycle}")

        cached = self._profiles.get(profile_name)
        if cached is not None:
            return cached

        entry = self._entry(profile_name)
        if entry is None:
            raise ProfileLoadError(
                referrer or profile_name,
                f'unable to access baseProfile "{profile_name}"',
            )

        profile = _load(
            profile_name, entry, None, self, self._max_bytes(), chain + (profile_name,)
        )
        self._profiles[profile_name] = profile
        return profile

    def load_catalog(self) -> None:
        """
        Load every profile in the catalog.

        Raises:
            ProfileLoadError: If a catalog profile fails to load
        """
        names = sorted(
            entry.name.rsplit(".", 1)[0]
            for entry in self._catalog.iterdir()
            if entry.is_file() and entry.name.lower().endswith((".json",) + _YAML_SUFFIXES)
        )
        for profile_name in names:
            self.resolve(profile_name)

        self._loaded = True
        if names:
            logger.info(f"Profiles loaded: {', '.join(names)}")
        else:
            logger.info("No profiles loaded")

    def get(self, profile_name: str) -> Optional[BagProfile]:
        """
        Get a profile by name.

        Args:
            profile_name: Catalog profile name

        Returns:
            Profile if found, None otherwise
        """
        if self._entry(profile_name) is None and profile_name not in self._profiles:
            return None
        return self.resolve(profile_name)

    def list_profiles(self) -> List[ProfileSummary]:
        """
        Get summary information about all loaded profiles.

        Returns:
            List of profile summaries
        """
        return [
            ProfileSummary(
                name=profile.name,
                base_profile=profile.base_profile,
                payload_digest_algorithms=sorted(profile.payload_digest_algorithms),
                tag_digest_algorithms=sorted(profile.tag_digest_algorithms),
                required_fields=sorted(profile.required_fields),
            )
            for _, profile in sorted(self._profiles.items())
        ]

    def get_available_ids(self) -> List[str]:
        """Get list of loaded profile names."""
        return sorted(self._profiles.keys())

    def is_loaded(self) -> bool:
        """Check if the catalog has been loaded."""
        return self._loaded

    def clear(self) -> None:
        """Clear all loaded profiles."""
        self._profiles.clear()
        self._loaded = False


# Global registry instance
_registry: Optional[ProfileRegistry] = None


def get_profile_registry() -> ProfileRegistry:
    """Get the global profile registry instance."""
    global _registry
    if _registry is None:
        _registry = ProfileRegistry()
    return _registry

