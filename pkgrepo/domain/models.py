"""
Pydantic models for the package repository.

This module defines all data models used throughout the tool, including:
- The repository marker document (<repo>/index.json)
- Package descriptors with their releases and targets
- The platform-specific payload union
- Update requests, complete and partial

All document models allow extra fields so that data this tool does not know
about survives a load/save cycle untouched.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, TypeAdapter


# ---------------------------------------------------------------------------
# Versions
# ---------------------------------------------------------------------------

# Semantic Versioning 2.0.0, see https://semver.org
_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


_TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{3}|\.\d{6})?(Z|[+-]\d{2}:\d{2})$")


def _canonical_timestamp(value: str) -> str:
    moment = datetime.fromisoformat(value.replace("Z", "+00:00")).astimezone(timezone.utc)
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += f".{moment.microsecond:06d}".rstrip("0")
    return text + "Z"


def parse_version(value: str) -> str:
    """
    Validate a release version string and return its canonical form.

    Accepted forms are a semantic version ("1.2.3", "2.0.0-beta.1") or an
    RFC 3339 timestamp with an explicit offset ("2020-04-01T12:00:00+02:00")
    for nightly style releases. Timestamps are rewritten in UTC with a "Z"
    suffix, so equal instants have equal versions. Raises ValueError for
    anything else.
    """
    value = value.strip()
    if _SEMVER_RE.match(value):
        return value
    if _TIMESTAMP_RE.match(value):
        try:
            return _canonical_timestamp(value)
        except ValueError:
            pass
    raise ValueError(f"Invalid version '{value}': expected a semantic version or RFC 3339 timestamp")


def version_key(version: str) -> str:
    """
    Identity of a parsed version when matching releases.

    Build metadata ("+build.7") does not distinguish semantic versions.
    Canonical timestamps never carry a "+".
    """
    return version.split("+", 1)[0]


Version = Annotated[str, AfterValidator(parse_version)]


# ---------------------------------------------------------------------------
# Repository marker
# ---------------------------------------------------------------------------


class RepositoryAgent(BaseModel):
    """Tool that generated the repository index."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(description="Name of the generating tool.")
    version: str = Field(description="Version of the generating tool.")
    url: Optional[str] = Field(default=None, description="Homepage of the generating tool.")


class RepositoryInfo(BaseModel):
    """
    Repository-level metadata.

    Only successful deserialization of this model matters when locating a
    repository; the fields themselves are informational.
    """

    model_config = ConfigDict(extra="allow")

    url: str = Field(
        description="Public base URL the repository is served from.",
    )
    name: Dict[str, str] = Field(
        default_factory=dict,
        description="Display name keyed by language tag (e.g. {'en': 'Main repository'}).",
    )
    description: Dict[str, str] = Field(
        default_factory=dict,
        description="Description keyed by language tag.",
    )
    channels: List[str] = Field(
        default_factory=list,
        description="Release channels offered in addition to the default (stable) channel.",
    )
    agent: Optional[RepositoryAgent] = Field(
        default=None,
        description="Information about the tool that generated this repository.",
    )


class RepositoryIndex(BaseModel):
    """
    Root marker document of a repository.

    Persisted at: <REPO_ROOT>/index.json
    """

    model_config = ConfigDict(extra="allow")

    repository: RepositoryInfo = Field(
        description="Repository-level metadata.",
    )


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------


class PayloadBase(BaseModel):
    """Common base of all payload kinds."""

    model_config = ConfigDict(extra="allow")

    def model_post_init(self, __context) -> None:
        # The discriminator is always written, even when it was left to its default.
        self.model_fields_set.add("type")


class WindowsExecutable(PayloadBase):
    """Installer executable or MSI for Windows."""

    type: Literal["WindowsExecutable"] = "WindowsExecutable"
    url: str = Field(description="Download URL of the installer.")
    product_code: str = Field(description="Product code used to detect the installed package.")
    size: int = Field(default=0, ge=0, description="Download size in bytes.")
    installed_size: int = Field(default=0, ge=0, description="Size on disk once installed, in bytes.")
    kind: Optional[Literal["msi", "inno", "nsis"]] = Field(
        default=None,
        description="Installer technology, used to derive default arguments.",
    )
    args: Optional[str] = Field(default=None, description="Arguments for a silent install.")
    uninstall_args: Optional[str] = Field(default=None, description="Arguments for a silent uninstall.")
    requires_reboot: bool = Field(default=False, description="Installing requires a reboot.")
    requires_uninstall_reboot: bool = Field(default=False, description="Uninstalling requires a reboot.")


class MacOSPackage(PayloadBase):
    """Installer package (.pkg) for macOS."""

    type: Literal["MacOSPackage"] = "MacOSPackage"
    url: str = Field(description="Download URL of the package.")
    pkg_id: str = Field(description="Package identifier registered with the macOS installer.")
    size: int = Field(default=0, ge=0, description="Download size in bytes.")
    installed_size: int = Field(default=0, ge=0, description="Size on disk once installed, in bytes.")
    targets: List[Literal["system", "user"]] = Field(
        default_factory=list,
        description="Installation targets supported by this package.",
    )
    requires_reboot: bool = Field(default=False, description="Installing requires a reboot.")
    requires_uninstall_reboot: bool = Field(default=False, description="Uninstalling requires a reboot.")


class TarballPackage(PayloadBase):
    """Plain archive that is unpacked into place."""

    type: Literal["TarballPackage"] = "TarballPackage"
    url: str = Field(description="Download URL of the archive.")
    size: int = Field(default=0, ge=0, description="Download size in bytes.")
    installed_size: int = Field(default=0, ge=0, description="Size on disk once unpacked, in bytes.")


Payload = Annotated[
    Union[WindowsExecutable, MacOSPackage, TarballPackage],
    Field(discriminator="type"),
]

PayloadAdapter: TypeAdapter[Payload] = TypeAdapter(Payload)


# ---------------------------------------------------------------------------
# Package descriptor
# ---------------------------------------------------------------------------


class Target(BaseModel):
    """
    Installable artifact of a release for one platform.

    Within one release the platform identifies at most one target.
    """

    model_config = ConfigDict(extra="allow")

    platform: str = Field(
        description="Platform identifier (e.g. 'windows', 'macos', 'linux').",
    )
    arch: Optional[str] = Field(
        default=None,
        description="Optional CPU architecture (e.g. 'x86_64').",
    )
    dependencies: Dict[str, str] = Field(
        default_factory=dict,
        description="Package identifiers this target depends on, mapped to version requirements.",
    )
    payload: Payload = Field(
        description="Platform-specific artifact descriptor. Stored as-is, never inspected.",
    )


class Release(BaseModel):
    """
    One version of a package on a channel.

    Within one descriptor the (version, channel) pair identifies at most one
    release. A channel of None is the default (stable) channel.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    version: Version = Field(
        description="Release version (semantic version or RFC 3339 timestamp, stored in UTC).",
    )
    channel: Optional[str] = Field(
        default=None,
        description="Release channel, or None for the default (stable) channel.",
    )
    authors: List[str] = Field(
        default_factory=list,
        description="Authors of this release.",
    )
    license: Optional[str] = Field(
        default=None,
        description="License identifier of this release.",
    )
    license_url: Optional[str] = Field(
        default=None,
        description="URL to the full license text.",
    )
    targets: List[Target] = Field(
        default_factory=list,
        alias="target",
        serialization_alias="target",
        description="Platform targets, newest first.",
    )


class PackageInfo(BaseModel):
    """Package-level metadata shared across all releases."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(description="Unique package identifier.")
    name: Dict[str, str] = Field(
        default_factory=dict,
        description="Display name keyed by language tag.",
    )
    description: Dict[str, str] = Field(
        default_factory=dict,
        description="Description keyed by language tag.",
    )
    tags: List[str] = Field(
        default_factory=list,
        description="Tags for categorizing the package.",
    )


class PackageDescriptor(BaseModel):
    """
    Everything the repository knows about one package.

    Persisted at: <REPO_ROOT>/packages/<package_id>/index.json
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    package: PackageInfo = Field(
        description="Package-level metadata.",
    )
    releases: List[Release] = Field(
        default_factory=list,
        alias="release",
        serialization_alias="release",
        description="Releases, most recently inserted first.",
    )


# ---------------------------------------------------------------------------
# Update requests
# ---------------------------------------------------------------------------


class Request(BaseModel):
    """
    Fully populated instruction to insert or update one release target.

    Immutable: once built, fields cannot be modified.
    """

    model_config = ConfigDict(frozen=True)

    repo_path: Path = Field(description="Any path inside (or the marker file of) the repository.")
    id: str = Field(min_length=1, description="Package identifier.")
    platform: str = Field(min_length=1, description="Target platform.")
    channel: Optional[str] = Field(default=None, description="Release channel, None for stable.")
    version: Version = Field(description="Release version.")
    payload: Payload = Field(description="Payload to store for the target.")


class PartialRequest(BaseModel):
    """
    A request with every field optional.

    Missing fields are filled by a RequestBuilder before a Request exists;
    the payload is referenced by file path rather than given inline.
    """

    repo_path: Optional[Path] = None
    id: Optional[str] = None
    platform: Optional[str] = None
    channel: Optional[str] = None
    version: Optional[Version] = None
    payload_path: Optional[Path] = None
