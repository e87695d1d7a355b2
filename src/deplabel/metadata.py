# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module contains the data model of the metadata label.

The label is a JSON document with the following shape::

    {
        "base": {"ID": "ubuntu", "VERSION_ID": "18.04", ...},
        "provenance": [{"name": "deplabel", "version": "0.1.0", "url": "..."}],
        "dependencies": [
            {"type": "package", "source": {"type": "debian-package-list", "version": "<sha256>", "metadata": {...}}},
            {"type": "package", "source": {"type": "git", "version": {"commit": "..."}, "metadata": {...}}},
            {"type": "package", "source": {"type": "archive", "metadata": {"url": "..."}}}
        ]
    }

Dependency sources form a closed set of variants. Each variant is a frozen dataclass whose ``source_type``
is the discriminator written to ``source.type``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

#: The value of ``dependencies[].type`` for every dependency in the label.
PACKAGE_DEPENDENCY_TYPE = "package"

#: The location recorded as ``source.metadata.url`` of the package-list dependency.
PACKAGE_DATABASE_URL = "file:///var/lib/dpkg/status"


class SourceType(str, Enum):
    """The kinds of dependency sources that can appear in the label."""

    GIT = "git"
    ARCHIVE = "archive"
    DEBIAN_PACKAGE_LIST = "debian-package-list"


@dataclass(frozen=True)
class PackageSource:
    """The source package an installed package was built from."""

    package: str
    version: str
    upstream_version: str

    def to_dict(self) -> dict[str, str]:
        """Return the JSON representation."""
        return {"package": self.package, "version": self.version, "upstreamVersion": self.upstream_version}


@dataclass(frozen=True)
class PackageRecord:
    """An installed package parsed from one stanza of the package-status database."""

    package: str
    version: str
    architecture: str
    source: PackageSource

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON representation."""
        return {
            "package": self.package,
            "version": self.version,
            "architecture": self.architecture,
            "source": self.source.to_dict(),
        }


@dataclass(frozen=True)
class PackageListSnapshot:
    """The package set of an image together with the apt sources it was installed from.

    The order of both sequences is significant: it is part of the digest of the snapshot.
    """

    apt_sources: tuple[str, ...] = ()
    packages: tuple[PackageRecord, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON representation, with ``packages`` always serialized before ``apt_sources``."""
        return {
            "packages": [package.to_dict() for package in self.packages],
            "apt_sources": list(self.apt_sources),
        }


@dataclass(frozen=True)
class GitSource:
    """A git repository that contributed to the image."""

    url: str
    commit: str | None = None
    ref: str | None = None
    refs: tuple[str, ...] = ()

    source_type = SourceType.GIT

    @property
    def version(self) -> dict[str, str]:
        """Return the version mapping of the source."""
        version = {}
        if self.commit is not None:
            version["commit"] = self.commit
        if self.ref is not None:
            version["ref"] = self.ref
        return version

    @property
    def metadata(self) -> dict[str, Any]:
        """Return the metadata mapping of the source."""
        return {"url": self.url, "refs": list(self.refs)}


@dataclass(frozen=True)
class ArchiveSource:
    """A downloadable source archive that contributed to the image."""

    url: str

    source_type = SourceType.ARCHIVE

    @property
    def version(self) -> None:
        """Archives do not carry a version."""
        return None

    @property
    def metadata(self) -> dict[str, Any]:
        """Return the metadata mapping of the source."""
        return {"url": self.url}


@dataclass(frozen=True)
class DebianPackageListSource:
    """The package list of the image, identified by the digest of its snapshot."""

    digest: str
    snapshot: PackageListSnapshot
    url: str = PACKAGE_DATABASE_URL

    source_type = SourceType.DEBIAN_PACKAGE_LIST

    @property
    def version(self) -> str:
        """Return the digest of the snapshot."""
        return self.digest

    @property
    def metadata(self) -> dict[str, Any]:
        """Return the metadata mapping of the source."""
        return {"url": self.url, **self.snapshot.to_dict()}


DependencySource = GitSource | ArchiveSource | DebianPackageListSource


@dataclass(frozen=True)
class Dependency:
    """An entry of the ``dependencies`` list of the label."""

    source: DependencySource
    type: str = PACKAGE_DEPENDENCY_TYPE

    @property
    def key(self) -> tuple[str, str]:
        """Return the identity used to deduplicate dependencies."""
        return (self.source.source_type.value, self.source.url)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON representation."""
        source: dict[str, Any] = {"type": self.source.source_type.value}
        version = self.source.version
        if version is not None:
            source["version"] = version
        source["metadata"] = self.source.metadata
        return {"type": self.type, "source": source}


@dataclass(frozen=True)
class Provenance:
    """The tool that produced the label."""

    name: str
    version: str
    url: str

    def to_dict(self) -> dict[str, str]:
        """Return the JSON representation."""
        return {"name": self.name, "version": self.version, "url": self.url}


@dataclass(frozen=True)
class Metadata:
    """The metadata label of an image."""

    base: Mapping[str, str] = field(default_factory=dict)
    provenance: tuple[Provenance, ...] = ()
    dependencies: tuple[Dependency, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON representation."""
        return {
            "base": dict(self.base),
            "provenance": [entry.to_dict() for entry in self.provenance],
            "dependencies": [dependency.to_dict() for dependency in self.dependencies],
        }
