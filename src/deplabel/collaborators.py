# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module contains the interfaces of the collaborators used to build a metadata label.

The engine only consumes the outputs of these collaborators as plain data. The concrete implementations
live in :mod:`deplabel.image`, :mod:`deplabel.vcs`, :mod:`deplabel.util` and :mod:`deplabel.output_reporter`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from deplabel.metadata import Metadata


class UrlKind(str, Enum):
    """The kinds of URLs a reachability check can be performed on."""

    ARCHIVE = "archive"
    GIT_REMOTE = "git-remote"


@dataclass(frozen=True)
class HeadCommit:
    """The state of the HEAD of a git repository."""

    #: The URL of the remote the repository tracks.
    remote_url: str

    #: The SHA of the commit at HEAD.
    commit_sha: str

    #: The tags pointing at HEAD.
    refs: tuple[str, ...] = ()


class ImageReader(ABC):
    """The reader of the files of an image."""

    @abstractmethod
    def read_package_database(self) -> bytes:
        """Return the raw content of the package-status database.

        Raises
        ------
        PackageDatabaseNotFoundError
            If the image has no package-status database.
        """

    @abstractmethod
    def read_apt_sources(self) -> list[str]:
        """Return the apt source entries of the image, in the order apt reads them."""

    @abstractmethod
    def read_os_release(self) -> dict[str, str]:
        """Return the fields of the os-release file of the image, or an empty dict if there is none."""


class VcsInspector(ABC):
    """The inspector of version control repositories."""

    @abstractmethod
    def resolve_head_commit(self, repo_path: str) -> HeadCommit:
        """Return the remote URL and HEAD commit of a local repository.

        Raises
        ------
        NotARepoError
            If ``repo_path`` is not a git repository.
        NoRemoteError
            If the repository has no remote.
        """

    @abstractmethod
    def resolve_ref(self, url: str, ref: str) -> str:
        """Return the commit SHA a ref (branch or tag) of a remote repository points at.

        Raises
        ------
        SourceUnreachableError
            If the remote cannot be listed or does not have the ref.
        """


class ReachabilityChecker(ABC):
    """The checker of the availability of declared sources."""

    @abstractmethod
    def check_url(self, url: str, kind: UrlKind) -> None:
        """Check that ``url`` can be reached.

        Raises
        ------
        SourceUnreachableError
            If the URL cannot be reached.
        """


class MetadataWriter(ABC):
    """The writer of the final metadata label."""

    @abstractmethod
    def write(self, metadata: Metadata) -> None:
        """Persist the metadata label.

        Raises
        ------
        MetadataWriteError
            If the label cannot be written. The error names the destination.
        """
