# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module contains error classes for deplabel."""


class DeplabelError(Exception):
    """The base class for deplabel errors."""


class ConfigurationError(DeplabelError):
    """Happens when there is an error in the configuration (.ini) file."""


class MalformedEntryError(DeplabelError):
    """Happens when a stanza of the package-status database misses a required field."""


class DigestError(DeplabelError):
    """Happens when a package-list snapshot cannot be serialized for digesting."""


class UnparsableSourceError(DeplabelError):
    """Happens when an additional sources file cannot be loaded or does not match the schema."""

    def __init__(self, path: str) -> None:
        super().__init__(f"could not parse additional sources file: {path}")
        self.path = path


class UnsupportedExtensionError(DeplabelError):
    """Happens when an archive url does not end with a supported archive extension."""

    def __init__(self, url: str) -> None:
        super().__init__(f"unsupported extension for url: {url}")
        self.url = url


class UnsupportedVcsProtocolError(DeplabelError):
    """Happens when a vcs entry declares a protocol other than git."""

    def __init__(self, protocol: str) -> None:
        super().__init__(f"unsupported vcs protocol: {protocol}")
        self.protocol = protocol


class SourceUnreachableError(DeplabelError):
    """Happens when a declared source fails validation against the network.

    This is the only validation error that can be downgraded to a warning.
    """

    def __init__(self, url: str, cause: str) -> None:
        super().__init__(f"error validating source {url}: {cause}")
        self.url = url
        self.cause = cause


class NoRemoteError(DeplabelError):
    """Happens when the git repository has no remote configured."""


class NotARepoError(DeplabelError):
    """Happens when the given path is not a git repository."""


class PackageDatabaseNotFoundError(DeplabelError):
    """Happens when the image does not contain a package-status database."""


class ImageReadError(DeplabelError):
    """Happens when the image tar or root filesystem cannot be read."""


class MetadataWriteError(DeplabelError):
    """Happens when the metadata label cannot be written to its destination."""
