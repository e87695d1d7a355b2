# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module loads an additional sources file.

An additional sources file declares the archives and version control repositories which contributed to an
image but cannot be discovered from the image itself::

    archives:
      - url: https://example.com/ca-certificates_20180409.tar.xz
    vcs:
      - protocol: git
        url: git@github.com:org/name.git
        commit: 6d4b5c8e0c9a0f3f0d6b2e1f5a7c9d8e7f6a5b4c
      - protocol: git
        url: https://github.com/org/other.git
        ref: v1.2.0

The entries are kept in the order they are declared, including the order of the ``archives`` and ``vcs`` sections.
"""

import logging
import os
from dataclasses import dataclass

import yamale
from yamale.schema import Schema

from deplabel.errors import UnparsableSourceError
from deplabel.parsers.yaml.loader import StringScalarLoader, YamlLoader

logger: logging.Logger = logging.getLogger(__name__)

SCHEMA_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "additional_sources_schema.yaml")

ADDITIONAL_SOURCES_SCHEMA: Schema = yamale.make_schema(SCHEMA_PATH)


@dataclass(frozen=True)
class ArchiveEntry:
    """An archive declared in an additional sources file."""

    url: str


@dataclass(frozen=True)
class VcsEntry:
    """A version control repository declared in an additional sources file."""

    protocol: str
    url: str
    commit: str | None = None
    ref: str | None = None


@dataclass(frozen=True)
class AdditionalSourcesDocument:
    """The content of one additional sources file."""

    #: The path of the file the document was loaded from.
    path: str

    #: The declared entries, in declaration order.
    entries: tuple[ArchiveEntry | VcsEntry, ...] = ()

    @property
    def archives(self) -> list[ArchiveEntry]:
        """Return the archive entries."""
        return [entry for entry in self.entries if isinstance(entry, ArchiveEntry)]

    @property
    def vcs(self) -> list[VcsEntry]:
        """Return the version control entries."""
        return [entry for entry in self.entries if isinstance(entry, VcsEntry)]


def load_additional_sources(path: str) -> AdditionalSourcesDocument:
    """Load and validate an additional sources file.

    Parameters
    ----------
    path : str
        The path to the additional sources file.

    Returns
    -------
    AdditionalSourcesDocument
        The loaded document.

    Raises
    ------
    UnparsableSourceError
        If the file does not exist, is empty, is not valid yaml or does not match the schema.
    """
    content = YamlLoader.load(path, ADDITIONAL_SOURCES_SCHEMA, loader=StringScalarLoader)
    if not content:
        # Empty files are loaded as an empty mapping by yamale.
        raise UnparsableSourceError(path)

    entries: list[ArchiveEntry | VcsEntry] = []
    for section, values in content.items():
        for value in values or []:
            if section == "archives":
                entries.append(ArchiveEntry(url=value["url"].strip()))
                continue

            if not value.get("commit") and not value.get("ref"):
                logger.error("The vcs entry %s in %s declares neither a commit nor a ref.", value["url"], path)
                raise UnparsableSourceError(path)

            entries.append(
                VcsEntry(
                    protocol=value["protocol"].strip(),
                    url=value["url"].strip(),
                    commit=value.get("commit") or None,
                    ref=value.get("ref") or None,
                )
            )

    logger.debug("Loaded %d entries from the additional sources file %s.", len(entries), path)
    return AdditionalSourcesDocument(path=path, entries=tuple(entries))
