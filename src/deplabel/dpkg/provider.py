# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module builds the package-list dependency of an image."""

import logging
import re

from deplabel.collaborators import ImageReader
from deplabel.dpkg.digest import compute_digest
from deplabel.dpkg.status_parser import parse_status_db
from deplabel.metadata import DebianPackageListSource, Dependency, PackageListSnapshot

logger: logging.Logger = logging.getLogger(__name__)


def parse_apt_sources(content: str) -> list[str]:
    """Return the source entries of an apt ``sources.list`` file.

    Comments and blank lines are dropped, and whitespace inside an entry is collapsed.

    Parameters
    ----------
    content : str
        The content of the ``sources.list`` file.

    Returns
    -------
    list[str]
        The source entries in file order.

    Examples
    --------
    >>> parse_apt_sources("# comment\\ndeb  http://archive.ubuntu.com/ubuntu/ bionic main # trailing\\n\\n")
    ['deb http://archive.ubuntu.com/ubuntu/ bionic main']
    """
    entries = []
    for line in content.splitlines():
        entry = line.split("#", 1)[0].strip()
        if entry:
            entries.append(" ".join(entry.split()))
    return entries


def parse_deb822_sources(content: str) -> list[str]:
    """Return the source entries of an apt ``.sources`` file in the deb822 format, in one-line form.

    Each stanza produces one entry per combination of its ``Types``, ``URIs`` and ``Suites`` fields.
    Stanzas with ``Enabled: no`` are skipped.

    Parameters
    ----------
    content : str
        The content of the ``.sources`` file.

    Returns
    -------
    list[str]
        The source entries in file order.

    Examples
    --------
    >>> parse_deb822_sources("Types: deb\\nURIs: http://archive.ubuntu.com/ubuntu/\\nSuites: noble noble-updates\\n"
    ...                      "Components: main universe\\n")
    ['deb http://archive.ubuntu.com/ubuntu/ noble main universe',
     'deb http://archive.ubuntu.com/ubuntu/ noble-updates main universe']
    """
    entries = []
    for stanza in re.split(r"\n[ \t]*\n", content):
        fields: dict[str, str] = {}
        for line in stanza.splitlines():
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            key, sep, value = line.partition(":")
            if sep and not line[0].isspace():
                fields[key.strip().lower()] = value.strip()

        if not fields or fields.get("enabled", "yes").lower() == "no":
            continue

        components = fields.get("components", "")
        for source_type in fields.get("types", "").split():
            for uri in fields.get("uris", "").split():
                for suite in fields.get("suites", "").split():
                    entries.append(" ".join(part for part in (source_type, uri, suite, components) if part))

    return entries


def build_package_list_dependency(image_reader: ImageReader) -> Dependency:
    """Build the dependency describing the package list of an image.

    Parameters
    ----------
    image_reader : ImageReader
        The reader of the image.

    Returns
    -------
    Dependency
        The ``debian-package-list`` dependency.

    Raises
    ------
    PackageDatabaseNotFoundError
        If the image has no package-status database.
    MalformedEntryError
        If the package-status database is malformed.
    """
    raw_database = image_reader.read_package_database()
    packages = parse_status_db(raw_database.decode("utf-8", errors="replace"))
    snapshot = PackageListSnapshot(apt_sources=tuple(image_reader.read_apt_sources()), packages=tuple(packages))
    digest = compute_digest(snapshot)
    logger.info("Found %d installed packages with digest %s.", len(packages), digest)

    return Dependency(source=DebianPackageListSource(digest=digest, snapshot=snapshot))
