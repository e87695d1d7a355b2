# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module parses the dpkg package-status database (``/var/lib/dpkg/status``) into package records."""

import logging
import re

from deplabel.errors import MalformedEntryError
from deplabel.metadata import PackageRecord, PackageSource

logger: logging.Logger = logging.getLogger(__name__)

# A ``Source`` field is either ``name`` or ``name (version)``.
SOURCE_FIELD_PATTERN = re.compile(r"^(?P<name>[^\s(]+)(?:\s*\((?P<version>[^)]+)\))?$")

# Stanzas are separated by one or more blank lines.
STANZA_SEPARATOR_PATTERN = re.compile(r"\n[ \t]*\n")

REQUIRED_FIELDS = ("Package", "Version", "Architecture")


def get_upstream_version(version: str) -> str:
    """Return the upstream part of a Debian version string.

    The epoch (``N:``) prefix and the Debian revision (everything from the last ``-``) are removed.

    Parameters
    ----------
    version : str
        The full Debian version.

    Returns
    -------
    str
        The upstream version.

    Examples
    --------
    >>> get_upstream_version("8.3.0-6ubuntu1~18.04.1")
    '8.3.0'
    >>> get_upstream_version("1:2.30-0ubuntu2")
    '2.30'
    >>> get_upstream_version("4.2")
    '4.2'
    """
    epoch, sep, remain = version.partition(":")
    if sep and epoch.isdecimal():
        version = remain

    upstream, sep, _ = version.rpartition("-")
    if sep and upstream:
        return upstream

    return version


def _parse_fields(entry: str) -> dict[str, str]:
    """Return the ``Key: Value`` fields of a stanza, with continuation lines joined to their field."""
    fields: dict[str, str] = {}
    current_key = ""
    for line in entry.splitlines():
        if not line.strip():
            continue

        if line[0] in (" ", "\t"):
            # Continuation lines (e.g. the long part of ``Description``) are only kept for completeness.
            if current_key:
                fields[current_key] = f"{fields[current_key]}\n{line.strip()}"
            continue

        key, sep, value = line.partition(":")
        if not sep:
            logger.debug("Ignoring line without a field name in the package-status database: %s", line)
            continue

        current_key = key.strip()
        fields[current_key] = value.strip()

    return fields


def parse_status_entry(entry: str) -> PackageRecord:
    """Parse one stanza of the package-status database.

    Parameters
    ----------
    entry : str
        The stanza content.

    Returns
    -------
    PackageRecord
        The package record of the stanza.

    Raises
    ------
    MalformedEntryError
        If the stanza misses one of the ``Package``, ``Version`` or ``Architecture`` fields.
    """
    fields = _parse_fields(entry)

    for required_field in REQUIRED_FIELDS:
        if not fields.get(required_field):
            raise MalformedEntryError(
                f"the package-status entry does not contain a {required_field} field: {entry.strip()[:80]!r}"
            )

    package = fields["Package"]
    version = fields["Version"]
    source_package = package
    source_version = version

    source_field = fields.get("Source")
    if source_field:
        match = SOURCE_FIELD_PATTERN.match(source_field)
        if match is None:
            raise MalformedEntryError(f"the Source field of package {package} is malformed: {source_field!r}")
        source_package = match.group("name")
        if match.group("version"):
            source_version = match.group("version").strip()

    return PackageRecord(
        package=package,
        version=version,
        architecture=fields["Architecture"],
        source=PackageSource(
            package=source_package,
            version=source_version,
            upstream_version=get_upstream_version(source_version),
        ),
    )


def _is_installed(entry: str) -> bool:
    """Return False if the stanza has a ``Status`` field that is not an installed state."""
    for line in entry.splitlines():
        if line.startswith("Status:"):
            return line.split()[-1] == "installed"
    return True


def parse_status_db(content: str) -> list[PackageRecord]:
    """Parse the whole package-status database.

    Stanzas of packages which are not installed (e.g. ``deinstall ok config-files``) are skipped.
    A malformed stanza aborts the whole parse.

    Parameters
    ----------
    content : str
        The content of the package-status database.

    Returns
    -------
    list[PackageRecord]
        The package records in database order.

    Raises
    ------
    MalformedEntryError
        If any stanza is malformed.
    """
    packages = []
    for entry in STANZA_SEPARATOR_PATTERN.split(content.replace("\r\n", "\n")):
        if not entry.strip():
            continue
        if not _is_installed(entry):
            logger.debug("Skipping package-status entry that is not installed.")
            continue
        packages.append(parse_status_entry(entry))

    logger.debug("Parsed %d packages from the package-status database.", len(packages))
    return packages
