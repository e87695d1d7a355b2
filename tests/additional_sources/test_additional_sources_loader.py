# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module tests loading additional sources files."""

import os
from pathlib import Path

import pytest

from deplabel.additional_sources.loader import ArchiveEntry, VcsEntry, load_additional_sources
from deplabel.errors import UnparsableSourceError

RESOURCES_DIR = Path(__file__).parent.joinpath("resources")


def test_load_single_archive() -> None:
    """Test loading a file with one archive."""
    document = load_additional_sources(os.path.join(RESOURCES_DIR, "single_archive.yml"))
    assert document.entries == (ArchiveEntry(url="https://example.com/ca-certificates_20180409.tar.xz"),)
    assert document.archives == [ArchiveEntry(url="https://example.com/ca-certificates_20180409.tar.xz")]
    assert not document.vcs


def test_load_empty_archives() -> None:
    """Test that an empty archives section is valid."""
    document = load_additional_sources(os.path.join(RESOURCES_DIR, "empty_archives.yml"))
    assert not document.entries


def test_load_single_vcs() -> None:
    """Test loading a file with one git repository pinned to a commit."""
    document = load_additional_sources(os.path.join(RESOURCES_DIR, "single_vcs.yml"))
    assert document.vcs == [VcsEntry(protocol="git", url="git@github.com:example/example.git", commit="abc123")]


def test_load_vcs_with_ref() -> None:
    """Test loading a git repository declared with a ref only."""
    document = load_additional_sources(os.path.join(RESOURCES_DIR, "vcs_with_ref.yml"))
    assert document.vcs == [VcsEntry(protocol="git", url="https://github.com/example/other.git", ref="v1.2.0")]


def test_load_numeric_versions() -> None:
    """Test that commits and refs which look like numbers are kept as written."""
    document = load_additional_sources(os.path.join(RESOURCES_DIR, "vcs_numeric_versions.yml"))
    assert document.vcs == [
        VcsEntry(protocol="git", url="git@github.com:example/example.git", commit="1234567"),
        VcsEntry(protocol="git", url="https://github.com/example/octal.git", commit="0123456"),
        VcsEntry(protocol="git", url="https://github.com/example/other.git", ref="1.10"),
    ]


def test_load_keeps_declaration_order() -> None:
    """Test that the sections and entries are kept in the order they are declared."""
    document = load_additional_sources(os.path.join(RESOURCES_DIR, "mixed_sources.yml"))
    assert document.entries == (
        VcsEntry(protocol="git", url="https://github.com/example/example.git", commit="abc123"),
        ArchiveEntry(url="https://example.com/first.tar.gz"),
        ArchiveEntry(url="https://example.com/second.zip"),
    )


def test_load_unsupported_protocol() -> None:
    """Test that the protocol is not checked while loading."""
    document = load_additional_sources(os.path.join(RESOURCES_DIR, "unsupported_protocol.yml"))
    assert document.vcs[0].protocol == "hg"


@pytest.mark.parametrize(
    "file_name",
    [
        "empty.yml",
        "invalid_yaml.yml",
        "unknown_key.yml",
        "vcs_without_version.yml",
        "does_not_exist.yml",
    ],
)
def test_load_unparsable_file(file_name: str) -> None:
    """Test that files which cannot be loaded are reported with their path."""
    path = os.path.join(RESOURCES_DIR, file_name)
    with pytest.raises(UnparsableSourceError) as error:
        load_additional_sources(path)

    assert str(error.value) == f"could not parse additional sources file: {path}"
    assert error.value.path == path
