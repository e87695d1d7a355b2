# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module tests reading the files of an image."""

import io
import json
import os
import tarfile
from pathlib import Path

import pytest

from deplabel.errors import ImageReadError, PackageDatabaseNotFoundError
from deplabel.image.reader import ImageTarReader, RootfsReader, parse_os_release

STATUS_DB = b"Package: base-files\nStatus: install ok installed\nArchitecture: amd64\nVersion: 10.1ubuntu2.8\n"
OS_RELEASE = b'NAME="Ubuntu"\nVERSION="18.04.6 LTS (Bionic Beaver)"\nID=ubuntu\nVERSION_ID="18.04"\n'
SOURCES_LIST = (
    b"deb http://archive.ubuntu.com/ubuntu/ bionic main\n"
    b"# deb-src http://archive.ubuntu.com/ubuntu/ bionic main\n"
)
PPA_LIST = b"deb http://ppa.launchpad.net/deadsnakes/ppa/ubuntu bionic main\n"
DEB822_SOURCES = b"Types: deb\nURIs: http://archive.ubuntu.com/ubuntu/\nSuites: bionic-updates\nComponents: main\n"


def _add_file(layer_tar: tarfile.TarFile, name: str, content: bytes) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(content)
    layer_tar.addfile(info, io.BytesIO(content))


def _add_symlink(layer_tar: tarfile.TarFile, name: str, target: str) -> None:
    info = tarfile.TarInfo(name)
    info.type = tarfile.SYMTYPE
    info.linkname = target
    layer_tar.addfile(info)


def _build_layer(files: dict[str, bytes], symlinks: dict[str, str] | None = None) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as layer_tar:
        for name, content in files.items():
            _add_file(layer_tar, name, content)
        for name, target in (symlinks or {}).items():
            _add_symlink(layer_tar, name, target)
    return buffer.getvalue()


def _build_image_tar(path: Path, layers: list[bytes]) -> str:
    """Write an image tar in the format of ``docker save`` and return its path."""
    layer_names = [f"layer{index}/layer.tar" for index in range(len(layers))]
    manifest = [{"Config": "config.json", "RepoTags": ["example:latest"], "Layers": layer_names}]
    image_path = str(path.joinpath("image.tar"))
    with tarfile.open(image_path, mode="w") as image_tar:
        _add_file(image_tar, "manifest.json", json.dumps(manifest).encode("utf-8"))
        _add_file(image_tar, "config.json", b"{}")
        for name, layer in zip(layer_names, layers):
            _add_file(image_tar, name, layer)
    return image_path


@pytest.fixture()
def image_tar(tmp_path: Path) -> str:
    """Return an image tar with three layers."""
    base_layer = _build_layer(
        {
            "var/lib/dpkg/status": b"Package: old\nArchitecture: amd64\nVersion: 1.0\n",
            "usr/lib/os-release": OS_RELEASE,
            "etc/apt/sources.list": SOURCES_LIST,
            "etc/apt/sources.list.d/removed.list": b"deb http://removed.example.com/ bionic main\n",
            "etc/apt/sources.list.d/ppa.list": PPA_LIST,
        },
        symlinks={"etc/os-release": "../usr/lib/os-release"},
    )
    update_layer = _build_layer(
        {
            "./var/lib/dpkg/status": STATUS_DB,
            "etc/apt/sources.list.d/.wh.removed.list": b"",
            "etc/apt/sources.list.d/updates.sources": DEB822_SOURCES,
        }
    )
    cleanup_layer = _build_layer({"tmp/.wh..wh..opq": b"", "tmp/build.log": b"log"})
    return _build_image_tar(tmp_path, [base_layer, update_layer, cleanup_layer])


@pytest.fixture()
def rootfs(tmp_path: Path) -> str:
    """Return an unpacked root filesystem."""
    root = tmp_path.joinpath("rootfs")
    files = {
        "var/lib/dpkg/status": STATUS_DB,
        "usr/lib/os-release": OS_RELEASE,
        "etc/apt/sources.list": SOURCES_LIST,
        "etc/apt/sources.list.d/ppa.list": PPA_LIST,
        "etc/apt/sources.list.d/updates.sources": DEB822_SOURCES,
        "etc/apt/sources.list.d/ignored.save": b"deb http://ignored.example.com/ bionic main\n",
    }
    for name, content in files.items():
        file_path = root.joinpath(name)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(content)
    os.symlink("../usr/lib/os-release", root.joinpath("etc", "os-release"))
    return str(root)


EXPECTED_APT_SOURCES = [
    "deb http://archive.ubuntu.com/ubuntu/ bionic main",
    "deb http://ppa.launchpad.net/deadsnakes/ppa/ubuntu bionic main",
    "deb http://archive.ubuntu.com/ubuntu/ bionic-updates main",
]

EXPECTED_OS_RELEASE = {
    "NAME": "Ubuntu",
    "VERSION": "18.04.6 LTS (Bionic Beaver)",
    "ID": "ubuntu",
    "VERSION_ID": "18.04",
}


def test_parse_os_release() -> None:
    """Test removing the shell quoting of os-release values."""
    assert parse_os_release(OS_RELEASE.decode("utf-8")) == EXPECTED_OS_RELEASE
    assert parse_os_release("PRETTY_NAME='Debian GNU/Linux 12 (bookworm)'\nINVALID\n") == {
        "PRETTY_NAME": "Debian GNU/Linux 12 (bookworm)"
    }


def test_image_tar_reader(image_tar: str) -> None:
    """Test that the files of the upper layers replace the files of the lower layers."""
    reader = ImageTarReader(image_tar)
    assert reader.read_package_database() == STATUS_DB
    assert reader.read_apt_sources() == EXPECTED_APT_SOURCES
    assert reader.read_os_release() == EXPECTED_OS_RELEASE


def test_image_tar_reader_whiteouts(image_tar: str) -> None:
    """Test that whiteout files remove the files of the lower layers."""
    reader = ImageTarReader(image_tar)
    assert reader.read_file("etc/apt/sources.list.d/removed.list") is None
    assert reader.read_file("tmp/build.log") == b"log"
    assert reader.read_file("/etc/apt/sources.list.d/.wh.removed.list") is None


def test_image_tar_reader_without_package_database(tmp_path: Path) -> None:
    """Test that an image without a package-status database is rejected."""
    image_path = _build_image_tar(tmp_path, [_build_layer({"etc/os-release": OS_RELEASE})])
    with pytest.raises(PackageDatabaseNotFoundError):
        ImageTarReader(image_path).read_package_database()


def test_image_tar_reader_invalid_tar(tmp_path: Path) -> None:
    """Test that a file which is not an image tar is rejected."""
    image_path = tmp_path.joinpath("image.tar")
    image_path.write_bytes(b"not a tar file")
    with pytest.raises(ImageReadError):
        ImageTarReader(str(image_path)).read_package_database()


def test_rootfs_reader(rootfs: str) -> None:
    """Test reading the files of an unpacked root filesystem."""
    reader = RootfsReader(rootfs)
    assert reader.read_package_database() == STATUS_DB
    assert reader.read_apt_sources() == EXPECTED_APT_SOURCES
    assert reader.read_os_release() == EXPECTED_OS_RELEASE


def test_rootfs_reader_without_os_release(tmp_path: Path) -> None:
    """Test that the base is empty when there is no os-release file."""
    assert not RootfsReader(str(tmp_path)).read_os_release()


def test_rootfs_reader_symlink_loop(tmp_path: Path) -> None:
    """Test that a symbolic link loop is rejected."""
    tmp_path.joinpath("etc").mkdir()
    os.symlink("os-release", tmp_path.joinpath("etc", "os-release"))
    with pytest.raises(ImageReadError):
        RootfsReader(str(tmp_path)).read_os_release()


def test_rootfs_reader_missing_directory(tmp_path: Path) -> None:
    """Test that a root filesystem which is not a directory is rejected."""
    with pytest.raises(ImageReadError):
        RootfsReader(str(tmp_path.joinpath("missing")))
