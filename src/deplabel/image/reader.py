# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module reads the files of an image from an image tar or from an unpacked root filesystem."""

import json
import logging
import os
import posixpath
import shlex
import tarfile
from abc import abstractmethod

from deplabel.collaborators import ImageReader
from deplabel.config.defaults import defaults
from deplabel.dpkg.provider import parse_apt_sources, parse_deb822_sources
from deplabel.errors import ImageReadError, PackageDatabaseNotFoundError

logger: logging.Logger = logging.getLogger(__name__)

# The maximum number of symbolic links followed when resolving a path.
MAX_SYMLINK_DEPTH = 16

WHITEOUT_PREFIX = ".wh."
OPAQUE_WHITEOUT = ".wh..wh..opq"


def normalize_image_path(path: str) -> str:
    """Return ``path`` relative to the root of the image.

    Examples
    --------
    >>> normalize_image_path("./etc/../etc/os-release")
    'etc/os-release'
    >>> normalize_image_path("/var/lib/dpkg/status")
    'var/lib/dpkg/status'
    """
    normalized = posixpath.normpath(posixpath.join("/", path))
    return normalized.lstrip("/")


def parse_os_release(content: str) -> dict[str, str]:
    """Parse the content of an ``os-release`` file.

    Parameters
    ----------
    content : str
        The content of the file.

    Returns
    -------
    dict[str, str]
        The fields of the file, with the shell quoting of values removed.

    Examples
    --------
    >>> parse_os_release('NAME="Ubuntu"\\nVERSION_ID="18.04"\\n# comment\\nID=ubuntu\\n')
    {'NAME': 'Ubuntu', 'VERSION_ID': '18.04', 'ID': 'ubuntu'}
    """
    fields = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        try:
            fields[key.strip()] = " ".join(shlex.split(value))
        except ValueError:
            logger.debug("Cannot unquote the value of %s in os-release.", key)
            fields[key.strip()] = value.strip()
    return fields


class FileTreeImageReader(ImageReader):
    """The base class of the readers which look up files in the file tree of an image."""

    @abstractmethod
    def _read_link(self, path: str) -> str | None:
        """Return the target of ``path`` if it is a symbolic link, else None."""

    @abstractmethod
    def _read_regular_file(self, path: str) -> bytes | None:
        """Return the content of ``path``, or None if it does not exist or is not a file."""

    @abstractmethod
    def _list_dir(self, path: str) -> list[str]:
        """Return the names of the entries of the directory ``path``."""

    def _resolve(self, path: str) -> str:
        """Follow the symbolic links of the last component of ``path`` inside the image."""
        path = normalize_image_path(path)
        for _ in range(MAX_SYMLINK_DEPTH):
            target = self._read_link(path)
            if target is None:
                return path
            path = normalize_image_path(posixpath.join(posixpath.dirname(path), target))
        raise ImageReadError(f"too many levels of symbolic links for {path}")

    def read_file(self, path: str) -> bytes | None:
        """Return the content of the file at ``path`` in the image, or None if it does not exist."""
        return self._read_regular_file(self._resolve(path))

    def read_package_database(self) -> bytes:
        """Return the raw content of the package-status database.

        Raises
        ------
        PackageDatabaseNotFoundError
            If the image has no package-status database.
        """
        path = defaults.get("image", "package_database", fallback="var/lib/dpkg/status")
        content = self.read_file(path)
        if content is None:
            raise PackageDatabaseNotFoundError(f"the image does not contain a package-status database at /{path}")
        return content

    def read_apt_sources(self) -> list[str]:
        """Return the apt source entries of ``sources.list`` and of the ``sources.list.d`` directory.

        Files of the directory are read in alphabetical order, as apt does.
        """
        sources = []
        content = self.read_file(defaults.get("image", "apt_sources_list", fallback="etc/apt/sources.list"))
        if content is not None:
            sources.extend(parse_apt_sources(content.decode("utf-8", errors="replace")))

        sources_dir = defaults.get("image", "apt_sources_dir", fallback="etc/apt/sources.list.d")
        for name in sorted(self._list_dir(self._resolve(sources_dir))):
            if name.endswith(".list"):
                parse = parse_apt_sources
            elif name.endswith(".sources"):
                parse = parse_deb822_sources
            else:
                continue
            content = self.read_file(posixpath.join(sources_dir, name))
            if content is not None:
                sources.extend(parse(content.decode("utf-8", errors="replace")))

        return sources

    def read_os_release(self) -> dict[str, str]:
        """Return the fields of the first os-release file found in the image."""
        for path in defaults.get_list("image", "os_release", fallback=["etc/os-release", "usr/lib/os-release"]):
            content = self.read_file(path)
            if content is not None:
                return parse_os_release(content.decode("utf-8", errors="replace"))

        logger.warning("The image does not contain an os-release file.")
        return {}


class RootfsReader(FileTreeImageReader):
    """Read the files of an image unpacked in a local directory."""

    def __init__(self, root_path: str) -> None:
        if not os.path.isdir(root_path):
            raise ImageReadError(f"the root filesystem {root_path} is not a directory")
        self.root_path = root_path

    def _local_path(self, path: str) -> str:
        return os.path.join(self.root_path, *normalize_image_path(path).split("/"))

    def _read_link(self, path: str) -> str | None:
        local_path = self._local_path(path)
        if not os.path.islink(local_path):
            return None
        return os.readlink(local_path)

    def _read_regular_file(self, path: str) -> bytes | None:
        local_path = self._local_path(path)
        if not os.path.isfile(local_path):
            return None
        try:
            with open(local_path, "rb") as file:
                return file.read()
        except OSError as error:
            raise ImageReadError(f"cannot read {local_path}: {error}") from error

    def _list_dir(self, path: str) -> list[str]:
        local_path = self._local_path(path)
        if not os.path.isdir(local_path):
            return []
        return os.listdir(local_path)


class ImageTarReader(FileTreeImageReader):
    """Read the files of an image saved with ``docker save``.

    The layers listed in ``manifest.json`` are applied in order, including the whiteout files which delete
    the files of the lower layers.
    """

    def __init__(self, tar_path: str) -> None:
        self.tar_path = tar_path
        # Maps each path of the image to the layer that provides it and the tar member in that layer.
        self._index: dict[str, tuple[str, tarfile.TarInfo]] | None = None

    def _load_index(self) -> dict[str, tuple[str, tarfile.TarInfo]]:
        if self._index is not None:
            return self._index

        index: dict[str, tuple[str, tarfile.TarInfo]] = {}
        try:
            with tarfile.open(self.tar_path, mode="r:*") as image_tar:
                manifest_file = image_tar.extractfile("manifest.json")
                if manifest_file is None:
                    raise ImageReadError(f"the image tar {self.tar_path} has no manifest.json")
                manifest = json.load(manifest_file)
                layers = manifest[0]["Layers"]
                logger.debug("Reading %d layers from %s.", len(layers), self.tar_path)

                for layer in layers:
                    layer_file = image_tar.extractfile(layer)
                    if layer_file is None:
                        raise ImageReadError(f"the layer {layer} of the image tar {self.tar_path} is not a file")
                    with tarfile.open(fileobj=layer_file, mode="r:*") as layer_tar:
                        for member in layer_tar.getmembers():
                            self._apply_member(index, layer, member)
        except (tarfile.TarError, OSError, KeyError, IndexError, TypeError, ValueError) as error:
            raise ImageReadError(f"cannot read the image tar {self.tar_path}: {error}") from error

        self._index = index
        return index

    @staticmethod
    def _apply_member(index: dict[str, tuple[str, tarfile.TarInfo]], layer: str, member: tarfile.TarInfo) -> None:
        path = normalize_image_path(member.name)
        directory, name = posixpath.split(path)

        if name == OPAQUE_WHITEOUT:
            prefix = f"{directory}/"
            for existing in [existing for existing in index if existing.startswith(prefix)]:
                del index[existing]
            return

        if name.startswith(WHITEOUT_PREFIX):
            removed = posixpath.join(directory, name[len(WHITEOUT_PREFIX) :])
            for existing in [
                existing for existing in index if existing == removed or existing.startswith(f"{removed}/")
            ]:
                del index[existing]
            return

        index[path] = (layer, member)

    def _read_link(self, path: str) -> str | None:
        entry = self._load_index().get(path)
        if entry is None or not entry[1].issym():
            return None
        return entry[1].linkname

    def _read_regular_file(self, path: str) -> bytes | None:
        entry = self._load_index().get(path)
        if entry is None:
            return None
        layer, member = entry
        if not (member.isfile() or member.islnk()):
            return None

        try:
            with tarfile.open(self.tar_path, mode="r:*") as image_tar:
                layer_file = image_tar.extractfile(layer)
                if layer_file is None:
                    return None
                with tarfile.open(fileobj=layer_file, mode="r:*") as layer_tar:
                    content = layer_tar.extractfile(member.name)
                    return content.read() if content is not None else None
        except (tarfile.TarError, OSError, KeyError) as error:
            raise ImageReadError(f"cannot read /{path} from the image tar {self.tar_path}: {error}") from error

    def _list_dir(self, path: str) -> list[str]:
        prefix = f"{path}/" if path else ""
        names = set()
        for existing in self._load_index():
            if existing.startswith(prefix) and existing != path:
                names.add(existing[len(prefix) :].split("/", 1)[0])
        return sorted(names)
