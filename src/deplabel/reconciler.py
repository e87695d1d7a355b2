# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module merges the dependency streams of an image into the final metadata label."""

import logging
from collections.abc import Iterable, Iterator, Mapping

from deplabel.collaborators import HeadCommit
from deplabel.metadata import Dependency, GitSource, Metadata, Provenance

logger: logging.Logger = logging.getLogger(__name__)


class DependencyAccumulator:
    """An ordered set of dependencies keyed by ``(source.type, source.url)``.

    The first dependency added for a key is kept; later ones are dropped.
    """

    def __init__(self, dependencies: Iterable[Dependency] = ()) -> None:
        self._dependencies: dict[tuple[str, str], Dependency] = {}
        self.extend(dependencies)

    def __contains__(self, dependency: object) -> bool:
        if not isinstance(dependency, Dependency):
            return False
        return dependency.key in self._dependencies

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self._dependencies.values())

    def __len__(self) -> int:
        return len(self._dependencies)

    def add(self, dependency: Dependency) -> bool:
        """Add a dependency unless one with the same key exists.

        Parameters
        ----------
        dependency : Dependency
            The dependency to add.

        Returns
        -------
        bool
            True if the dependency was added, False if it is a duplicate.
        """
        if dependency.key in self._dependencies:
            logger.debug("Dropping duplicated %s dependency %s.", dependency.key[0], dependency.key[1])
            return False
        self._dependencies[dependency.key] = dependency
        return True

    def extend(self, dependencies: Iterable[Dependency]) -> list[Dependency]:
        """Add dependencies in order and return the ones which were not duplicates."""
        return [dependency for dependency in dependencies if self.add(dependency)]

    @property
    def dependencies(self) -> tuple[Dependency, ...]:
        """Return the dependencies in first-seen order."""
        return tuple(self._dependencies.values())


def build_git_dependency(head_commit: HeadCommit) -> Dependency:
    """Return the dependency describing the git repository the image was built from.

    Parameters
    ----------
    head_commit : HeadCommit
        The state of HEAD reported by the VCS inspector.

    Returns
    -------
    Dependency
        The git dependency.
    """
    return Dependency(
        source=GitSource(url=head_commit.remote_url, commit=head_commit.commit_sha, refs=head_commit.refs)
    )


def reconcile(
    package_list_dependency: Dependency | None,
    git_dependency: Dependency | None,
    additional_dependencies: Iterable[Dependency],
) -> tuple[Dependency, ...]:
    """Merge the dependency streams in precedence order.

    The package-list dependency comes first, then the dependency of the host git repository, then the
    dependencies of the additional sources files in declaration order. Duplicates by
    ``(source.type, source.url)`` are dropped, the first occurrence wins.

    Parameters
    ----------
    package_list_dependency : Dependency | None
        The dependency describing the package list of the image.
    git_dependency : Dependency | None
        The dependency describing the host git repository, if any.
    additional_dependencies : Iterable[Dependency]
        The dependencies from the additional sources files.

    Returns
    -------
    tuple[Dependency, ...]
        The merged dependencies.
    """
    accumulator = DependencyAccumulator()
    for dependency in (package_list_dependency, git_dependency):
        if dependency is not None:
            accumulator.add(dependency)
    accumulator.extend(additional_dependencies)

    return accumulator.dependencies


def build_metadata(
    dependencies: Iterable[Dependency],
    base: Mapping[str, str] | None = None,
    provenance: Iterable[Provenance] = (),
) -> Metadata:
    """Build the metadata label of an image.

    Parameters
    ----------
    dependencies : Iterable[Dependency]
        The reconciled dependencies.
    base : Mapping[str, str] | None
        The os-release fields of the image.
    provenance : Iterable[Provenance]
        The tools that produced the label.

    Returns
    -------
    Metadata
        The metadata label.
    """
    return Metadata(base=dict(base or {}), provenance=tuple(provenance), dependencies=tuple(dependencies))
