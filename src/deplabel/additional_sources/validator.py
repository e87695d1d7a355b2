# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module turns additional sources files into dependencies.

Each file goes through the following steps:

1. The file is loaded and validated against the schema.
2. Every entry is classified: archives must have a supported extension and vcs entries must use git.
   Failures at this step are always fatal.
3. Every entry which is not a duplicate is validated against the network. The checks of one file run
   concurrently and are joined in declaration order before the file's dependencies are accumulated.
4. Failed checks are fatal unless validation errors are ignored, in which case a warning is logged and
   the unvalidated dependency is kept.
"""

import logging
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor

from deplabel.additional_sources.loader import AdditionalSourcesDocument, ArchiveEntry, load_additional_sources
from deplabel.collaborators import ReachabilityChecker, UrlKind, VcsInspector
from deplabel.config.defaults import defaults
from deplabel.errors import SourceUnreachableError, UnsupportedExtensionError, UnsupportedVcsProtocolError
from deplabel.metadata import ArchiveSource, Dependency, GitSource
from deplabel.reconciler import DependencyAccumulator
from deplabel.vcs.git_url import is_valid_git_remote

logger: logging.Logger = logging.getLogger(__name__)

SUPPORTED_VCS_PROTOCOL = "git"


def get_archive_extensions() -> list[str]:
    """Return the supported archive extensions from the ini configuration."""
    return defaults.get_list(
        "additional_sources",
        "archive_extensions",
        fallback=[".zip", ".tar", ".tgz", ".tar.gz", ".tbz2", ".tar.bz2", ".txz", ".tar.xz"],
    )


def has_supported_extension(url: str, extensions: list[str]) -> bool:
    """Return True if the last path segment of ``url`` ends with one of ``extensions``.

    Parameters
    ----------
    url : str
        The archive URL.
    extensions : list[str]
        The supported extensions.

    Returns
    -------
    bool
        True if the extension is supported else False.

    Examples
    --------
    >>> has_supported_extension("https://example.com/a/b.tar.xz?download=1", [".tar.xz"])
    True
    >>> has_supported_extension("https://example.com/b.tar.xz/", [".tar.xz"])
    False
    """
    path = url.split("#", 1)[0].split("?", 1)[0]
    last_segment = path.rsplit("/", 1)[-1]
    return any(last_segment.endswith(extension) for extension in extensions)


class AdditionalSourcesValidator:
    """Build and validate the dependencies declared in additional sources files."""

    def __init__(
        self,
        reachability_checker: ReachabilityChecker,
        vcs_inspector: VcsInspector,
        ignore_validation_errors: bool = False,
        max_workers: int | None = None,
    ) -> None:
        """Initialize instance.

        Parameters
        ----------
        reachability_checker : ReachabilityChecker
            The checker used to validate that the declared sources exist.
        vcs_inspector : VcsInspector
            The inspector used to resolve declared refs to commits.
        ignore_validation_errors : bool
            If True, failed reachability checks are reported as warnings.
        max_workers : int | None
            The number of concurrent checks per file. Loaded from ``defaults.ini`` if not set.
        """
        self.reachability_checker = reachability_checker
        self.vcs_inspector = vcs_inspector
        self.ignore_validation_errors = ignore_validation_errors
        self.max_workers = max_workers or defaults.getint("additional_sources", "max_workers", fallback=4)
        self.archive_extensions = get_archive_extensions()

    def classify(self, document: AdditionalSourcesDocument) -> list[Dependency]:
        """Return the unvalidated dependencies of a document in declaration order.

        Raises
        ------
        UnsupportedExtensionError
            If an archive URL does not have a supported extension.
        UnsupportedVcsProtocolError
            If a vcs entry does not use git.
        """
        dependencies = []
        for entry in document.entries:
            if isinstance(entry, ArchiveEntry):
                if not has_supported_extension(entry.url, self.archive_extensions):
                    raise UnsupportedExtensionError(entry.url)
                dependencies.append(Dependency(source=ArchiveSource(url=entry.url)))
                continue

            if entry.protocol != SUPPORTED_VCS_PROTOCOL:
                raise UnsupportedVcsProtocolError(entry.protocol)
            dependencies.append(Dependency(source=GitSource(url=entry.url, commit=entry.commit, ref=entry.ref)))

        return dependencies

    def validate(self, dependency: Dependency) -> Dependency:
        """Check that the source of a dependency can be reached.

        The ref of a git source declared without a commit is resolved against the remote.

        Parameters
        ----------
        dependency : Dependency
            The dependency to validate.

        Returns
        -------
        Dependency
            The validated dependency.

        Raises
        ------
        SourceUnreachableError
            If the source cannot be reached.
        """
        source = dependency.source
        if isinstance(source, ArchiveSource):
            self.reachability_checker.check_url(source.url, UrlKind.ARCHIVE)
            return dependency

        if isinstance(source, GitSource):
            if not is_valid_git_remote(source.url):
                raise SourceUnreachableError(source.url, "not a valid git remote")
            self.reachability_checker.check_url(source.url, UrlKind.GIT_REMOTE)
            if source.commit is None and source.ref is not None:
                commit = self.vcs_inspector.resolve_ref(source.url, source.ref)
                return Dependency(source=GitSource(url=source.url, commit=commit, ref=source.ref))
            return dependency

        return dependency

    def _validate_or_warn(self, dependency: Dependency, path: str) -> Dependency:
        """Validate a dependency, downgrading failures to warnings if validation errors are ignored."""
        try:
            return self.validate(dependency)
        except SourceUnreachableError as error:
            if not self.ignore_validation_errors:
                raise
            logger.warning("Ignoring validation error in %s: %s", path, error)
            return dependency

    def process_document(
        self, document: AdditionalSourcesDocument, accumulator: DependencyAccumulator
    ) -> list[Dependency]:
        """Add the dependencies of a document to the accumulator.

        Nothing is added to the accumulator if the document fails.

        Parameters
        ----------
        document : AdditionalSourcesDocument
            The loaded document.
        accumulator : DependencyAccumulator
            The dependencies accumulated so far.

        Returns
        -------
        list[Dependency]
            The dependencies added by this document.

        Raises
        ------
        UnsupportedExtensionError
            If an archive URL does not have a supported extension.
        UnsupportedVcsProtocolError
            If a vcs entry does not use git.
        SourceUnreachableError
            If a source cannot be reached and validation errors are not ignored.
        """
        try:
            declared = self.classify(document)
        except (UnsupportedExtensionError, UnsupportedVcsProtocolError):
            logger.error("The additional sources file %s declares an unsupported source.", document.path)
            raise

        candidates = DependencyAccumulator()
        for dependency in declared:
            if dependency in accumulator:
                logger.debug("Dropping %s declared in %s as it is already a dependency.", dependency.key, document.path)
                continue
            candidates.add(dependency)

        if not candidates:
            return []

        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        futures: list[Future[Dependency]] = [
            executor.submit(self._validate_or_warn, dependency, document.path) for dependency in candidates
        ]
        try:
            # Results are joined in declaration order, whatever order the checks complete in.
            validated = [future.result() for future in futures]
        except SourceUnreachableError as error:
            logger.error("Cannot validate %s declared in %s.", error.url, document.path)
            raise
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        added = accumulator.extend(validated)
        logger.info("Added %d dependencies from the additional sources file %s.", len(added), document.path)
        return added

    def process_files(self, paths: Iterable[str], accumulator: DependencyAccumulator) -> list[Dependency]:
        """Add the dependencies of the additional sources files to the accumulator, in the order of ``paths``.

        Parameters
        ----------
        paths : Iterable[str]
            The paths to the additional sources files.
        accumulator : DependencyAccumulator
            The dependencies accumulated so far.

        Returns
        -------
        list[Dependency]
            The dependencies added by all the files.

        Raises
        ------
        UnparsableSourceError
            If a file cannot be loaded.
        UnsupportedExtensionError
            If an archive URL does not have a supported extension.
        UnsupportedVcsProtocolError
            If a vcs entry does not use git.
        SourceUnreachableError
            If a source cannot be reached and validation errors are not ignored.
        """
        added = []
        for path in paths:
            document = load_additional_sources(path)
            added.extend(self.process_document(document, accumulator))
        return added
