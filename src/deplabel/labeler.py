# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module generates the metadata label of an image from its collaborators."""

import logging
from collections.abc import Iterable

import deplabel
from deplabel.additional_sources.validator import AdditionalSourcesValidator
from deplabel.collaborators import ImageReader, ReachabilityChecker, VcsInspector
from deplabel.config.defaults import defaults
from deplabel.console import access_handler
from deplabel.dpkg.provider import build_package_list_dependency
from deplabel.metadata import DebianPackageListSource, Dependency, Metadata, Provenance
from deplabel.reconciler import DependencyAccumulator, build_git_dependency, build_metadata, reconcile

logger: logging.Logger = logging.getLogger(__name__)


def get_provenance() -> Provenance:
    """Return the provenance entry of the labelling tool."""
    return Provenance(
        name=defaults.get("provenance", "name", fallback="deplabel"),
        version=deplabel.__version__,
        url=defaults.get("provenance", "url", fallback=""),
    )


class Labeler:
    """Generate the metadata label of an image."""

    def __init__(
        self,
        image_reader: ImageReader,
        vcs_inspector: VcsInspector,
        reachability_checker: ReachabilityChecker,
        ignore_validation_errors: bool = False,
    ) -> None:
        """Initialize instance.

        Parameters
        ----------
        image_reader : ImageReader
            The reader of the image to label.
        vcs_inspector : VcsInspector
            The inspector of git repositories.
        reachability_checker : ReachabilityChecker
            The checker of the declared additional sources.
        ignore_validation_errors : bool
            If True, sources that fail reachability checks are kept with a warning.
        """
        self.image_reader = image_reader
        self.vcs_inspector = vcs_inspector
        self.validator = AdditionalSourcesValidator(
            reachability_checker=reachability_checker,
            vcs_inspector=vcs_inspector,
            ignore_validation_errors=ignore_validation_errors,
        )

    def generate(self, git_path: str | None, additional_sources_paths: Iterable[str] = ()) -> Metadata:
        """Generate the metadata label.

        Parameters
        ----------
        git_path : str | None
            The path to the git repository the image was built from, if any.
        additional_sources_paths : Iterable[str]
            The paths to the additional sources files, in the order they were given.

        Returns
        -------
        Metadata
            The metadata label.

        Raises
        ------
        DeplabelError
            If any step of the generation fails.
        """
        rich_handler = access_handler.get_handler()

        package_list_dependency = build_package_list_dependency(self.image_reader)
        if isinstance(package_list_dependency.source, DebianPackageListSource):
            rich_handler.add_description_table_content("Package List Digest:", package_list_dependency.source.digest)

        git_dependency: Dependency | None = None
        if git_path:
            git_dependency = build_git_dependency(self.vcs_inspector.resolve_head_commit(git_path))
            rich_handler.add_description_table_content("Git Repository:", git_dependency.source.url)
        else:
            rich_handler.add_description_table_content("Git Repository:", "None")

        accumulator = DependencyAccumulator(
            dependency for dependency in (package_list_dependency, git_dependency) if dependency is not None
        )
        paths = list(additional_sources_paths)
        additional_dependencies = self.validator.process_files(paths, accumulator)
        rich_handler.add_description_table_content("Additional Sources:", str(len(paths)))

        dependencies = reconcile(package_list_dependency, git_dependency, additional_dependencies)
        rich_handler.add_description_table_content("Dependencies:", str(len(dependencies)))

        return build_metadata(
            dependencies,
            base=self.image_reader.read_os_release(),
            provenance=[get_provenance()],
        )
