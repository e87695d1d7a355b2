# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This is the main entrypoint to run deplabel."""

import argparse
import logging
import os
import sys
from importlib import metadata as importlib_metadata

from deplabel.collaborators import ImageReader
from deplabel.config.defaults import create_defaults, load_defaults
from deplabel.console import RichConsoleHandler, access_handler
from deplabel.errors import DeplabelError
from deplabel.image.reader import ImageTarReader, RootfsReader
from deplabel.labeler import Labeler
from deplabel.output_reporter.writer import JSONMetadataWriter
from deplabel.util import NetworkReachabilityChecker
from deplabel.vcs.git_inspector import GitInspector

logger: logging.Logger = logging.getLogger(__name__)


def label_image(label_args: argparse.Namespace) -> int:
    """Generate the metadata label of an image and write it to the metadata file."""
    rich_handler = access_handler.get_handler()

    image_reader: ImageReader
    try:
        if label_args.image_tar:
            if not os.path.isfile(label_args.image_tar):
                logger.critical('The image tar "%s" does not exist.', label_args.image_tar)
                return os.EX_NOINPUT
            image_reader = ImageTarReader(label_args.image_tar)
            rich_handler.add_description_table_content("Image:", label_args.image_tar)
        else:
            image_reader = RootfsReader(label_args.rootfs)
            rich_handler.add_description_table_content("Image:", label_args.rootfs)

        labeler = Labeler(
            image_reader=image_reader,
            vcs_inspector=GitInspector(),
            reachability_checker=NetworkReachabilityChecker(),
            ignore_validation_errors=label_args.ignore_validation_errors,
        )
        metadata = labeler.generate(label_args.git, label_args.additional_sources_file or [])

        JSONMetadataWriter(label_args.metadata_file, indent=label_args.indent).write(metadata)
        rich_handler.add_description_table_content("Metadata File:", label_args.metadata_file)
    except DeplabelError as error:
        logger.error(error)
        rich_handler.error(str(error))
        rich_handler.mark_failed()
        return 1

    return os.EX_OK


def perform_action(action_args: argparse.Namespace) -> int:
    """Perform the indicated action of deplabel."""
    match action_args.action:
        case "dump-defaults":
            # Create the defaults.ini file in the output dir and exit.
            rich_handler = access_handler.get_handler()
            if not create_defaults(action_args.output_dir, os.getcwd()):
                rich_handler.mark_failed()
                return os.EX_CANTCREAT
            rich_handler.update_dump_defaults(os.path.join(action_args.output_dir, "defaults.ini"))
            return os.EX_OK

        case "label":
            return label_image(action_args)

        case _:
            logger.error("deplabel does not support command option %s.", action_args.action)
            return os.EX_USAGE


def main(argv: list[str] | None = None) -> None:
    """Execute deplabel as a standalone command-line tool.

    Parameters
    ----------
    argv: list[str] | None
        Command-line arguments.
        If ``argv`` is ``None``, argparse automatically looks at ``sys.argv``.
        Hence, we set ``argv = None`` by default.
    """
    main_parser = argparse.ArgumentParser(prog="deplabel")

    main_parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {importlib_metadata.version('deplabel')}",
        help="Show deplabel's version number and exit",
    )

    main_parser.add_argument(
        "-v",
        "--verbose",
        help="Run deplabel with more debug logs",
        action="store_true",
    )

    main_parser.add_argument(
        "-dp",
        "--defaults-path",
        default="",
        help="The path to the defaults configuration file.",
    )

    # Add sub parsers for each action.
    sub_parser = main_parser.add_subparsers(dest="action", help="Run deplabel <action> --help for help")

    label_parser = sub_parser.add_parser(name="label", description="Generate the metadata label of an image.")

    image_group = label_parser.add_mutually_exclusive_group(required=True)
    image_group.add_argument(
        "-t",
        "--image-tar",
        type=str,
        help="The path to an image tar created with `docker save`.",
    )
    image_group.add_argument(
        "-r",
        "--rootfs",
        type=str,
        help="The path to the unpacked root filesystem of an image.",
    )

    label_parser.add_argument(
        "-g",
        "--git",
        required=False,
        type=str,
        help="The path to the git repository the image was built from.",
    )

    label_parser.add_argument(
        "-a",
        "--additional-sources-file",
        required=False,
        action="append",
        help="The path to an additional sources file. This option can be repeated.",
    )

    label_parser.add_argument(
        "--ignore-validation-errors",
        required=False,
        action="store_true",
        help="Keep the additional sources that cannot be reached and report them as warnings.",
    )

    label_parser.add_argument(
        "-m",
        "--metadata-file",
        required=True,
        type=str,
        help="The path to write the metadata label to.",
    )

    label_parser.add_argument(
        "--indent",
        required=False,
        type=int,
        default=None,
        help="The indentation of the metadata file. The file is compact if this is not set.",
    )

    # Dump the default values.
    dump_parser = sub_parser.add_parser(
        name="dump-defaults", description="Dumps the defaults.ini file to the output directory."
    )
    dump_parser.add_argument(
        "-o",
        "--output-dir",
        default=os.getcwd(),
        help="The directory to dump the defaults.ini file to.",
    )

    args = main_parser.parse_args(argv)

    if not args.action:
        main_parser.print_help()
        sys.exit(os.EX_USAGE)

    if args.verbose:
        log_level = logging.DEBUG
        log_format = "%(asctime)s [%(name)s:%(funcName)s:%(lineno)d] [%(levelname)s] %(message)s"
    else:
        log_level = logging.INFO
        log_format = "%(asctime)s [%(levelname)s] %(message)s"

    # Warnings and errors always reach stderr, so that they can be seen when the console is not a terminal.
    st_handler = logging.StreamHandler(sys.stderr)
    st_handler.setLevel(logging.DEBUG if args.verbose else logging.WARNING)
    logging.basicConfig(format=log_format, handlers=[st_handler], force=True, level=log_level)

    # Add the rich console handler to the deplabel logger only.
    rich_handler: RichConsoleHandler = access_handler.set_handler(args.verbose)
    logging.getLogger("deplabel").addHandler(rich_handler)

    # Load the default values from defaults.ini files.
    if not load_defaults(args.defaults_path):
        logger.error("Exiting because the defaults configuration could not be loaded.")
        sys.exit(os.EX_NOINPUT)

    rich_handler.start(args.action)
    try:
        exit_code = perform_action(args)
    finally:
        rich_handler.close()
        logging.getLogger("deplabel").removeHandler(rich_handler)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
