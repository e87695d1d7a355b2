# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module contains the writer of the metadata label."""

import json
import logging

from deplabel.collaborators import MetadataWriter
from deplabel.errors import MetadataWriteError
from deplabel.metadata import Metadata

logger: logging.Logger = logging.getLogger(__name__)


class JSONMetadataWriter(MetadataWriter):
    """Write the metadata label as a JSON file."""

    def __init__(self, file_path: str, indent: int | None = None, encoding: str = "utf-8") -> None:
        """Initialize instance.

        Parameters
        ----------
        file_path : str
            The path to the destination file.
        indent : int | None
            The indentation of the JSON output. The output is compact if this is None.
        encoding : str, optional
            The encoding used to write the file, by default "utf-8".
        """
        self.file_path = file_path
        self.indent = indent
        self.encoding = encoding

    def write(self, metadata: Metadata) -> None:
        """Write the metadata label to the destination file.

        Parameters
        ----------
        metadata : Metadata
            The metadata label.

        Raises
        ------
        MetadataWriteError
            If the destination file cannot be written.
        """
        data = json.dumps(metadata.to_dict(), indent=self.indent)
        try:
            with open(self.file_path, mode="w", encoding=self.encoding) as file:
                logger.info("Writing the metadata label to %s", self.file_path)
                file.write(data)
        except OSError as error:
            raise MetadataWriteError(f"cannot write the metadata label to {self.file_path}: {error}") from error
