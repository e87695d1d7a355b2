# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module contains the loader for YAML files."""

import logging
import os
from typing import Any

import yamale
import yaml
from yamale.schema import Schema
from yaml import YAMLError

logger: logging.Logger = logging.getLogger(__name__)

#: The implicit types which ``StringScalarLoader`` does not resolve.
STRING_SCALAR_TAGS = {
    "tag:yaml.org,2002:bool",
    "tag:yaml.org,2002:int",
    "tag:yaml.org,2002:float",
    "tag:yaml.org,2002:timestamp",
}


class StringScalarLoader(yaml.SafeLoader):  # pylint: disable=too-many-ancestors
    """A safe yaml loader which loads numbers, booleans and timestamps as strings.

    For example, ``commit: 0123456`` is loaded as ``{"commit": "0123456"}``. Empty values are still loaded as None.
    """


StringScalarLoader.yaml_implicit_resolvers = {
    first_char: [(tag, regexp) for tag, regexp in resolvers if tag not in STRING_SCALAR_TAGS]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class YamlLoader:
    """The loader for loading yaml content from files."""

    @staticmethod
    def _load_yaml_content(path: os.PathLike | str, loader: type[yaml.SafeLoader] | None = None) -> list:
        """Load yaml content of a file using the yamale library.

        We use the default pyyaml parser for yamale. If ``loader`` is set, the file is parsed with that pyyaml
        loader instead and the documents are returned in the same format as yamale.

        When loading a yaml file, this method handles printing the location that error exits (if any).

        Parameters
        ----------
        path : PathLike
            The path to the yaml file we want to load.
        loader : type[yaml.SafeLoader] | None
            The pyyaml loader to parse the file with (default None).

        Returns
        -------
        list:
            The yaml content list as returned by yamale or an empty list if errors.
        """
        try:
            logger.debug("Loading yaml from file %s", path)
            if loader is None:
                return list(yamale.make_data(path))

            with open(path, encoding="utf-8") as yaml_file:
                documents = list(yaml.load_all(yaml_file, Loader=loader))  # nosec B506

            # yamale.make_data returns a single empty document for empty files.
            return [(document, path) for document in documents] or [({}, path)]
        except YAMLError as error:
            abs_path = os.path.abspath(path)

            if hasattr(error, "problem_mark"):
                mark = error.problem_mark
                err_pos = f"{mark.line + 1}:{mark.column + 1}"
                logger.error("Cannot read yaml file %s:%s", abs_path, err_pos)
            else:
                logger.error("Cannot read yaml file %s", abs_path)

            return []
        except (FileNotFoundError, IsADirectoryError):
            logger.error("Cannot find file %s.", path)
            return []
        except UnicodeDecodeError:
            logger.error("Cannot decode file %s.", path)
            return []

    @classmethod
    def validate_yaml_data(cls, schema: Schema, data: list) -> bool:
        """Validate the data according to the yaml schema using the yamale library.

        Parameters
        ----------
        schema : Schema
            The yamale schema.
        data : list
            The data loaded by using ``yamale.make_data``.

        Returns
        -------
        bool
            True if the data is valid else False.
        """
        try:
            logger.debug("Validate data %s with schema %s.", str(data), str(schema.dict))
            yamale.validate(schema, data)
            return True
        except yamale.YamaleError as error:
            logger.error("Yaml data validation failed.")
            for result in error.results:
                for err_str in result.errors:
                    logger.error("\t%s", err_str)
            return False

    @classmethod
    def load(
        cls, path: os.PathLike | str, schema: Schema | None = None, loader: type[yaml.SafeLoader] | None = None
    ) -> Any:
        """Load and return a Python object from a yaml file.

        If ``schema`` is provided. This method will validate the loaded content against the
        schema. Files with more than one yaml document are rejected.

        Parameters
        ----------
        path : os.PathLike
            The path to the yaml file.
        schema : Schema | None
            The schema to validate the yaml content against (default None).
        loader : type[yaml.SafeLoader] | None
            The pyyaml loader to parse the file with. The yamale parser is used if not set (default None).

        Returns
        -------
        Any
            The Python object from the yaml file or None if errors.
        """
        logger.debug("Loading yaml content for %s", path)
        loaded_data = YamlLoader._load_yaml_content(path=path, loader=loader)
        if not loaded_data:
            logger.error("Error while loading the yaml file %s.", path)
            return None

        if len(loaded_data) > 1:
            logger.error("The yaml file %s contains more than one document.", path)
            return None

        if schema and not YamlLoader.validate_yaml_data(schema, loaded_data):
            logger.error("The yaml content in %s is invalid according to the schema.", path)
            return None

        # yamale.make_data returns a list of tuples: (loaded_data, file_path).
        return loaded_data[0][0]
