# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module implements a rich console handler for logging."""

import logging
import time
from typing import Any

from rich.console import Group, RenderableType
from rich.live import Live
from rich.logging import RichHandler
from rich.panel import Panel
from rich.status import Status
from rich.table import Table


class RichConsoleHandler(RichHandler):
    """A rich console handler showing the progress of a labelling run with live updates."""

    def __init__(self, *args: Any, verbose: bool = False, **kwargs: Any) -> None:
        """
        Initialize the RichConsoleHandler.

        Parameters
        ----------
        verbose : bool, optional
            if True, enables verbose logging, by default False
        args
            Variable length argument list.
        kwargs
            Arbitrary keyword arguments.
        """
        super().__init__(*args, **kwargs)
        self.setLevel(logging.DEBUG)
        self.command = ""
        self.logs: list[str] = []
        self.warning_logs: list[str] = []
        self.description_table_content: dict[str, str | Status] = {
            "Image:": Status("[green]Processing[/]"),
            "Git Repository:": Status("[green]Processing[/]"),
            "Additional Sources:": Status("[green]Processing[/]"),
            "Dependencies:": Status("[green]Processing[/]"),
            "Package List Digest:": Status("[green]Processing[/]"),
            "Metadata File:": Status("[green]Processing[/]"),
        }
        self.dump_defaults: str | Status = Status("[green]Generating[/]")
        self.verbose = verbose
        self.verbose_panel = Panel(
            "\n".join(self.logs),
            title="Verbose Mode",
            title_align="left",
            border_style="blue",
        )
        self.error_message: str = ""
        self.live = Live(get_renderable=self.make_layout, refresh_per_second=10)

    def emit(self, record: logging.LogRecord) -> None:
        """
        Emit a log record with rich formatting.

        Parameters
        ----------
        record : logging.LogRecord
            The log record to be emitted.
        """
        log_time = time.strftime("%H:%M:%S")
        msg = self.format(record)

        if record.levelno >= logging.ERROR:
            self.logs.append(f"[red][ERROR][/red] {log_time} {msg}")
        elif record.levelno >= logging.WARNING:
            self.logs.append(f"[yellow][WARNING][/yellow] {log_time} {msg}")
            self.warning_logs.append(f"[yellow][WARNING][/yellow] {msg}")
        else:
            self.logs.append(f"[blue][INFO][/blue] {log_time} {msg}")

        self.verbose_panel.renderable = "\n".join(self.logs)

    def add_description_table_content(self, key: str, value: str | Status) -> None:
        """
        Add or update a key-value pair in the description table.

        Parameters
        ----------
        key : str
            The key to be added or updated.
        value : str or Status
            The value associated with the key.
        """
        self.description_table_content[key] = value

    def update_dump_defaults(self, value: str | Status) -> None:
        """
        Update the dump defaults status.

        Parameters
        ----------
        value : str or Status
            The path of the dumped file, or its generation status.
        """
        self.dump_defaults = value

    def mark_failed(self) -> None:
        """Replace the entries still being processed with a failed status."""
        for key, value in self.description_table_content.items():
            if isinstance(value, Status):
                self.description_table_content[key] = "[bold red]FAILED[/]"
        if isinstance(self.dump_defaults, Status):
            self.dump_defaults = "[bold red]FAILED[/]"

    def make_layout(self) -> Group:
        """
        Create the layout for the live console display.

        Returns
        -------
        Group
            A rich Group object containing the layout for the live console display.
        """
        layout: list[RenderableType] = []
        if self.command == "label":
            description_table = Table(show_header=False, box=None)
            description_table.add_column("Details", justify="left")
            description_table.add_column("Value", justify="left")
            for field, content in self.description_table_content.items():
                description_table.add_row(field, content)
            layout = layout + [description_table]
            if self.warning_logs:
                warning_panel = Panel(
                    "\n".join(self.warning_logs),
                    title="Warnings",
                    title_align="left",
                    border_style="yellow",
                )
                layout = layout + ["", warning_panel]
        elif self.command == "dump-defaults":
            dump_defaults_table = Table(show_header=False, box=None)
            dump_defaults_table.add_column("Detail", justify="left")
            dump_defaults_table.add_column("Value", justify="left")
            dump_defaults_table.add_row("Dump Defaults", self.dump_defaults)
            layout = layout + [dump_defaults_table]
        if self.verbose:
            layout = layout + ["", self.verbose_panel]
        if self.error_message:
            error_panel = Panel(
                self.error_message,
                title="Error",
                title_align="left",
                border_style="red",
            )
            layout = layout + ["", error_panel]
        return Group(*layout)

    def error(self, message: str) -> None:
        """
        Handle error logging.

        Parameters
        ----------
        message : str
            The error message to be logged.
        """
        self.error_message = message

    def start(self, command: str) -> None:
        """
        Start the live console display.

        Parameters
        ----------
        command : str
            The command being executed (e.g., "label", "dump-defaults").
        """
        self.command = command
        if not self.live.is_started:
            self.live.start()

    def close(self) -> None:
        """Stop the live console display."""
        self.live.stop()


class AccessHandler:
    """A class to manage access to the RichConsoleHandler instance."""

    def __init__(self) -> None:
        """Initialize the AccessHandler with a default RichConsoleHandler instance."""
        self.rich_handler = RichConsoleHandler()

    def set_handler(self, verbose: bool) -> RichConsoleHandler:
        """
        Set a new RichConsoleHandler instance with the specified verbosity.

        Parameters
        ----------
        verbose : bool
            if True, enables verbose logging

        Returns
        -------
        RichConsoleHandler
            The new RichConsoleHandler instance.
        """
        self.rich_handler = RichConsoleHandler(verbose=verbose)
        return self.rich_handler

    def get_handler(self) -> RichConsoleHandler:
        """
        Get the current RichConsoleHandler instance.

        Returns
        -------
        RichConsoleHandler
            The current RichConsoleHandler instance.
        """
        return self.rich_handler


access_handler = AccessHandler()
