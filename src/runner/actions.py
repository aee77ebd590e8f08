# src/runner/actions.py — v1
"""CI runner collaborator: outputs, secret masking, failure reporting.

Outputs go to the file named by ``GITHUB_OUTPUT``; without it the legacy
``::set-output`` command is printed.
"""

from __future__ import annotations

import logging
import os
import sys
import tempfile
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import TextIO

from s3cache.logging.masking import register_secret

logger = logging.getLogger(__name__)


class ActionsRunner:
    """Thin wrapper over the runner's environment-file protocol."""

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self._env = os.environ if environ is None else environ
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def _command(self, command: str, value: str, **properties: str) -> None:
        props = ",".join(f"{k}={v}" for k, v in properties.items())
        prefix = f"::{command} {props}::" if props else f"::{command}::"
        print(f"{prefix}{value}", file=self.stream, flush=True)

    def set_secret(self, value: str) -> None:
        """Mask ``value`` in our logs and in the runner's log view."""
        if not value:
            return
        register_secret(value)
        self._command("add-mask", value)

    def set_output(self, name: str, value: str) -> None:
        """Publish a step output."""
        output_file = self._env.get("GITHUB_OUTPUT", "")
        if output_file:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            with open(output_file, "a", encoding="utf-8") as fh:
                fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            self._command("set-output", value, name=name)
        logger.debug("Output %s=%s", name, value)

    def set_failed(self, message: str) -> int:
        """Report a fatal error; returns the process exit code."""
        logger.error(message)
        return 1

    def temp_root(self) -> Path:
        """Runner-provided temp directory, or the system one."""
        return Path(self._env.get("RUNNER_TEMP") or tempfile.gettempdir())
