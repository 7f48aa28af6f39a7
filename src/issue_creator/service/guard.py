"""Guard scripts - shell checks that must pass before a ticket is created."""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger("issue_creator.service.guard")


@dataclass
class ScriptResult:
    """Outcome of a guard script run.

    Attributes:
        returncode: Exit status of the interpreter.
        output: Combined stdout and stderr.
    """

    returncode: int
    output: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


class ScriptRunner(Protocol):
    """Runs arbitrary shell text."""

    def run(self, script: str) -> ScriptResult:
        """Run a script and report its exit status and output."""
        ...


class BashScriptRunner:
    """Runs guard scripts from a temporary file with a shell interpreter."""

    def __init__(self, interpreter: str = "bash", timeout: int | None = None) -> None:
        """Initialize the runner.

        Args:
            interpreter: Shell used to execute the script file.
            timeout: Optional timeout in seconds. None means no timeout.
        """
        self.interpreter = interpreter
        self.timeout = timeout

    def run(self, script: str) -> ScriptResult:
        """Write the script to a temporary executable file and run it.

        Raises:
            OSError: If the file can't be written or the interpreter can't start.
            subprocess.TimeoutExpired: If a timeout is set and exceeded.
        """
        with tempfile.NamedTemporaryFile(
            "w", prefix="issue_creator_", suffix=".sh", delete=False
        ) as f:
            f.write(script)
            path = f.name

        try:
            os.chmod(path, 0o755)
            logger.debug("Running guard script %s with %s", path, self.interpreter)
            completed = subprocess.run(
                [self.interpreter, path],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.timeout,
            )
        finally:
            os.unlink(path)

        return ScriptResult(returncode=completed.returncode, output=completed.stdout or "")
