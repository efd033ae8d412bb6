"""Shell execution utilities.

Provides safe subprocess execution with proper error handling.
"""

import subprocess
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a shell command execution.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0

    @property
    def error_summary(self) -> str:
        """Short description of a failure for error messages.

        Returns the last non-empty stderr line, or the exit code when the
        command wrote nothing to stderr.
        """
        lines = [line for line in self.stderr.strip().splitlines() if line.strip()]
        if lines:
            return lines[-1].strip()
        return f"exit code {self.returncode}"

    def lines(self, separator: str = "\n") -> list[str]:
        """Split stdout into records.

        Each record has its trailing separator removed; a final
        unterminated record is kept, an empty trailing one is not.

        Args:
            separator: Record terminator, "\\0" for NUL-delimited output.
        """
        records = self.stdout.split(separator)
        if records[-1] == "":
            records.pop()
        return records


def run_command(
    args: list[str],
    *,
    timeout: float | None = 60.0,
    cwd: str | None = None,
) -> CommandResult:
    """Execute a shell command and return the result.

    Output is decoded as UTF-8 with surrogateescape, the way file names
    are decoded everywhere else, so bytes that are not valid UTF-8 survive
    and map back to the original name.

    Args:
        args: Command and arguments to execute.
        timeout: Maximum time in seconds to wait for command.
        cwd: Working directory for the command. If None, uses current directory.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        subprocess.TimeoutExpired: If command exceeds timeout.
        FileNotFoundError: If command executable is not found.
    """
    result = subprocess.run(
        args,
        capture_output=True,
        encoding="utf-8",
        errors="surrogateescape",
        check=False,
        timeout=timeout,
        cwd=cwd,
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )
