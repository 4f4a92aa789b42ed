"""
Logger adapters - implement LoggerProtocol for the two entry points.

- CLILogger: interactive commands (stdout, verbose gate)
- HookLogger: hook invocations (debug log file + stderr, only when debugging)

Hook invocations must never write to stdout: the host tool reads it.
"""

from __future__ import annotations

import sys
from datetime import UTC, datetime
from pathlib import Path


class CLILogger:
    """
    Logger implementation for CLI commands (implements LoggerProtocol).

    Outputs messages to stdout with optional verbose mode.
    """

    def __init__(self, verbose: bool = False) -> None:
        """
        Initialize CLI logger.

        Args:
            verbose: If True, show info/debug messages. If False, only warnings/errors.
        """
        self.verbose = verbose

    async def info(self, message: str) -> None:
        """Log info message (only if verbose)."""
        if self.verbose:
            print(f'[INFO] {message}')

    async def debug(self, message: str) -> None:
        """Log debug message (only if verbose)."""
        if self.verbose:
            print(f'[DEBUG] {message}')

    async def warning(self, message: str) -> None:
        """Log warning message."""
        print(f'[WARNING] {message}')

    async def error(self, message: str) -> None:
        """Log error message."""
        print(f'[ERROR] {message}', file=sys.stderr)


class HookLogger:
    """
    Logger for hook invocations.

    Disabled by default. With DROID_SYNC_DEBUG=true every message is appended
    to the debug log and echoed to stderr; failures to write the log are
    ignored so diagnostics can never break a hook.
    """

    def __init__(self, log_path: Path, enabled: bool, event: str = '') -> None:
        self.log_path = log_path
        self.enabled = enabled
        self.event = event

    def _timestamp(self) -> str:
        return datetime.now(UTC).strftime('%Y-%m-%d %H:%M:%S')

    def _write(self, level: str, message: str) -> None:
        if not self.enabled:
            return
        prefix = f'[droid-sync:{self.event}]' if self.event else '[droid-sync]'
        line = f'[{self._timestamp()}] [{level}] {prefix} {message}'
        print(line, file=sys.stderr)
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with self.log_path.open('a', encoding='utf-8') as f:
                f.write(line + '\n')
        except OSError:
            pass

    async def info(self, message: str) -> None:
        self._write('INFO', message)

    async def debug(self, message: str) -> None:
        self._write('DEBUG', message)

    async def warning(self, message: str) -> None:
        self._write('WARNING', message)

    async def error(self, message: str) -> None:
        self._write('ERROR', message)
