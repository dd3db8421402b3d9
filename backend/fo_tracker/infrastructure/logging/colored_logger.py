"""Colored flush logger: ANSI-colored console logging for the save pipeline.

Each flush pass goes through the same stages; colouring them makes it easy
to follow which rows were written, skipped or failed in the terminal.

Color scheme:
    🔵 Blue   : Pre-validation
    🟣 Magenta: Concurrency token check
    🟢 Green  : Row writes / completion
    🟡 Yellow : Conflicts
    🟠 Cyan   : Store refresh
    🔴 Red    : Errors
    ⚪ Gray   : Counts / timing
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


# ── Flush Stage Definitions ──────────────────────────────────────────

class FlushStage:
    """Predefined flush stages with colors and icons."""

    VALIDATE = ("VALIDATE", _Colors.BLUE, "🔎")
    TOKENS = ("TOKENS", _Colors.MAGENTA, "🔐")
    WRITE = ("WRITE", _Colors.GREEN, "💾")
    CONFLICT = ("CONFLICT", _Colors.YELLOW, "⚠️")
    REFRESH = ("REFRESH", _Colors.CYAN, "🔄")
    FLUSH = ("FLUSH", _Colors.WHITE, "⚙️")
    ERROR = ("ERROR", _Colors.RED, "❌")
    COMPLETE = ("COMPLETE", _Colors.GREEN, "✅")


# ── FlushLogger ──────────────────────────────────────────────────────

class FlushLogger:
    """Color-coded logger for flush passes.

    Usage:
        log = FlushLogger("FlushCoordinator")
        log.step_start(FlushStage.TOKENS, "Fetching tokens", rows=3)
        log.step_warning(FlushStage.CONFLICT, "FO 1001 changed remotely")
        log.stats(succeeded=2, conflicted=1, failed=0)
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)
        self._component = component_name

    @staticmethod
    def _details(kwargs: dict[str, Any]) -> str:
        if not kwargs:
            return ""
        details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
        return f" {_Colors.GRAY}({details}){_Colors.RESET}"

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the start of a flush stage with its color."""
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        self._logger.info(formatted + self._details(kwargs))

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the successful completion of a flush stage."""
        label, color, icon = stage
        formatted = (
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        self._logger.info(formatted + self._details(kwargs))

    def step_warning(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log a skipped row or other non-fatal problem in yellow."""
        label, _, icon = stage
        formatted = (
            f"{_Colors.YELLOW}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.YELLOW}{message}{_Colors.RESET}"
        )
        self._logger.warning(formatted + self._details(kwargs))

    def step_error(self, stage: tuple[str, str, str], message: str, error: Exception | None = None) -> None:
        """Log a flush stage error in red."""
        label, _, icon = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}❌ [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        """Log additional detail (gray/dimmed)."""
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        self._logger.debug(formatted + self._details(kwargs))

    def separator(self, title: str = "") -> None:
        """Log a visual separator line."""
        if title:
            self._logger.info(
                f"{_Colors.GRAY}{'─' * 10} {title} {'─' * (50 - len(title))}{_Colors.RESET}"
            )
        else:
            self._logger.info(f"{_Colors.GRAY}{'─' * 60}{_Colors.RESET}")

    def stats(self, **kwargs: Any) -> None:
        """Log counts / timing information."""
        parts = [f"{_Colors.GRAY}{k}: {v}" for k, v in kwargs.items()]
        formatted = f"   {_Colors.GRAY}📈 {' | '.join(parts)}{_Colors.RESET}"
        self._logger.info(formatted)

    @contextmanager
    def timed_step(self, stage: tuple[str, str, str], message: str, **kwargs: Any):
        """Context manager that logs start/end with elapsed time.

        Usage:
            with log.timed_step(FlushStage.REFRESH, "Reloading rows"):
                await store.load()
        """
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message}: failed after {elapsed:.2f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message}: {elapsed:.2f}s", **kwargs)
