"""Error taxonomy shared by the CLI, the REPL and the assistant clients.

Every failure Holocron reports derives from HolocronError. Outside the REPL
the CLI turns it into a message plus a non-zero exit; inside the REPL it is
printed and control returns to the prompt.
"""

from __future__ import annotations


class HolocronError(Exception):
    """Base class for all user-facing Holocron failures."""

    exit_code = 1


# ── Configuration ────────────────────────────────────────────


class ConfigMissing(HolocronError):
    """No config file exists yet; first-run setup is required."""


class ConfigInvalid(HolocronError):
    """The config file exists but cannot be parsed or is incomplete."""


class ValidationFailure(HolocronError):
    """A user-supplied value (flag, prompt answer) was rejected."""


# ── Assistant ────────────────────────────────────────────────


class AssistantError(HolocronError):
    """Base class for failures talking to the external assistant."""


class AssistantUnavailable(AssistantError):
    """The assistant cannot be used at all."""


class AssistantNotInstalled(AssistantUnavailable):
    def __init__(self, command: str = "claude") -> None:
        super().__init__(f"`{command}` CLI not found. Is Claude Code installed?")
        self.command = command


class AssistantNotAuthenticated(AssistantUnavailable):
    def __init__(self, detail: str = "") -> None:
        message = "Assistant is not authenticated. Run `claude` once to log in."
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.detail = detail


class AssistantFailed(AssistantError):
    """The assistant ran but did not produce a usable reply."""


class AssistantExitError(AssistantFailed):
    def __init__(self, code: int, stderr: str = "") -> None:
        super().__init__(f"Assistant exited with code {code}: {stderr or 'unknown error'}")
        self.code = code
        self.stderr = stderr


class AssistantTimeout(AssistantFailed):
    def __init__(self, timeout: float) -> None:
        super().__init__(f"Assistant did not respond within {timeout:g}s.")
        self.timeout = timeout


# ── Persistence ──────────────────────────────────────────────


class IOFailure(HolocronError):
    """Writing an artifact or a config file failed (permissions, disk space)."""
