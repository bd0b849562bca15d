"""Claude CLI assistant — wraps `claude --print` using the Claude Code subscription.

Each ask() spawns one `claude --print --output-format stream-json --verbose`
process, streams assistant text to the caller as it arrives and returns the
buffered reply. Conversations continue across calls via `--resume`.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import re
import subprocess
from dataclasses import dataclass

from holocron.assistant.base import AgentResponse, StreamCallback, with_context
from holocron.assistant.protocol import AssistantText, ResultMessage, SystemMessage, parse_line
from holocron.errors import (
    AssistantExitError,
    AssistantFailed,
    AssistantNotAuthenticated,
    AssistantNotInstalled,
    AssistantTimeout,
)

logger = logging.getLogger(__name__)

_AUTH_PATTERN = re.compile(
    r"not logged in|please (run )?/?login|authenticat|invalid api key|api key|unauthori[sz]ed|\b401\b",
    re.IGNORECASE,
)


def looks_unauthenticated(text: str) -> bool:
    return bool(text and _AUTH_PATTERN.search(text))


@dataclass
class ClaudeCLIAssistant:
    """Subprocess wrapper around `claude --print --output-format stream-json`.

    Uses your Claude Code subscription, no API key needed.
    """

    command: str = "claude"
    model: str | None = None
    timeout: int = 300
    cwd: str | None = None

    @property
    def name(self) -> str:
        return "claude_cli"

    def build_command(
        self,
        prompt: str,
        *,
        context: str | None = None,
        session_id: str | None = None,
    ) -> list[str]:
        cmd = [self.command, "--print", "--output-format", "stream-json", "--verbose"]
        if session_id:
            cmd.extend(["--resume", session_id])
        if self.model:
            cmd.extend(["--model", self.model])
        cmd.append(with_context(prompt, context))
        return cmd

    async def ask(
        self,
        prompt: str,
        *,
        context: str | None = None,
        session_id: str | None = None,
        on_text: StreamCallback | None = None,
    ) -> AgentResponse:
        cmd = self.build_command(prompt, context=context, session_id=session_id)
        logger.debug("Running: %s", " ".join(cmd[:5]) + " ...")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self.cwd,
            )
        except FileNotFoundError:
            raise AssistantNotInstalled(self.command) from None

        try:
            return await asyncio.wait_for(
                self._collect(process, on_text), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning("claude CLI timed out after %ss", self.timeout)
            raise AssistantTimeout(self.timeout) from None
        finally:
            # Timeout or cancellation (Ctrl+C) leaves the child running
            if process.returncode is None:
                logger.debug("Killing claude CLI (pid=%s)", process.pid)
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()

    async def _collect(
        self,
        process: asyncio.subprocess.Process,
        on_text: StreamCallback | None,
    ) -> AgentResponse:
        stderr_task = asyncio.ensure_future(process.stderr.read())
        parts: list[str] = []
        result: ResultMessage | None = None
        session_id: str | None = None

        while True:
            raw = await process.stdout.readline()
            if not raw:
                break
            line = raw.decode("utf-8", errors="replace").strip()
            if not line:
                continue
            logger.debug("< %s", line[:200])

            try:
                msg = parse_line(line)
            except ValueError:
                # Non-JSON noise on stdout (warnings, banners)
                logger.debug("Skipping non-JSON line: %s", line[:200])
                continue

            if isinstance(msg, SystemMessage):
                session_id = msg.session_id or session_id
            elif isinstance(msg, AssistantText):
                if parts and on_text:
                    on_text("\n\n")
                parts.append(msg.text)
                if on_text:
                    on_text(msg.text)
            elif isinstance(msg, ResultMessage):
                result = msg

        returncode = await process.wait()
        stderr = (await stderr_task).decode("utf-8", errors="replace").strip()

        if returncode != 0:
            logger.error("claude CLI error (rc=%d): %s", returncode, stderr)
            detail = stderr or (result.result if result else "")
            if looks_unauthenticated(detail):
                raise AssistantNotAuthenticated(detail)
            raise AssistantExitError(returncode, stderr)

        if result is not None and result.is_error:
            logger.error("claude CLI reported an error result: %s", result.result)
            if looks_unauthenticated(result.result):
                raise AssistantNotAuthenticated(result.result)
            raise AssistantFailed(result.result or "Assistant returned an error result")

        text = "\n\n".join(parts) if parts else (result.result if result else "")
        if not text.strip():
            raise AssistantFailed("Assistant returned an empty reply")

        return AgentResponse(
            text=text,
            session_id=(result.session_id if result and result.session_id else session_id),
            cost_usd=result.cost_usd if result else None,
            model=(result.model or None) if result else None,
            duration_ms=result.duration_ms if result else None,
        )

    async def health_check(self) -> bool:
        try:
            result = await asyncio.to_thread(
                subprocess.run,
                [self.command, "--version"],
                capture_output=True,
                text=True,
                timeout=10,
            )
            return result.returncode == 0
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False
