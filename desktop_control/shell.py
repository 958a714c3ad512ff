"""
Short-lived native command execution.

Every platform query spawns one subprocess, waits for it, captures its output
and reaps it. Nothing is pooled and nothing is retried.
"""

import asyncio
import logging
from typing import Optional

from .errors import BackendExecutionFailure


logger = logging.getLogger(__name__)


async def run_command(*argv: str, timeout: Optional[float] = 10.0) -> str:
    """Run ``argv`` and return its decoded stdout.

    Raises BackendExecutionFailure when the executable is missing, the exit
    status is non-zero, or the command outlives ``timeout`` seconds.
    """
    logger.debug("Running %s with %d argument(s)", argv[0], len(argv) - 1)
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (FileNotFoundError, PermissionError) as exc:
        raise BackendExecutionFailure(f"Cannot execute {argv[0]}: {exc}") from exc

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        proc.kill()
        await proc.wait()
        raise BackendExecutionFailure(f"{argv[0]} timed out after {timeout}s") from exc

    if proc.returncode != 0:
        raise BackendExecutionFailure(
            f"{argv[0]} exited with status {proc.returncode}",
            stderr.decode(errors="replace") or None,
        )

    err_text = stderr.decode(errors="replace").strip()
    if err_text:
        logger.debug("%s stderr: %s", argv[0], err_text)
    return stdout.decode(errors="replace")
