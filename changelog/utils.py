"""
Shared process and filesystem helpers for changelog.
"""
import asyncio
import os
import shutil
from typing import List, Optional, Tuple

from .config import logger, get_setting
from .domain import ResolvedCommand

# Same limit the Linux kernel applies before failing with ELOOP
MAX_SYMLINK_DEPTH = 40

COMMAND_NOT_FOUND_RC = 127
TIMEOUT_RC = -1


async def run_command(command: List[str], timeout: Optional[float] = None,
                      config=None, log_stderr: bool = False) -> Tuple[Optional[str], int]:
    """
    Run an external command without blocking the event loop.

    A non-zero exit is a soft failure: the caller inspects the return code.

    Args:
        command: Program and arguments (never passed through a shell)
        timeout: Seconds to wait before killing the process
        config: Loaded configuration, used for the default timeout
        log_stderr: If True, log stderr of failed commands at debug level

    Returns:
        tuple: (stdout_str, returncode). stdout is None when the program
        could not be started or timed out.
    """
    if timeout is None:
        timeout = get_setting(config, 'subprocess', 'timeout_seconds', 15)

    cmd_str = ' '.join(command)
    logger.debug(f"Running command: {cmd_str}")

    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env={**os.environ, "TERM": "dumb", "NO_COLOR": "1"},
        )
    except (FileNotFoundError, PermissionError) as e:
        logger.debug(f"Cannot run '{command[0]}': {e}")
        return None, COMMAND_NOT_FOUND_RC

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.debug(f"Command timed out after {timeout}s: {cmd_str}")
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()
        return None, TIMEOUT_RC

    if process.returncode != 0 and log_stderr and stderr:
        logger.debug(stderr.decode('utf-8', 'replace').strip())

    return stdout.decode('utf-8', 'replace').strip(), process.returncode


def which(command: str) -> Optional[str]:
    """Find the executable a command name runs, or None."""
    if not command or os.sep in command:
        # Explicit paths are taken as-is
        if command and os.path.isfile(command) and os.access(command, os.X_OK):
            return os.path.abspath(command)
        return None
    return shutil.which(command)


def resolve_symlinks(path: str, max_depth: int = MAX_SYMLINK_DEPTH) -> str:
    """
    Follow a chain of symlinks to the file it finally names.

    Relative link targets are resolved against the real directory of the
    link. The walk stops at max_depth hops or when a link repeats, returning
    the last path reached.

    Args:
        path: Path to start from
        max_depth: Maximum number of links to follow

    Returns:
        Absolute, symlink-free path (best effort on pathological chains)
    """
    current = _canonical_dir(os.path.abspath(path))
    seen = {current}

    for _ in range(max_depth):
        if not os.path.islink(current):
            break
        try:
            target = os.readlink(current)
        except OSError as e:
            logger.debug(f"Cannot read link {current}: {e}")
            break
        if not os.path.isabs(target):
            target = os.path.join(os.path.dirname(current), target)
        target = _canonical_dir(os.path.normpath(target))
        if target in seen:
            logger.warning(f"Symlink cycle detected at {target}")
            break
        seen.add(target)
        current = target
    else:
        if os.path.islink(current):
            logger.warning(f"Stopped following symlinks after {max_depth} hops at {current}")

    return current


def _canonical_dir(path: str) -> str:
    """Resolve symlinks in the directory part of path, keeping the last component."""
    directory, name = os.path.split(path)
    return os.path.join(os.path.realpath(directory), name)


def locate_command(command: str) -> Optional[ResolvedCommand]:
    """Find a command on PATH and resolve where it really lives."""
    bin_path = which(command)
    if not bin_path:
        return None
    return ResolvedCommand(bin_path=bin_path, resolved_path=resolve_symlinks(bin_path))
