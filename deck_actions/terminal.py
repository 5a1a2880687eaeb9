"""Terminal launching.

Each family turns ``(workdir, command, profile)`` into an argv. Families that
cannot take the directory as an argument get it as the spawn cwd instead.
"""

from __future__ import annotations

import os
import sys
import time
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from diagnostics.logging_setup import get_logger

from .spawn import Spawner, as_arg_list, build_env, expand_env_vars, spawn_detached
from .types import ActionResult, elapsed_ms

logger = get_logger(__name__)

FAMILY_ALIASES = {
    "powershell": "PowerShell",
    "pwsh": "PowerShell",
    "cmd": "Cmd",
    "windowsterminal": "WindowsTerminal",
    "wt": "WindowsTerminal",
    "wsl": "WSL",
    "shell": "Shell",
    "sh": "Shell",
}


@dataclass(frozen=True)
class TerminalCommand:
    argv: List[str]
    cwd: Optional[str] = None


def default_family() -> str:
    return "PowerShell" if sys.platform == "win32" else "Shell"


def canonical_family(name: Optional[str]) -> Optional[str]:
    if not name:
        return default_family()
    return FAMILY_ALIASES.get(str(name).strip().lower())


def to_wsl_path(path: str) -> str:
    """``C:\\Users\\x`` -> ``/mnt/c/Users/x``; anything else unchanged."""
    if len(path) >= 2 and path[1] == ":" and path[0].isalpha():
        return f"/mnt/{path[0].lower()}" + path[2:].replace("\\", "/")
    return path


def build_terminal_command(
    family: str,
    *,
    workdir: Optional[str] = None,
    command: Optional[str] = None,
    profile: Optional[str] = None,
    extra_args: Optional[List[str]] = None,
) -> TerminalCommand:
    if family == "WindowsTerminal":
        argv = ["wt"]
        if profile:
            argv += ["-p", profile]
        if workdir:
            argv += ["-d", workdir]
        if command:
            argv += ["--", "powershell", "-NoExit", "-Command", command]
        cwd = None
    elif family == "PowerShell":
        argv = ["powershell", "-NoExit"]
        if command:
            argv += ["-Command", command]
        cwd = workdir
    elif family == "Cmd":
        argv = ["cmd", "/K"]
        if command:
            argv += ["/C", f"{command} & pause"]
        cwd = workdir
    elif family == "WSL":
        argv = ["wsl"]
        if profile:
            argv += ["-d", profile]
        if workdir:
            argv += ["--cd", to_wsl_path(workdir)]
        if command:
            argv += ["--exec", "bash", "-c", f"{command}; exec bash"]
        else:
            argv += ["--exec", "bash"]
        cwd = None
    elif family == "Shell":
        shell = os.environ.get("SHELL") or "/bin/sh"
        argv = [shell]
        if command:
            argv += ["-c", f"{command}; exec {shell}"]
        cwd = workdir
    else:
        raise ValueError(f"unsupported terminal type: {family}")
    return TerminalCommand(argv=argv + list(extra_args or []), cwd=cwd)


class TerminalHandler:
    def __init__(self, spawner: Optional[Spawner] = None) -> None:
        self._spawn = spawner or spawn_detached

    def execute(self, config: Mapping[str, Any]) -> ActionResult:
        started = time.perf_counter()
        requested = config.get("terminal_type") or config.get("terminal")
        family = canonical_family(requested)
        if family is None:
            return ActionResult.fail(
                f"unsupported terminal type: {requested}", execution_time_ms=elapsed_ms(started)
            )
        workdir = config.get("workdir")
        workdir = expand_env_vars(str(workdir)) if workdir else None
        command = config.get("command") or None
        profile = config.get("profile") or None
        built = build_terminal_command(
            family,
            workdir=workdir,
            command=str(command) if command else None,
            profile=str(profile) if profile else None,
            extra_args=as_arg_list(config.get("args")),
        )
        if built.cwd and not os.path.isdir(built.cwd):
            return ActionResult.fail(
                f"working directory not found: {built.cwd}", execution_time_ms=elapsed_ms(started)
            )
        try:
            pid = self._spawn(built.argv, built.cwd, build_env(config.get("env")))
        except (OSError, ValueError) as exc:
            logger.warning("failed to open %s terminal: %s", family, exc)
            return ActionResult.fail(f"failed to open {family} terminal: {exc}", execution_time_ms=elapsed_ms(started))
        logger.info("opened %s terminal (pid %s)", family, pid)
        return ActionResult.ok(f"opened {family} terminal", execution_time_ms=elapsed_ms(started))
