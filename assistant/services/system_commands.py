"""
System Commands - OS side effects requested by skills.

The only module that touches the operating system. Skills obtain it with
context.get_service("system_commands", SystemCommands) so tests can swap
in a fake and never run a real command.

Commands are argument vectors (no shell), chosen per platform:
- win32: netsh, rundll32, shutdown, PowerShell key presses
- linux: nmcli, rfkill, pactl, playerctl, loginctl, systemctl
- darwin: networksetup, blueutil, osascript, pmset

With SYSTEM_COMMANDS_ENABLED=false every command is logged and reported
as successful without being executed.

Usage:
    commands = SystemCommands()
    result = await commands.set_wifi("on")
    if not result.success:
        print(result.detail)
"""

import asyncio
import logging
import shutil
import sys
import webbrowser
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from assistant.core.config import settings


logger = logging.getLogger("assistant.services.system_commands")


COMMAND_TIMEOUT_SECONDS = 10.0


def _powershell_key(code: int) -> List[str]:
    return [
        "powershell", "-NoProfile", "-Command",
        f"(New-Object -ComObject WScript.Shell).SendKeys([char]{code})",
    ]


# Per-platform argument vectors. Values may contain "{state}" placeholders.
COMMANDS: Dict[str, Dict[str, List[str]]] = {
    "win32": {
        "wifi": ["netsh", "interface", "set", "interface", "name=Wi-Fi", "admin={state}"],
        "volume_up": _powershell_key(175),
        "volume_down": _powershell_key(174),
        "media_play_pause": _powershell_key(179),
        "lock_screen": ["rundll32.exe", "user32.dll,LockWorkStation"],
        "shutdown": ["shutdown", "/s", "/t", "0"],
        "restart": ["shutdown", "/r", "/t", "0"],
    },
    "linux": {
        "wifi": ["nmcli", "radio", "wifi", "{state}"],
        "bluetooth": ["rfkill", "{state}", "bluetooth"],
        "volume_up": ["pactl", "set-sink-volume", "@DEFAULT_SINK@", "+10%"],
        "volume_down": ["pactl", "set-sink-volume", "@DEFAULT_SINK@", "-10%"],
        "media_play_pause": ["playerctl", "play-pause"],
        "lock_screen": ["loginctl", "lock-session"],
        "shutdown": ["systemctl", "poweroff"],
        "restart": ["systemctl", "reboot"],
    },
    "darwin": {
        "wifi": ["networksetup", "-setairportpower", "en0", "{state}"],
        "bluetooth": ["blueutil", "--power", "{state}"],
        "volume_up": ["osascript", "-e", "set volume output volume ((output volume of (get volume settings)) + 10)"],
        "volume_down": ["osascript", "-e", "set volume output volume ((output volume of (get volume settings)) - 10)"],
        "media_play_pause": ["osascript", "-e", 'tell application "Music" to playpause'],
        "lock_screen": ["pmset", "displaysleepnow"],
        "shutdown": ["osascript", "-e", 'tell app "System Events" to shut down'],
        "restart": ["osascript", "-e", 'tell app "System Events" to restart'],
    },
}

# How each platform spells on/off for the radio commands
STATE_WORDS: Dict[str, Dict[str, Dict[str, str]]] = {
    "win32": {"wifi": {"on": "enabled", "off": "disabled"}},
    "linux": {"wifi": {"on": "on", "off": "off"}, "bluetooth": {"on": "unblock", "off": "block"}},
    "darwin": {"wifi": {"on": "on", "off": "off"}, "bluetooth": {"on": "1", "off": "0"}},
}

# Read-only probes used to resolve "toggle" into on/off
STATUS_COMMANDS: Dict[str, Dict[str, List[str]]] = {
    "linux": {"wifi": ["nmcli", "radio", "wifi"]},
}


@dataclass
class CommandResult:
    """Result of one OS command."""
    success: bool
    operation: str
    detail: str = ""
    dry_run: bool = False


class SystemCommands:
    """
    Runs OS commands for skills.

    Args:
        enabled: Execute commands (False = log only). Defaults to settings.
        platform: Platform key ("win32", "linux", "darwin"). Defaults to sys.platform.
    """

    def __init__(self, enabled: Optional[bool] = None, platform: Optional[str] = None):
        self.enabled = settings.SYSTEM_COMMANDS_ENABLED if enabled is None else enabled
        self.platform = platform or sys.platform
        if self.platform.startswith("linux"):
            self.platform = "linux"

    # -------------------------------------------------------------------------
    # SKILL-FACING OPERATIONS
    # -------------------------------------------------------------------------

    async def open_url(self, url: str) -> CommandResult:
        if not self.enabled:
            logger.info(f"[dry-run] open {url}")
            return CommandResult(success=True, operation="open_url", detail=url, dry_run=True)

        opened = await asyncio.to_thread(webbrowser.open, url, 2)
        if not opened:
            logger.warning(f"No browser available to open {url}")
            return CommandResult(success=False, operation="open_url", detail="No browser available")
        return CommandResult(success=True, operation="open_url", detail=url)

    async def set_wifi(self, action: str) -> CommandResult:
        return await self._set_radio("wifi", action)

    async def set_bluetooth(self, action: str) -> CommandResult:
        return await self._set_radio("bluetooth", action)

    async def volume_up(self) -> CommandResult:
        return await self.run("volume_up")

    async def volume_down(self) -> CommandResult:
        return await self.run("volume_down")

    async def media_play_pause(self) -> CommandResult:
        return await self.run("media_play_pause")

    async def lock_screen(self) -> CommandResult:
        return await self.run("lock_screen")

    async def shutdown(self) -> CommandResult:
        return await self.run("shutdown")

    async def restart(self) -> CommandResult:
        return await self.run("restart")

    # -------------------------------------------------------------------------
    # EXECUTION
    # -------------------------------------------------------------------------

    def command_for(self, operation: str, state: Optional[str] = None) -> Optional[List[str]]:
        """Argument vector for an operation on this platform, or None if unsupported."""
        template = COMMANDS.get(self.platform, {}).get(operation)
        if template is None:
            return None
        if state is None:
            return list(template)
        return [part.replace("{state}", state) for part in template]

    async def run(self, operation: str, state: Optional[str] = None) -> CommandResult:
        argv = self.command_for(operation, state)
        if argv is None:
            logger.warning(f"Operation '{operation}' is not supported on {self.platform}")
            return CommandResult(
                success=False,
                operation=operation,
                detail=f"not supported on {self.platform}",
            )

        if not self.enabled:
            logger.info(f"[dry-run] {' '.join(argv)}")
            return CommandResult(success=True, operation=operation, detail=" ".join(argv), dry_run=True)

        if shutil.which(argv[0]) is None:
            logger.warning(f"Command '{argv[0]}' not found for operation '{operation}'")
            return CommandResult(success=False, operation=operation, detail=f"'{argv[0]}' is not installed")

        returncode, output = await self._exec(argv)
        if returncode != 0:
            logger.error(f"Operation '{operation}' failed (exit {returncode}): {output}")
            return CommandResult(success=False, operation=operation, detail=output or f"exit code {returncode}")

        logger.info(f"Operation '{operation}' completed")
        return CommandResult(success=True, operation=operation, detail=output)

    async def _set_radio(self, radio: str, action: str) -> CommandResult:
        action = (action or "toggle").lower()
        if action == "toggle" and not self.enabled:
            logger.info(f"[dry-run] toggle {radio}")
            return CommandResult(success=True, operation=radio, detail="toggle", dry_run=True)
        if action == "toggle":
            current = await self._radio_state(radio)
            if current is None:
                return CommandResult(success=False, operation=radio, detail="cannot read current state")
            action = "off" if current else "on"

        words = STATE_WORDS.get(self.platform, {}).get(radio)
        if words is None or action not in words:
            return await self.run(radio)
        return await self.run(radio, words[action])

    async def _radio_state(self, radio: str) -> Optional[bool]:
        """True if the radio is on, False if off, None if unknown."""
        argv = STATUS_COMMANDS.get(self.platform, {}).get(radio)
        if argv is None or not self.enabled or shutil.which(argv[0]) is None:
            return None
        returncode, output = await self._exec(argv)
        if returncode != 0:
            return None
        return output.strip().lower() == "enabled"

    async def _exec(self, argv: List[str]) -> Tuple[int, str]:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=COMMAND_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            return -1, f"timed out after {COMMAND_TIMEOUT_SECONDS}s"
        return process.returncode, stdout.decode(errors="replace").strip()
