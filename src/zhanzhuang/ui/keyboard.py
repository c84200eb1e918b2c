"""Non-blocking single-key input for the live timer screen."""

from __future__ import annotations

import sys


class KeyboardHandler:
    """Reads single keypresses without blocking (POSIX terminals)."""

    def __init__(self):
        self.old_settings = None
        try:
            import termios
            import tty

            self.fd = sys.stdin.fileno()
            self.old_settings = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)
        except Exception:
            # Not a tty (piped input, tests) or no termios on this platform
            self.old_settings = None

    def get_key(self) -> str | None:
        """Return the pressed key lowercased, or None if nothing is waiting."""
        if self.old_settings is None:
            return None
        import select

        if select.select([sys.stdin], [], [], 0)[0]:
            return sys.stdin.read(1).lower()
        return None

    def stop(self) -> None:
        """Restore terminal settings."""
        if self.old_settings is not None:
            import termios

            termios.tcsetattr(self.fd, termios.TCSADRAIN, self.old_settings)
            self.old_settings = None


class WindowsKeyboardHandler:
    """Keyboard handler for Windows using msvcrt."""

    def __init__(self):
        import msvcrt

        self.msvcrt = msvcrt

    def get_key(self) -> str | None:
        if self.msvcrt.kbhit():
            key = self.msvcrt.getch()
            if isinstance(key, bytes):
                key = key.decode("utf-8", errors="ignore")
            return key.lower()
        return None

    def stop(self) -> None:
        pass


def get_keyboard_handler():
    """Pick the handler for the current platform."""
    if sys.platform == "win32":
        return WindowsKeyboardHandler()
    return KeyboardHandler()
