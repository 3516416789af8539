"""Terminal output: styled text, status lines, report fields and a spinner."""

import itertools
import os
import re
import sys
import threading
from collections.abc import Iterable
from functools import partial

_ANSI = {'bold': '1', 'dim': '2', 'red': '31', 'green': '32', 'yellow': '33', 'blue': '34', 'cyan': '36'}

STYLES = {
    'success': ('green',),
    'error': ('red',),
    'warning': ('yellow',),
    'info': ('cyan',),
    'dim': ('dim',),
    'bold': ('bold',),
    'commit_type': ('bold', 'green'),
    'breaking': ('bold', 'red'),
    # severity levels
    'critical': ('bold', 'red'),
    'high': ('red',),
    'medium': ('yellow',),
    'low': ('blue',),
}


def _color_enabled() -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    if os.environ.get('FORCE_COLOR'):
        return True
    if sys.platform == 'win32' and not os.environ.get('WT_SESSION'):
        return False  # legacy console, no VT processing
    return hasattr(sys.stdout, 'isatty') and sys.stdout.isatty()


def _unicode_enabled() -> bool:
    if sys.platform != 'win32':
        return True
    try:
        '✓─'.encode(sys.stdout.encoding or 'utf-8')
    except (UnicodeEncodeError, LookupError):
        return False
    return True


COLORS_ENABLED = _color_enabled()
UNICODE_ENABLED = _unicode_enabled()

CHECK, CROSS, ARROW, WARN, RULE = (
    fancy if UNICODE_ENABLED else plain
    for fancy, plain in (('✓', '[OK]'), ('✗', '[X]'), ('→', '->'), ('⚠', '[!]'), ('─', '-'))
)


def paint(text: str, style: str) -> str:
    """Wrap text in the ANSI codes of a named style."""
    if not COLORS_ENABLED or style not in STYLES:
        return text
    codes = ';'.join(_ANSI[name] for name in STYLES[style])
    return f"\033[{codes}m{text}\033[0m"


success = partial(paint, style='success')
error = partial(paint, style='error')
warning = partial(paint, style='warning')
info = partial(paint, style='info')
dim = partial(paint, style='dim')
bold = partial(paint, style='bold')


# -- status lines ----------------------------------------------------------

def print_success(message: str) -> None:
    print(f"{success(CHECK)} {message}")


def print_error(message: str) -> None:
    print(f"{error(CROSS)} {error(message)}", file=sys.stderr)


def print_warning(message: str) -> None:
    print(f"{warning(WARN)} {warning(message)}")


def print_info(message: str) -> None:
    print(f"{info(ARROW)} {message}")


def print_title(title: str) -> None:
    print(f"\n{bold(title)}")


def print_rule(width: int) -> None:
    print(dim(RULE * max(width, 1)))


# -- report building blocks ------------------------------------------------

def severity_label(severity: str) -> str:
    """Upper-case severity name in its color."""
    return paint(severity.upper(), severity)


def severity_heading(severity: str, count: int) -> str:
    return f"{severity_label(severity)} ({count})"


def field(label: str, value, indent: int = 5) -> str:
    """A dimmed ``Label:`` followed by its value."""
    return f"{' ' * indent}{dim(label + ':')} {value}"


def print_table(heading: str, rows: Iterable[tuple[str, object]], width: int = 15,
                value_style: str | None = None) -> None:
    """Bold heading, then one aligned ``name  value`` row per item."""
    print(f"\n  {bold(heading)}")
    for name, value in rows:
        value = str(value)
        print(f"    {name:<{width}} {paint(value, value_style) if value_style else value}")


_COMMIT_PREFIX_RE = re.compile(r'^\w+(\([^)]*\))?(!?):')


def colorize_commit_type(message: str) -> str:
    """Color the ``type(scope):`` prefix; breaking changes in red."""
    match = _COMMIT_PREFIX_RE.match(message)
    if not match:
        return message
    style = 'breaking' if match.group(2) else 'commit_type'
    return paint(match.group(0), style) + message[match.end():]


class Spinner:
    """Animated label while a slow call runs. Silent when stdout is not a TTY."""
    FRAMES = '⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏' if UNICODE_ENABLED else '-\\|/'
    INTERVAL = 0.08

    def __init__(self, label: str = ""):
        self.label = label
        self._done = threading.Event()
        self._thread = None

    def _run(self):
        for frame in itertools.cycle(self.FRAMES):
            sys.stdout.write(f'\r\033[K{frame} {self.label}')
            sys.stdout.flush()
            if self._done.wait(self.INTERVAL):
                break

    def __enter__(self):
        if sys.stdout.isatty():
            self._thread = threading.Thread(target=self._run, daemon=True)
            self._thread.start()
        return self

    def __exit__(self, *exc):
        self._done.set()
        if self._thread is not None:
            self._thread.join()
            sys.stdout.write('\r\033[K')
            sys.stdout.flush()
        return False


__all__ = [
    "STYLES", "COLORS_ENABLED", "UNICODE_ENABLED",
    "CHECK", "CROSS", "ARROW", "WARN", "RULE",
    "paint", "success", "error", "warning", "info", "dim", "bold",
    "print_success", "print_error", "print_warning", "print_info", "print_title", "print_rule",
    "severity_label", "severity_heading", "field", "print_table",
    "colorize_commit_type", "Spinner",
]
