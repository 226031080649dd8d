"""
grove.commands.completion - Shell tab-completion setup.

Prints, installs or removes the argcomplete activation line for the
user's shell.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

SHELLS = ("bash", "zsh", "fish", "tcsh")

_MARKER = "# grove shell completion"


def _detect_shell() -> str:
    """Detect the current shell from $SHELL, defaulting to bash."""
    shell = os.environ.get("SHELL", "")
    name = Path(shell).name if shell else ""
    return name if name in SHELLS else "bash"


def _rc_file(shell: str) -> Path:
    home = Path.home()
    return {
        "bash": home / ".bashrc",
        "zsh": home / ".zshrc",
        "fish": home / ".config" / "fish" / "config.fish",
        "tcsh": home / ".tcshrc",
    }.get(shell, home / ".bashrc")


def activation_line(shell: str) -> str:
    """Return the line that enables completion in the given shell."""
    if shell == "fish":
        return "register-python-argcomplete --shell fish grove | source"
    if shell == "tcsh":
        return "eval `register-python-argcomplete --shell tcsh grove`"
    return 'eval "$(register-python-argcomplete grove)"'


def _has_argcomplete() -> bool:
    try:
        import argcomplete  # noqa: F401
    except ImportError:
        return False
    return True


def run(args: argparse.Namespace) -> int:
    """Run the completion command."""
    if not _has_argcomplete():
        print("Error: argcomplete is not installed.", file=sys.stderr)
        print("Install with: pip install grove[completion]", file=sys.stderr)
        return 1

    shell = getattr(args, "shell", None) or _detect_shell()
    rc_file = _rc_file(shell)

    if getattr(args, "uninstall", False):
        return _uninstall(rc_file)
    if getattr(args, "install", False):
        return _install(rc_file, shell)

    print(f"Add the following to {rc_file}:")
    print()
    print(f"  {activation_line(shell)}")
    print()
    print(f"Or auto-install with: grove completion --install --shell {shell}")
    return 0


def _install(rc_file: Path, shell: str) -> int:
    if rc_file.exists() and _MARKER in rc_file.read_text():
        print(f"Completion already installed in {rc_file}")
        return 0
    try:
        rc_file.parent.mkdir(parents=True, exist_ok=True)
        with open(rc_file, "a") as f:
            f.write(f"\n{_MARKER}\n{activation_line(shell)}\n")
    except OSError as e:
        print(f"Error writing to {rc_file}: {e}", file=sys.stderr)
        return 1
    print(f"Installed completion in {rc_file}")
    print(f"Restart your shell or run: source {rc_file}")
    return 0


def _uninstall(rc_file: Path) -> int:
    if not rc_file.exists() or _MARKER not in rc_file.read_text():
        print(f"No grove completion found in {rc_file}")
        return 0

    kept: list[str] = []
    skip_next = False
    for line in rc_file.read_text().splitlines(keepends=True):
        if _MARKER in line:
            skip_next = True
            continue
        if skip_next:
            skip_next = False
            continue
        kept.append(line)
    try:
        rc_file.write_text("".join(kept))
    except OSError as e:
        print(f"Error writing to {rc_file}: {e}", file=sys.stderr)
        return 1
    print(f"Removed completion from {rc_file}")
    return 0
