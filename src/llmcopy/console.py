"""
Coloured console output shared by the bundler and the CLI.
"""
import sys

from colorama import Fore, Style

PREFIX = "[llm-copy]"

_verbose = False


def set_verbose(enabled: bool) -> None:
    global _verbose
    _verbose = enabled


def info(msg: str, file=None) -> None:
    print(msg, file=file or sys.stdout)


def success(msg: str) -> None:
    print(Fore.GREEN + msg + Style.RESET_ALL)


def debug(msg: str) -> None:
    """Print a progress line, only when verbose output was requested.

    Goes to stderr so ``--stdout`` bundles stay clean.
    """
    if _verbose:
        print(f"{PREFIX} {msg}", file=sys.stderr)


def warn(msg: str) -> None:
    print(Fore.YELLOW + f"Warning: {msg}" + Style.RESET_ALL, file=sys.stderr)


def error(msg: str) -> None:
    print(Fore.RED + f"Error: {msg}" + Style.RESET_ALL, file=sys.stderr)
