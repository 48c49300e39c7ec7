"""
CLI entrypoint for llm-copy.
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from colorama import just_fix_windows_console

from . import __version__, clipboard, console
from .core import (
    Bundler,
    InclusionPolicy,
    LlmCopyError,
    compile_patterns,
    load_extra_patterns,
    transient_path,
    write_bundle,
)
from .vcs import select_lister


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="llm-copy",
        description="Concatenate allowed files under the given paths and put the "
        "result on the macOS clipboard (as a .txt file by default).",
        epilog="Default extensions: " + InclusionPolicy().describe(),
    )
    p.add_argument("paths", nargs="+", type=Path, metavar="PATH", help="Files or directories to bundle")
    mode = p.add_mutually_exclusive_group()
    mode.add_argument(
        "--string",
        dest="mode",
        action="store_const",
        const=clipboard.MODE_TEXT,
        help="Copy the plain text content to the clipboard instead of a file",
    )
    mode.add_argument(
        "--stdout",
        dest="mode",
        action="store_const",
        const=clipboard.MODE_STDOUT,
        help="Write the bundle to standard output instead of the clipboard",
    )
    p.set_defaults(mode=clipboard.MODE_FILE)
    p.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Persist the bundle at this path instead of a temporary file",
    )
    p.add_argument(
        "--no-ignore",
        action="store_true",
        help="Include files that git would ignore",
    )
    p.add_argument("--ext", action="append", default=[], help="Also allow this extension (repeatable)")
    p.add_argument(
        "--only-ext",
        action="append",
        default=[],
        help="Allow only these extensions, replacing the defaults (repeatable)",
    )
    p.add_argument("--name", action="append", default=[], help="Also allow this exact filename (repeatable)")
    p.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="gitignore-style pattern to leave out (repeatable)",
    )
    p.add_argument(
        "--config",
        type=Path,
        help="Path to a file with extra ignore patterns (one per line)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def _build_policy(ns: argparse.Namespace) -> InclusionPolicy:
    policy = InclusionPolicy()
    if ns.only_ext:
        policy = InclusionPolicy(extensions=frozenset(), filenames=policy.filenames)
        return policy.with_extra(extensions=ns.only_ext + ns.ext, filenames=ns.name)
    return policy.with_extra(extensions=ns.ext, filenames=ns.name)


def _deliver(result, ns: argparse.Namespace) -> None:
    summary = f"({result.line_count} lines, {result.byte_count} bytes)"

    if ns.mode == clipboard.MODE_STDOUT:
        if ns.output:
            write_bundle(result, ns.output)
        sys.stdout.flush()
        sys.stdout.buffer.write(result.content)
        sys.stdout.flush()
        return

    if ns.mode == clipboard.MODE_TEXT:
        if ns.output:
            console.info(f"Saved bundle to: {write_bundle(result, ns.output)}")
        clipboard.copy_text(result.content)
        console.success(f"Content copied to clipboard {summary}")
        return

    transient = ns.output is None
    target = transient_path() if transient else ns.output
    try:
        target = write_bundle(result, target)
        if not transient:
            console.info(f"Saved bundle to: {target}")
        clipboard.copy_file(target)
    except BaseException:
        # A caller-chosen output file is never removed.
        if transient:
            target.unlink(missing_ok=True)
        raise
    console.success(f"Placed file on clipboard: {target} {summary}")
    console.info("Note: keep this file until you've pasted it.")


def main(argv: Optional[List[str]] = None) -> None:
    just_fix_windows_console()
    try:
        ns = _parse_args(argv)
        console.set_verbose(ns.verbose)

        clipboard.ensure_available(ns.mode)

        patterns = list(ns.exclude)
        if ns.config:
            patterns += load_extra_patterns(ns.config.resolve())
            console.debug(f"Loaded extra patterns from {ns.config}")

        policy = _build_policy(ns)
        bundler = Bundler(
            policy=policy,
            lister=select_lister(respect_ignore=not ns.no_ignore),
            exclude=compile_patterns(patterns),
        )
        result = bundler.bundle(ns.paths)

        if result.empty:
            # stdout belongs to the bundle in --stdout mode
            stream = sys.stderr if ns.mode == clipboard.MODE_STDOUT else None
            console.info(f"No supported files found ({policy.describe()})", file=stream)
            return

        console.debug(f"{len(result.files)} files bundled.")
        _deliver(result, ns)

    except LlmCopyError as e:
        console.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
