"""
CLI entrypoint for promptmyrepo.
"""
import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

import pyperclip

from . import __version__
from .core import (
    Aggregation,
    ClipboardError,
    OutputError,
    PromptMyRepoError,
    TemplateError,
    aggregate_report,
    validate_base_dir,
)
from .logs import get_logger, setup_logging
from .templates import TemplateStore

WORKSPACE_ENV = "PROMPTMYREPO_WORKSPACE"

log = get_logger("cli")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="promptmyrepo",
        description="Copy a recurring selection of project files, described by a template, as one text block.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument(
        "-w",
        "--workspace",
        type=Path,
        default=None,
        help=f"Workspace root (default: ${WORKSPACE_ENV} or the current directory)",
    )
    p.add_argument(
        "--templates-dir",
        type=Path,
        default=None,
        help="Template directory, relative to the workspace (default: .vscode/prompt-my-repo-templates)",
    )
    p.add_argument("-v", "--verbose", action="count", default=0, help="Verbose logging (-vv for debug)")

    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List stored templates")

    new = sub.add_parser("new", help="Create a template with the starter comments")
    new.add_argument("name")

    show = sub.add_parser("show", help="Print a template's contents")
    show.add_argument("name")

    path = sub.add_parser("path", help="Print a template's file path (e.g. to open it in an editor)")
    path.add_argument("name")

    rm = sub.add_parser("rm", help="Delete a template")
    rm.add_argument("name")

    mv = sub.add_parser("mv", help="Rename a template")
    mv.add_argument("old_name")
    mv.add_argument("new_name")

    copy = sub.add_parser("copy", help="Aggregate the files a template selects")
    src = copy.add_mutually_exclusive_group(required=True)
    src.add_argument("name", nargs="?", help="Stored template name")
    src.add_argument("-f", "--file", type=Path, help="Read the template from this file instead")
    copy.add_argument("-o", "--out", type=Path, help="Write the result to this file")
    copy.add_argument("-c", "--clipboard", action="store_true", help="Copy the result to the clipboard")
    copy.add_argument(
        "--gitignore",
        action="store_true",
        help="Leave out files matched by the workspace .gitignore when expanding directories",
    )
    return p


def _workspace(ns: argparse.Namespace) -> Path:
    if ns.workspace is not None:
        return ns.workspace
    return Path(os.environ.get(WORKSPACE_ENV) or Path.cwd())


def _read_template_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise TemplateError(f"Could not read template file '{path}': {e}")


def write_output(text: str, out_path: Path) -> Path:
    try:
        out_path = out_path.resolve()
    except (OSError, RuntimeError) as e:
        raise OutputError(f"Could not resolve output path '{out_path}': {e}")

    if not out_path.parent.exists():
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputError(f"Could not create directory '{out_path.parent}': {e}")

    try:
        with out_path.open("w", encoding="utf-8", newline="\n") as out_fh:
            out_fh.write(text)
    except OSError as e:
        raise OutputError(f"Could not write to output file '{out_path}': {e}")
    return out_path


def copy_to_clipboard(text: str) -> None:
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        raise ClipboardError(f"Could not copy to clipboard: {e}")


def _log_summary(result: Aggregation) -> None:
    log.info("%d files included", len(result.included))
    if result.excluded:
        log.info("%d matches dropped by exclusions", result.excluded)
    if result.duplicates:
        log.info("%d duplicate matches skipped", result.duplicates)
    for spec in result.unmatched:
        log.info("No files matched: %s", spec)
    if result.unreadable:
        log.warning("%d files could not be read: %s", len(result.unreadable), ", ".join(result.unreadable))


def _cmd_copy(ns: argparse.Namespace, store: TemplateStore, workspace: Path) -> None:
    if ns.file is not None:
        template_text = _read_template_file(ns.file)
    else:
        template_text = store.get(ns.name).read()

    result = aggregate_report(workspace, template_text, respect_gitignore=ns.gitignore)
    _log_summary(result)

    delivered = False
    if ns.out is not None:
        out_path = write_output(result.text, ns.out)
        log.info("Wrote %s", out_path)
        delivered = True
    if ns.clipboard:
        copy_to_clipboard(result.text)
        print("Template content copied to clipboard!", file=sys.stderr)
        delivered = True
    if not delivered:
        sys.stdout.write(result.text + "\n")


def run(argv: Optional[List[str]] = None) -> None:
    ns = _build_parser().parse_args(argv)
    setup_logging(ns.verbose)

    workspace = validate_base_dir(_workspace(ns))
    store = TemplateStore.for_workspace(workspace, ns.templates_dir)

    if ns.command == "list":
        for template in store.list():
            print(template.name)
    elif ns.command == "new":
        template = store.create(ns.name)
        print(template.path)
    elif ns.command == "show":
        sys.stdout.write(store.get(ns.name).read())
    elif ns.command == "path":
        print(store.get(ns.name).path)
    elif ns.command == "rm":
        store.delete(ns.name)
    elif ns.command == "mv":
        store.rename(ns.old_name, ns.new_name)
    elif ns.command == "copy":
        _cmd_copy(ns, store, workspace)


def main(argv: Optional[List[str]] = None) -> None:
    try:
        run(argv)
    except PromptMyRepoError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
