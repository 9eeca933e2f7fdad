"""
Core logic for promptmyrepo: template parsing and aggregation.
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Set, Union

from .logs import get_logger
from .resolver import load_gitignore, relative_posix, resolve

log = get_logger("core")


# Exceptions
class PromptMyRepoError(Exception): ...
class NoWorkspaceError(PromptMyRepoError): ...
class TemplateError(PromptMyRepoError): ...
class TemplateNotFoundError(TemplateError): ...
class NameConflictError(TemplateError): ...
class InvalidTemplateNameError(TemplateError): ...
class OutputError(PromptMyRepoError): ...
class ClipboardError(PromptMyRepoError): ...


FENCE = "```"
COMMENT_PREFIX = "#"
EXCLUDE_PREFIX = "-"


# Template lines
class DirectiveKind(enum.Enum):
    COMMENT = "comment"
    BLANK = "blank"
    EXCLUDE = "exclude"
    INCLUDE = "include"


@dataclass(frozen=True)
class Directive:
    kind: DirectiveKind
    line: str
    spec: str = ""


def classify_line(line: str) -> Directive:
    """Classify one raw template line; *line* itself is kept verbatim."""
    trimmed = line.strip()
    if trimmed.startswith(COMMENT_PREFIX):
        return Directive(DirectiveKind.COMMENT, line)
    if not trimmed:
        return Directive(DirectiveKind.BLANK, line)
    if trimmed.startswith(EXCLUDE_PREFIX):
        return Directive(DirectiveKind.EXCLUDE, line, trimmed[len(EXCLUDE_PREFIX):].strip())
    return Directive(DirectiveKind.INCLUDE, line, trimmed)


def parse_template(text: str) -> List[Directive]:
    return [classify_line(line) for line in text.split("\n")]


def format_record(rel_path: str, content: str) -> str:
    return f"{rel_path}:\n{FENCE}\n{content}\n{FENCE}\n\n"


# Aggregation
@dataclass
class Aggregation:
    """Output text plus what happened while building it."""

    text: str = ""
    included: List[str] = field(default_factory=list)
    excluded: int = 0
    duplicates: int = 0
    unmatched: List[str] = field(default_factory=list)
    unreadable: List[str] = field(default_factory=list)


def validate_base_dir(base_dir: Union[str, Path, None]) -> Path:
    if base_dir is None or str(base_dir) == "":
        raise NoWorkspaceError("No workspace folder is open")
    base = Path(os.path.abspath(base_dir))
    if not base.exists():
        raise NoWorkspaceError(f"Workspace directory '{base}' does not exist")
    if not base.is_dir():
        raise NoWorkspaceError(f"Workspace path '{base}' is not a directory")
    return base


def build_exclusions(base: Path, directives: Sequence[Directive]) -> Set[Path]:
    """Union of every file named by an exclusion line, in any position."""
    excluded: Set[Path] = set()
    for directive in directives:
        if directive.kind is not DirectiveKind.EXCLUDE:
            continue
        if not directive.spec:
            # A bare "-" names nothing; it never excludes the workspace root.
            log.debug("Ignoring empty exclusion line %r", directive.line)
            continue
        excluded.update(resolve(base, directive.spec))
    return excluded


def _read_text(path: Path) -> str:
    return path.read_bytes().decode("utf-8", errors="replace")


def aggregate_report(
    base_dir: Union[str, Path, None],
    template_text: str,
    *,
    respect_gitignore: bool = False,
) -> Aggregation:
    """Resolve *template_text* against *base_dir* and build the output.

    All exclusion lines are resolved before any inclusion line, so an
    exclusion applies no matter where it appears in the template. Files
    that cannot be read are skipped and listed in ``unreadable``.
    """
    base = validate_base_dir(base_dir)
    directives = parse_template(template_text)
    excluded = build_exclusions(base, directives)
    ignore = load_gitignore(base) if respect_gitignore else None

    result = Aggregation()
    parts: List[str] = []
    processed: Set[Path] = set()

    for directive in directives:
        if directive.kind in (DirectiveKind.COMMENT, DirectiveKind.BLANK):
            parts.append(directive.line + "\n")
            continue
        if directive.kind is DirectiveKind.EXCLUDE:
            continue

        files = resolve(base, directive.spec, ignore=ignore)
        if not files:
            result.unmatched.append(directive.spec)

        for path in files:
            if path in excluded:
                result.excluded += 1
                continue
            if path in processed:
                result.duplicates += 1
                continue
            processed.add(path)

            rel = relative_posix(base, path)
            try:
                content = _read_text(path)
            except OSError as e:
                log.warning("Could not read %s: %s", rel, e)
                result.unreadable.append(rel)
                continue

            parts.append(format_record(rel, content))
            result.included.append(rel)

    result.text = "".join(parts).rstrip()
    log.debug(
        "%d files included, %d excluded, %d duplicates skipped",
        len(result.included),
        result.excluded,
        result.duplicates,
    )
    return result


def aggregate(
    base_dir: Union[str, Path, None],
    template_text: str,
    *,
    respect_gitignore: bool = False,
) -> str:
    return aggregate_report(base_dir, template_text, respect_gitignore=respect_gitignore).text
