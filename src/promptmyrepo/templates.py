"""
Template storage: named template files kept inside the workspace.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from .core import (
    InvalidTemplateNameError,
    NameConflictError,
    NoWorkspaceError,
    TemplateError,
    TemplateNotFoundError,
)
from .logs import get_logger

TEMPLATES_SUBDIR = Path(".vscode") / "prompt-my-repo-templates"

STARTER_TEMPLATE = (
    "# Project-specific template for Prompt My Repo\n"
    "# Include directories or files you want to copy relative to the workspace root.\n"
    '# Append "*" to a directory for a recursive search (e.g., src*).\n'
    '# Exclude files or directories by prefixing them with "-" (e.g., -node_modules*).\n'
)

_FORBIDDEN_CHARS = ("/", "\\", "\0")

log = get_logger("templates")


def validate_template_name(name: str) -> str:
    """Return *name* stripped, or raise if it cannot be a template file name."""
    cleaned = name.strip()
    if not cleaned:
        raise InvalidTemplateNameError("Template name must not be empty")
    if cleaned in (".", ".."):
        raise InvalidTemplateNameError(f"'{cleaned}' is not a valid template name")
    if any(ch in cleaned for ch in _FORBIDDEN_CHARS) or (os.altsep and os.altsep in cleaned):
        raise InvalidTemplateNameError(
            f"Template name '{cleaned}' must not contain path separators"
        )
    return cleaned


@dataclass(frozen=True)
class Template:
    name: str
    path: Path

    def read(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise TemplateError(f"Could not read template '{self.name}': {e}")


class TemplateStore:
    """A directory of template files, one file per template."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)

    @classmethod
    def for_workspace(
        cls,
        workspace: Union[str, Path, None],
        directory: Optional[Union[str, Path]] = None,
    ) -> "TemplateStore":
        if workspace is None or str(workspace) == "":
            raise NoWorkspaceError(
                "You must have a workspace folder open to use project-specific templates"
            )
        root = Path(workspace).resolve()
        if not root.is_dir():
            raise NoWorkspaceError(f"Workspace directory '{root}' does not exist")
        if directory is None:
            return cls(root / TEMPLATES_SUBDIR)
        return cls(root / directory)

    def ensure(self) -> Path:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TemplateError(f"Could not create templates directory '{self.directory}': {e}")
        return self.directory

    def _path(self, name: str) -> Path:
        return self.directory / validate_template_name(name)

    def list(self) -> List[Template]:
        self.ensure()
        return [
            Template(p.name, p)
            for p in sorted(self.directory.iterdir(), key=lambda p: p.name)
            if p.is_file()
        ]

    def get(self, name: str) -> Template:
        path = self._path(name)
        if not path.is_file():
            raise TemplateNotFoundError(f"Template '{path.name}' does not exist")
        return Template(path.name, path)

    def create(self, name: str, content: str = STARTER_TEMPLATE) -> Template:
        path = self._path(name)
        self.ensure()
        if path.exists():
            raise NameConflictError(f"Template '{path.name}' already exists")
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise TemplateError(f"Could not write template '{path.name}': {e}")
        log.info("Created template %s", path)
        return Template(path.name, path)

    def delete(self, name: str) -> None:
        template = self.get(name)
        try:
            template.path.unlink()
        except OSError as e:
            raise TemplateError(f"Could not delete template '{template.name}': {e}")
        log.info("Deleted template %s", template.path)

    def rename(self, old_name: str, new_name: str) -> Template:
        template = self.get(old_name)
        target = self._path(new_name)
        if target.exists():
            raise NameConflictError(f"A template named '{target.name}' already exists")
        try:
            template.path.rename(target)
        except OSError as e:
            raise TemplateError(f"Could not rename template '{template.name}': {e}")
        log.info("Renamed template %s -> %s", template.name, target.name)
        return Template(target.name, target)
