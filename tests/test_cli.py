from __future__ import annotations

from pathlib import Path

import pyperclip
import pytest

from promptmyrepo import cli
from promptmyrepo.templates import STARTER_TEMPLATE, TEMPLATES_SUBDIR


def run(ws: Path, *args: str) -> None:
    cli.main(["--workspace", str(ws), *args])


def test_template_lifecycle(workspace: Path, capsys) -> None:
    run(workspace, "new", "web")
    assert (workspace / TEMPLATES_SUBDIR / "web").read_text(encoding="utf-8") == STARTER_TEMPLATE

    run(workspace, "mv", "web", "site")
    capsys.readouterr()
    run(workspace, "list")
    assert capsys.readouterr().out.splitlines() == ["site"]

    run(workspace, "show", "site")
    assert capsys.readouterr().out == STARTER_TEMPLATE

    run(workspace, "path", "site")
    assert capsys.readouterr().out.strip() == str(workspace.resolve() / TEMPLATES_SUBDIR / "site")

    run(workspace, "rm", "site")
    run(workspace, "list")
    assert capsys.readouterr().out == ""


def test_copy_stored_template_to_stdout(workspace: Path, capsys) -> None:
    run(workspace, "new", "scenario")
    (workspace / TEMPLATES_SUBDIR / "scenario").write_text("a.txt\nb*\n-b/d.txt\n", encoding="utf-8")
    capsys.readouterr()

    run(workspace, "copy", "scenario")
    out = capsys.readouterr().out
    assert out == "a.txt:\n```\nhello\n```\n\nb/c.txt:\n```\nworld\n```\n"


def test_copy_from_file_to_out(workspace: Path, tmp_path: Path) -> None:
    template = tmp_path / "t.txt"
    template.write_text("# only a\na.txt\n", encoding="utf-8")
    out = tmp_path / "nested" / "out.md"

    run(workspace, "copy", "--file", str(template), "--out", str(out))
    assert out.read_text(encoding="utf-8") == "# only a\na.txt:\n```\nhello\n```"


def test_copy_to_clipboard(workspace: Path, tmp_path: Path, monkeypatch, capsys) -> None:
    copied = []
    monkeypatch.setattr(pyperclip, "copy", copied.append)
    template = tmp_path / "t.txt"
    template.write_text("b/c.txt", encoding="utf-8")

    run(workspace, "copy", "-f", str(template), "--clipboard")
    captured = capsys.readouterr()
    assert copied == ["b/c.txt:\n```\nworld\n```"]
    assert captured.out == ""
    assert "copied to clipboard" in captured.err


def test_clipboard_failure_is_reported(workspace: Path, tmp_path: Path, monkeypatch, capsys) -> None:
    def broken(text: str) -> None:
        raise pyperclip.PyperclipException("no clipboard")

    monkeypatch.setattr(pyperclip, "copy", broken)
    template = tmp_path / "t.txt"
    template.write_text("a.txt", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        run(workspace, "copy", "-f", str(template), "-c")
    assert exc.value.code == 1
    assert "Could not copy to clipboard" in capsys.readouterr().err


def test_copy_with_gitignore(make_tree, tmp_path: Path, capsys) -> None:
    ws = make_tree({".gitignore": "*.log\n", "src/a.py": "A", "src/b.log": "B"})
    template = tmp_path / "t.txt"
    template.write_text("src*", encoding="utf-8")

    run(ws, "copy", "-f", str(template), "--gitignore")
    assert "src/b.log" not in capsys.readouterr().out


def test_unknown_template_exits_with_error(workspace: Path, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        run(workspace, "copy", "missing")
    assert exc.value.code == 1
    assert "Error: Template 'missing' does not exist" in capsys.readouterr().err


def test_name_conflict_exits_with_error(workspace: Path, capsys) -> None:
    run(workspace, "new", "a")
    run(workspace, "new", "b")
    with pytest.raises(SystemExit):
        run(workspace, "mv", "a", "b")
    assert "already exists" in capsys.readouterr().err


def test_missing_workspace_exits_with_error(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        run(tmp_path / "missing", "list")
    assert exc.value.code == 1
    assert "does not exist" in capsys.readouterr().err


def test_workspace_from_environment(workspace: Path, monkeypatch, capsys) -> None:
    monkeypatch.setenv(cli.WORKSPACE_ENV, str(workspace))
    cli.main(["new", "env"])
    assert (workspace / TEMPLATES_SUBDIR / "env").is_file()


def test_copy_requires_a_template(workspace: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        run(workspace, "copy")
    assert exc.value.code == 2


def test_verbose_copy_logs_each_summary_line_once(workspace: Path, tmp_path: Path, monkeypatch, capsys) -> None:
    from promptmyrepo import core

    real_read = core._read_text

    def flaky(path: Path) -> str:
        if path.name == "c.txt":
            raise PermissionError("denied")
        return real_read(path)

    monkeypatch.setattr(core, "_read_text", flaky)
    template = tmp_path / "t.txt"
    template.write_text("a.txt\nb*\na.txt\nmissing.txt\n-b/d.txt\n", encoding="utf-8")

    run(workspace, "-v", "copy", "-f", str(template))
    err = capsys.readouterr().err.splitlines()

    for line in (
        "[promptmyrepo] 1 files included",
        "[promptmyrepo] 1 matches dropped by exclusions",
        "[promptmyrepo] 1 duplicate matches skipped",
        "[promptmyrepo] No files matched: missing.txt",
        "[promptmyrepo] 1 files could not be read: b/c.txt",
    ):
        assert err.count(line) == 1, line
    assert sum("files included" in line for line in err) == 1


def test_unexpected_error_is_reported_without_traceback(workspace: Path, tmp_path: Path, monkeypatch, capsys) -> None:
    def broken(*args, **kwargs):
        raise OSError("disk on fire")

    monkeypatch.setattr(cli, "aggregate_report", broken)
    template = tmp_path / "t.txt"
    template.write_text("a.txt", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        run(workspace, "copy", "-f", str(template))
    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert "Unexpected error: disk on fire" in err
    assert "Traceback" not in err
