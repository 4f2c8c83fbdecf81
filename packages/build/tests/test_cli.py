from __future__ import annotations

import sys
import types
from pathlib import Path
from typing import Callable, Mapping

import pytest

from sitebuild.cli import main
from sitebuild.core import read_json
from sitebuild.pipeline import PipelineRunner


@pytest.fixture(autouse=True)
def _isolated_cwd(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)


def test_build_clean_tree_exits_zero(
    tmp_path: Path, write_tree: Callable[[Path, Mapping[str, str]], None]
) -> None:
    project = tmp_path / "site"
    write_tree(project / "pages", {"index.mdx": "# hi", "logo.svg": "<svg/>"})
    write_tree(project / "public", {"robots.txt": "ok"})
    report = tmp_path / "report.json"

    assert main(["build", str(project), "--report", str(report)]) == 0

    assert (project / "dist" / "logo.svg").is_file()
    assert (project / "dist" / "index.md").is_file()
    data = read_json(report)
    assert data["status"] == "succeeded"
    assert data["file_count"] == 3


def test_build_with_conflicts_exits_one(
    tmp_path: Path,
    write_tree: Callable[[Path, Mapping[str, str]], None],
    capsys: pytest.CaptureFixture[str],
) -> None:
    project = tmp_path / "site"
    write_tree(project / "src", {"about.mdx": "a", "about/index.mdx": "b"})
    report = tmp_path / "report.json"

    code = main(["build", str(project), "--pages-dir", "src", "--report", str(report)])

    assert code == 1
    assert "about/index.html is produced by multiple sources" in capsys.readouterr().out
    data = read_json(report)
    assert data["status"] == "failed"
    assert data["failed_step"] == "02b-check-conflicts"
    assert data["error"]["exc_type"] == "ConflictError"


def test_bad_toolchain_exits_one(tmp_path: Path) -> None:
    assert main(["build", str(tmp_path), "--toolchain", "not-a-module-ref"]) == 1


def test_unknown_command_is_rejected() -> None:
    with pytest.raises(SystemExit):
        main(["serve"])


def test_out_dir_over_static_dir_keeps_sources(
    tmp_path: Path,
    write_tree: Callable[[Path, Mapping[str, str]], None],
    capsys: pytest.CaptureFixture[str],
) -> None:
    project = tmp_path / "site"
    write_tree(project / "pages", {"index.md": "# hi"})
    write_tree(project / "public", {"robots.txt": "ok"})

    assert main(["build", str(project), "--out-dir", "public"]) == 1

    assert (project / "public" / "robots.txt").read_text() == "ok"
    assert "Refusing to remove" in capsys.readouterr().out


def test_development_build_passes_options_to_toolchain(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    write_tree: Callable[[Path, Mapping[str, str]], None],
    fake_toolchain,
) -> None:
    project = tmp_path / "site"
    write_tree(project / "pages", {"index.md": "# hi"})
    toolchain = fake_toolchain()
    module = types.ModuleType("sitebuild_cli_toolchain")
    module.chain = toolchain
    monkeypatch.setitem(sys.modules, "sitebuild_cli_toolchain", module)

    code = main(
        [
            "build",
            str(project),
            "--development",
            "--base",
            "/docs",
            "--toolchain",
            "sitebuild_cli_toolchain:chain",
        ]
    )

    assert code == 0
    assert toolchain.options_seen
    assert all(o.development and o.base == "/docs" for o in toolchain.options_seen)


def test_missing_state_exits_one(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(PipelineRunner, "run_sync", lambda self, ctx, options=None: None)

    assert main(["build", str(tmp_path)]) == 1
