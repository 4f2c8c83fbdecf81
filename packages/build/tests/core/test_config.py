from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from sitebuild.core import BuildOptions, Settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    s = Settings()
    assert s.log_level == "INFO"
    assert s.log_format == "console"
    assert s.pages_dir == Path("pages")
    assert s.out_dir == Path("dist")


def test_settings_read_prefixed_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SITEBUILD_OUT_DIR", "site")
    monkeypatch.setenv("SITEBUILD_LOG_FORMAT", "json")
    s = Settings()
    assert s.out_dir == Path("site")
    assert s.log_format == "json"


def test_settings_reject_unknown_log_format(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SITEBUILD_LOG_FORMAT", "xml")
    with pytest.raises(ValidationError):
        Settings()


def test_build_options_are_frozen() -> None:
    opts = BuildOptions(ssg=True, base="/docs")
    assert opts.development is False
    with pytest.raises(ValidationError):
        opts.ssg = False  # type: ignore[misc]
    with pytest.raises(ValidationError):
        BuildOptions(minify=True)  # type: ignore[call-arg]
