from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Mapping, Optional

import pytest

from sitebuild.core import BuildOptions, Settings, atomic_write_text, get_logger
from sitebuild.core.paths import normalize_base
from sitebuild.output.entries import Entry
from sitebuild.pipeline import BuildContext, RenderedPage


def write_files(root: Path, files: Mapping[str, str]) -> None:
    for rel, text in files.items():
        atomic_write_text(root / rel, text)


class FakeToolchain:
    """Writes tiny deterministic artifacts instead of compiling anything."""

    def __init__(self, frontmatter: Optional[dict[str, dict[str, Any]]] = None) -> None:
        self.frontmatter = frontmatter or {}
        self.calls: list[str] = []
        self.options_seen: list[BuildOptions] = []

    def _record(self, call: str, options: BuildOptions) -> None:
        self.calls.append(call)
        self.options_seen.append(options)

    async def prepare(self, ctx: BuildContext, options: BuildOptions) -> None:
        self._record("prepare", options)

    async def build_css(self, ctx: BuildContext, options: BuildOptions) -> Optional[str]:
        self._record("build_css", options)
        atomic_write_text(ctx.layout.client_compiled_dir / "styles.css", "body{}\n")
        return "styles.css"

    async def bundle_server(
        self, ctx: BuildContext, options: BuildOptions, entries: Mapping[str, Entry]
    ) -> Mapping[str, Path]:
        self._record("bundle_server", options)
        return {
            name: entry.artifact_path(".js", ctx.layout.server_compiled_dir)
            for name, entry in entries.items()
        }

    async def render_pages(
        self,
        ctx: BuildContext,
        options: BuildOptions,
        entries: Mapping[str, Entry],
        server_modules: Mapping[str, Path],
    ) -> Mapping[str, RenderedPage]:
        self._record("render_pages", options)
        return {
            name: RenderedPage(
                entry_name=name,
                body_html=f"<main>{name}</main>",
                frontmatter=self.frontmatter.get(name, {}),
            )
            for name in entries
        }

    async def bundle_client(
        self, ctx: BuildContext, options: BuildOptions, entries: Mapping[str, Entry]
    ) -> Mapping[str, str]:
        self._record("bundle_client", options)
        scripts = {}
        for name, entry in entries.items():
            rel = entry.artifact_rel_path(".js")
            atomic_write_text(ctx.layout.client_compiled_dir / rel, "//\n")
            scripts[name] = rel
        return scripts

    def page_document(
        self,
        ctx: BuildContext,
        options: BuildOptions,
        entry: Entry,
        *,
        rendered: Optional[RenderedPage],
        css_filename: Optional[str],
        script: Optional[str],
    ) -> str:
        body = rendered.body_html if rendered is not None else ""
        prefix = normalize_base(options.base)
        return (
            '<html lang="en">\n  <head>\n'
            f'    <link rel="stylesheet" href="{prefix}/{css_filename}">\n'
            "  </head>\n"
            f'  <body>{body}<script src="{prefix}/{script}"></script></body>\n'
            "</html>\n"
        )


@pytest.fixture
def make_ctx(tmp_path: Path) -> Callable[..., BuildContext]:
    def _make(toolchain: Any = None, **kw: Any) -> BuildContext:
        return BuildContext.create(
            tmp_path,
            settings=Settings(),
            logger=get_logger("test"),
            toolchain=toolchain,
            **kw,
        )

    return _make


@pytest.fixture
def write_tree() -> Callable[[Path, Mapping[str, str]], None]:
    return write_files


@pytest.fixture
def fake_toolchain() -> type[FakeToolchain]:
    return FakeToolchain
