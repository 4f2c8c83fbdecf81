"""
The compile/bundle/render collaborators the build delegates to.

sitebuild never compiles markdown, bundles scripts or renders markup itself; a
Toolchain does. Steps that need one are gated off when the context has none.
Every call receives the build's BuildOptions, so a toolchain can skip
minification for development builds and prefix asset URLs with the base path.
"""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import TYPE_CHECKING, Mapping, Optional, Protocol, runtime_checkable

from sitebuild.core import ToolchainError

if TYPE_CHECKING:
    from sitebuild.core import BuildOptions
    from sitebuild.output.entries import Entry
    from sitebuild.pipeline.context import BuildContext
    from sitebuild.pipeline.types import RenderedPage


@runtime_checkable
class Toolchain(Protocol):
    async def prepare(self, ctx: BuildContext, options: BuildOptions) -> None:
        """Make sure the compiler/bundler dependencies are installed."""
        ...

    async def build_css(self, ctx: BuildContext, options: BuildOptions) -> Optional[str]:
        """
        Build the site stylesheet into ctx.layout.client_compiled_dir and return
        its file name, or None when the project has no stylesheet.
        """
        ...

    async def bundle_server(
        self, ctx: BuildContext, options: BuildOptions, entries: Mapping[str, Entry]
    ) -> Mapping[str, Path]:
        """Compile one server module per entry; entry name -> module path."""
        ...

    async def render_pages(
        self,
        ctx: BuildContext,
        options: BuildOptions,
        entries: Mapping[str, Entry],
        server_modules: Mapping[str, Path],
    ) -> Mapping[str, RenderedPage]:
        ...

    async def bundle_client(
        self, ctx: BuildContext, options: BuildOptions, entries: Mapping[str, Entry]
    ) -> Mapping[str, str]:
        """Bundle client scripts into the client-compiled dir; entry name -> file name."""
        ...

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
        """Full HTML document for one page."""
        ...


def load_toolchain(ref: str) -> Toolchain:
    """
    Load a toolchain from 'package.module:attribute'. A callable attribute is
    called with no arguments (a class or factory); anything else is used as-is.
    """
    module_name, sep, attr = ref.partition(":")
    if not sep or not module_name or not attr:
        raise ToolchainError(
            f"Toolchain must look like 'package.module:attribute', got {ref!r}"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ToolchainError(f"Cannot import toolchain module {module_name!r}") from exc

    try:
        obj = getattr(module, attr)
    except AttributeError as exc:
        raise ToolchainError(f"{module_name!r} has no attribute {attr!r}") from exc

    if isinstance(obj, type) or (callable(obj) and not isinstance(obj, Toolchain)):
        try:
            toolchain = obj()
        except Exception as exc:
            raise ToolchainError(f"Cannot create toolchain from {ref!r}: {exc}") from exc
    else:
        toolchain = obj
    if isinstance(toolchain, type) or not isinstance(toolchain, Toolchain):
        raise ToolchainError(f"{ref!r} does not provide a Toolchain")
    return toolchain


def has_toolchain(ctx: BuildContext, _state: object = None) -> bool:
    return ctx.toolchain is not None


def require_toolchain(ctx: BuildContext) -> Toolchain:
    if ctx.toolchain is None:
        raise ToolchainError("This step needs a toolchain, but none is configured")
    return ctx.toolchain
