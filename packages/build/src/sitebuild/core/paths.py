from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


def normalize_base(base: str | None) -> str:
    """
    Normalize a URL base path to start with '/' and not end with '/'.

    Returns '' for None, empty, or root-only input.
    """
    if not base or base == "/":
        return ""
    normalized = base
    if not normalized.startswith("/"):
        normalized = "/" + normalized
    if normalized.endswith("/"):
        normalized = normalized[:-1]
    return normalized


@dataclass(frozen=True, slots=True)
class BuildLayout:
    """
    Canonical directory layout for one project build:

      {root}/pages/                  page sources
      {root}/public/                 verbatim static assets
      {root}/dist/                   output root (wiped on every build)
      {root}/dist/{base}/            build dir when testing under a base path
      {root}/.sitebuild/cache/       temp dir for intermediate artifacts
    """

    root: Path
    pages_dir: Path
    static_dir: Path
    out_dir: Path
    build_dir: Path
    temp_dir: Path

    @classmethod
    def resolve(
        cls,
        root: Path | str = ".",
        *,
        pages_dir: Path | str = "pages",
        static_dir: Path | str = "public",
        out_dir: Path | str = "dist",
        temp_dir: Path | str = ".sitebuild/cache",
        base: str | None = None,
        test_base: bool = False,
    ) -> "BuildLayout":
        root_p = Path(root).expanduser().resolve()
        out_p = (root_p / out_dir).resolve()

        build_p = out_p
        normalized = normalize_base(base)
        if test_base and normalized:
            build_p = (out_p / normalized[1:]).resolve()

        return cls(
            root=root_p,
            pages_dir=(root_p / pages_dir).resolve(),
            static_dir=(root_p / static_dir).resolve(),
            out_dir=out_p,
            build_dir=build_p,
            temp_dir=(root_p / temp_dir).resolve(),
        )

    @property
    def client_compiled_dir(self) -> Path:
        return self.temp_dir / "client-compiled"

    @property
    def server_compiled_dir(self) -> Path:
        return self.temp_dir / "server-compiled"
