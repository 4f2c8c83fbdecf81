from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sitebuild.core.fs import iter_files, relpath_posix

from .paths import entry_artifact_path, entry_name, is_markdown


@dataclass(slots=True)
class Entry:
    """
    A logical page cataloged from the pages tree before any compilation.

    `name` is the source path relative to the pages root without its extension,
    e.g. 'articles/post1' for 'pages/articles/post1.mdx'.
    """

    abs_path: Path
    base_dir: Path
    rel_path: str = field(init=False)
    name: str = field(init=False)
    frontmatter: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.abs_path = Path(self.abs_path).resolve()
        self.base_dir = Path(self.base_dir).resolve()
        self.rel_path = relpath_posix(self.abs_path, self.base_dir)
        self.name = entry_name(self.rel_path)

    def artifact_rel_path(self, extension: str) -> str:
        return entry_artifact_path(self.name, extension)

    def artifact_path(self, extension: str, base_dir: Path) -> Path:
        """Absolute path of this entry's artifact with `extension` under `base_dir`."""
        return Path(base_dir) / self.artifact_rel_path(extension)


def catalog_entries(pages_dir: Path) -> dict[str, Entry]:
    """
    Map every markdown page under `pages_dir` to an Entry keyed by entry name.

    When two sources share a name (foo.md and foo.mdx) the later one in sorted
    order wins; the conflict check reports such pairs before this runs.
    """
    entries: dict[str, Entry] = {}
    for p in iter_files(Path(pages_dir)):
        if not is_markdown(p.name):
            continue
        entry = Entry(abs_path=p, base_dir=Path(pages_dir))
        entries[entry.name] = entry
    return entries
