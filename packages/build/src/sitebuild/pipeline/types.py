from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class RenderedPage:
    """
    Server-rendered body of one page plus the frontmatter found while compiling it.
    """

    entry_name: str
    body_html: str
    frontmatter: dict[str, Any] = field(default_factory=dict)
