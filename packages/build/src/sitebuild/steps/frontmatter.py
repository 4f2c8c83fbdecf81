"""
Frontmatter meta tags (title, description, Open Graph, Twitter, article dates,
canonical link) injected into the generated HTML documents.
"""

from __future__ import annotations

import asyncio
from html import escape
from pathlib import Path
from typing import Any, Mapping, Optional

from sitebuild.core import atomic_write_text
from sitebuild.pipeline.context import BuildContext
from sitebuild.pipeline.events import EventType
from sitebuild.pipeline.state import PipelineState
from sitebuild.pipeline.step import step

_DEFAULT_LANG_TAG = '<html lang="en">'


def _e(value: Any) -> str:
    return escape(str(value), quote=True)


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def resolve_image_url(image_path: str, site_url: Optional[str] = None) -> str:
    """
    Make a social-sharing image URL absolute when a site URL is known.

    Absolute http(s) URLs are returned unchanged; without a site URL a relative
    path is returned as-is.
    """
    if not image_path:
        return ""
    if image_path.startswith(("http://", "https://")):
        return image_path
    if site_url:
        base = str(site_url).rstrip("/")
        path = image_path if image_path.startswith("/") else "/" + image_path
        return base + path
    return image_path


def build_meta_tags(metadata: Mapping[str, Any]) -> list[str]:
    """All values are HTML-escaped; falsy fields produce no tag."""
    m = metadata
    site_url = m.get("siteUrl")
    image = resolve_image_url(str(m["image"]), site_url) if m.get("image") else None

    tags: list[Optional[str]] = [
        m.get("title") and f"<title>{_e(m['title'])}</title>",
        m.get("description")
        and f'<meta name="description" content="{_e(m["description"])}">',
        m.get("keywords")
        and '<meta name="keywords" content="{}">'.format(
            _e(", ".join(str(k) for k in _as_list(m["keywords"])))
        ),
        m.get("author") and f'<meta name="author" content="{_e(m["author"])}">',
        m.get("robots") and f'<meta name="robots" content="{_e(m["robots"])}">',
        # Open Graph
        m.get("title") and f'<meta property="og:title" content="{_e(m["title"])}">',
        m.get("description")
        and f'<meta property="og:description" content="{_e(m["description"])}">',
        image and f'<meta property="og:image" content="{_e(image)}">',
        m.get("url") and f'<meta property="og:url" content="{_e(m["url"])}">',
        f'<meta property="og:type" content="{_e(m.get("type") or "article")}">',
        # Twitter
        m.get("title") and f'<meta name="twitter:title" content="{_e(m["title"])}">',
        m.get("description")
        and f'<meta name="twitter:description" content="{_e(m["description"])}">',
        image and f'<meta name="twitter:image" content="{_e(image)}">',
        '<meta name="twitter:card" content="{}">'.format(
            _e(m.get("twitterCard") or "summary_large_image")
        ),
        m.get("publishDate")
        and f'<meta property="article:published_time" content="{_e(m["publishDate"])}">',
        m.get("modifiedDate")
        and f'<meta property="article:modified_time" content="{_e(m["modifiedDate"])}">',
        m.get("canonical") and f'<link rel="canonical" href="{_e(m["canonical"])}">',
    ]
    out = [t for t in tags if t]

    if m.get("tags"):
        out.extend(
            f'<meta property="article:tag" content="{_e(tag)}">'
            for tag in _as_list(m["tags"])
        )
    return out


def inject_frontmatter(html: str, metadata: Mapping[str, Any]) -> str:
    """
    Insert meta tags before the first `</head>` and replace the default
    `<html lang="en">` when the page sets `lang`.
    """
    joined = "\n    ".join(build_meta_tags(metadata))
    html = html.replace("</head>", f"    {joined}\n  </head>", 1)
    if metadata.get("lang"):
        html = html.replace(_DEFAULT_LANG_TAG, f'<html lang="{_e(metadata["lang"])}">', 1)
    return html


def _rewrite(path: Path, metadata: Mapping[str, Any]) -> None:
    html = path.read_text(encoding="utf-8")
    atomic_write_text(path, inject_frontmatter(html, metadata))


def _has_html(ctx: BuildContext, state: PipelineState) -> bool:
    return state.outputs.has("html_files")


@step(
    "08-inject-frontmatter",
    "Inject frontmatter meta tags into HTML",
    gate=_has_html,
)
async def inject_frontmatter_step(ctx: BuildContext, state: PipelineState) -> None:
    rendered_pages = state.outputs.get("rendered_pages", {})
    injected = 0

    for name, entry in sorted(state.outputs.entries.items()):
        rendered = rendered_pages.get(name)
        metadata = rendered.frontmatter if rendered is not None else entry.frontmatter
        if not metadata:
            continue

        path = entry.artifact_path(".html", ctx.layout.client_compiled_dir)
        await asyncio.to_thread(_rewrite, path, metadata)
        injected += 1

    if injected:
        ctx.step_logger("08-inject-frontmatter").debug(
            f"Injected frontmatter meta tags into {injected} HTML files"
        )
    ctx.emit(EventType.FRONTMATTER_INJECTED, step="08-inject-frontmatter", count=injected)
