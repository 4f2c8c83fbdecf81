from __future__ import annotations

from enum import Enum


class EventType(str, Enum):
    BUILD_START = "build.start"
    BUILD_FINISH = "build.finish"

    STEP_START = "step.start"
    STEP_SKIP = "step.skip"
    STEP_SUCCESS = "step.success"
    STEP_FAILED = "step.failed"

    GROUP_START = "group.start"
    GROUP_FINISH = "group.finish"

    CONFLICTS_CHECKED = "conflicts.checked"
    PAGES_CATALOGED = "pages.cataloged"
    STATIC_COPIED = "static.copied"
    HTML_WRITTEN = "html.written"
    FRONTMATTER_INJECTED = "frontmatter.injected"
    DIST_WRITTEN = "dist.written"
