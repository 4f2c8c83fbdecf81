from sitebuild.pipeline.step import PipelineItem, StepGroup

from .check import check_conflicts_step
from .compile import (
    catalog_pages_step,
    client_build_step,
    generate_html_step,
    render_server_step,
    server_build_step,
    tailwind_css_step,
)
from .frontmatter import inject_frontmatter_step
from .setup import ensure_dependencies_step, reset_directories_step
from .static import copy_static_step, copy_to_dist_step
from .toolchain import Toolchain, load_toolchain

# Execution order is list order.
BUILD_STEPS: tuple[PipelineItem, ...] = (
    ensure_dependencies_step,
    reset_directories_step,
    check_conflicts_step,
    catalog_pages_step,
    StepGroup((tailwind_css_step, server_build_step)),
    render_server_step,
    client_build_step,
    generate_html_step,
    inject_frontmatter_step,
    copy_static_step,
    copy_to_dist_step,
)

__all__ = [
    "BUILD_STEPS",
    "Toolchain",
    "load_toolchain",
    "check_conflicts_step",
    "catalog_pages_step",
    "client_build_step",
    "generate_html_step",
    "render_server_step",
    "server_build_step",
    "tailwind_css_step",
    "inject_frontmatter_step",
    "ensure_dependencies_step",
    "reset_directories_step",
    "copy_static_step",
    "copy_to_dist_step",
]
