from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sitebuild.core import (
    BuildError,
    BuildOptions,
    StepExecutionError,
    bind,
    configure_logging,
    format_duration_ms,
    get_logger,
    load_settings,
    monotonic_ms,
    utc_now_iso,
)
from sitebuild.pipeline import (
    BuildContext,
    PipelineRunner,
    PipelineState,
    build_report,
    format_build_error,
)
from sitebuild.steps import BUILD_STEPS, Toolchain, load_toolchain

console = Console()


@dataclass(frozen=True, slots=True)
class _BuildArgs:
    root: Path
    pages_dir: str | None
    static_dir: str | None
    out_dir: str | None
    temp_dir: str | None
    ssg: bool
    development: bool
    base: str | None
    test_base: bool
    toolchain: str | None
    report: Path | None


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="sitebuild")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("build", help="Build the site into the output directory")
    sp.add_argument("path", nargs="?", default=".", help="Project root (default: .)")
    sp.add_argument("--pages-dir", default=None, help="Page sources (default: pages)")
    sp.add_argument(
        "--static-dir", default=None, help="Verbatim static assets (default: public)"
    )
    sp.add_argument("--out-dir", default=None, help="Output directory (default: dist)")
    sp.add_argument(
        "--temp-dir",
        default=None,
        help="Intermediate artifacts (default: .sitebuild/cache)",
    )
    sp.add_argument(
        "--ssg", action="store_true", help="Pre-render pages on the server"
    )
    sp.add_argument(
        "--development", action="store_true", help="Development build (no minify)"
    )
    sp.add_argument("--base", default=None, help="URL base path, e.g. /docs")
    sp.add_argument(
        "--test-base",
        action="store_true",
        help="Nest the output under the base path to preview it locally",
    )
    sp.add_argument(
        "--toolchain",
        default=None,
        metavar="MODULE:ATTR",
        help="Toolchain providing CSS, bundling and rendering",
    )
    sp.add_argument(
        "--report", default=None, metavar="FILE", help="Write a JSON build report"
    )
    return p


def _args(ns: argparse.Namespace) -> _BuildArgs:
    return _BuildArgs(
        root=Path(ns.path),
        pages_dir=ns.pages_dir,
        static_dir=ns.static_dir,
        out_dir=ns.out_dir,
        temp_dir=ns.temp_dir,
        ssg=bool(ns.ssg),
        development=bool(ns.development),
        base=ns.base,
        test_base=bool(ns.test_base),
        toolchain=ns.toolchain,
        report=Path(ns.report) if ns.report else None,
    )


def _timings_table(state: PipelineState, duration_ms: int) -> Table:
    tbl = Table(title="Result", show_header=True, box=None)
    tbl.add_column("step")
    tbl.add_column("time", justify="right")
    for name, ms in state.timings.items():
        tbl.add_row(name, format_duration_ms(ms))
    tbl.add_row("[bold]total[/bold]", format_duration_ms(duration_ms))

    stats = state.outputs.get("build_stats")
    if stats is not None:
        tbl.add_row("files", str(stats.file_count))
    return tbl


def run_build(args: _BuildArgs) -> int:
    s = load_settings()
    configure_logging(level=s.log_level, fmt=s.log_format)
    log = get_logger("sitebuild")

    toolchain: Toolchain | None = None
    if args.toolchain:
        try:
            toolchain = load_toolchain(args.toolchain)
        except BuildError as e:
            console.print(f"[red]{e}[/red]", markup=True)
            return 1

    options = BuildOptions(ssg=args.ssg, development=args.development, base=args.base)
    ctx = BuildContext.create(
        args.root,
        settings=s,
        logger=log,
        toolchain=toolchain,
        base=options.base,
        test_base=args.test_base,
        pages_dir=args.pages_dir,
        static_dir=args.static_dir,
        out_dir=args.out_dir,
        temp_dir=args.temp_dir,
    )
    build_id = ctx.session.build_id
    bind(build_id=build_id)

    runner = PipelineRunner(items=BUILD_STEPS, logger=log)

    console.print(
        Panel.fit(
            Text(
                f"sitebuild - build\nbuild_id={build_id}\nroot={ctx.root_dir}",
                style="bold",
            ),
            title="Build",
        )
    )

    started_at = utc_now_iso()
    t0 = monotonic_ms()
    state: PipelineState | None = None
    error: BaseException | None = None
    try:
        with console.status("[bold]Building...[/]", spinner="dots"):
            state = runner.run_sync(ctx, options)
    except BuildError as e:
        error = e
        state = getattr(e, "state", None)
    duration = monotonic_ms() - t0

    if args.report is not None:
        report = build_report(
            build_id=build_id,
            started_at_utc=started_at,
            finished_at_utc=utc_now_iso(),
            duration_ms=duration,
            state=state,
            error=(error.__cause__ or error) if error is not None else None,
            meta={"root": str(ctx.root_dir), "build_dir": str(ctx.build_dir)},
        )
        report.write_json(args.report)

    if error is not None:
        if isinstance(error, StepExecutionError):
            message = str(error)
            title = f"[red]Build failed at {error.step_name}[/red]"
        else:
            message = format_build_error(error)
            title = "[red]Build failed[/red]"
        console.print(
            Panel(
                Text(message),
                title=title,
                border_style="red",
            )
        )
        return 1

    if state is None:
        console.print("[red]Build produced no result[/red]", markup=True)
        return 1

    console.print(_timings_table(state, duration))
    console.print(f"[green]Build complete:[/green] {ctx.build_dir}")
    return 0


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    if ns.cmd == "build":
        return run_build(_args(ns))
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
