from __future__ import annotations

import argparse
import sys

import logging

import yaml
from rich import print
from rich.markup import escape

from inset_pipe.config import load_config
from inset_pipe.geometry import round_half_up
from inset_pipe.log import setup_logging
from inset_pipe.pipeline import MAX_OUTPUT_DIMENSION, clamp_zoom, max_zoom_for_region
from inset_pipe.schema import schema_validate
from inset_pipe.version import engine_stamp


def _cmd_version() -> int:
    v = engine_stamp()
    print(f"[bold]inset-pipe[/bold] {v.package_version} (engine {v.engine_version})")
    print(f"kernels: {', '.join(v.kernels)}")
    print(f"numpy {v.numpy}, python {v.python}")
    return 0


def _cmd_check_config(path: str) -> int:
    log = logging.getLogger("inset_pipe")
    try:
        cfg = load_config(path)
    except (OSError, TypeError, yaml.YAMLError) as e:
        print(f"[red]Cannot read config:[/red] {escape(str(e))}")
        return 2
    rep = schema_validate(cfg)
    for issue in rep.errors:
        print(f"[red]{issue.code}[/red] {escape(issue.message)}")
        if issue.hint:
            print(f"  [dim]{escape(issue.hint)}[/dim]")
    for issue in rep.warnings:
        print(f"[yellow]{issue.code}[/yellow] {escape(issue.message)}")
    if rep.ok:
        print(f"[green]OK[/green] {escape(cfg['config_path'])}")
        log.info("Config valid: %s", cfg["config_path"])
        return 0
    return 1


def _cmd_zoom_limit(width: int, height: int, zoom: float | None) -> int:
    max_zoom = max_zoom_for_region(width, height)
    print(f"Region {width}x{height}: max zoom [bold]{max_zoom:.1f}x[/bold] (cap {MAX_OUTPUT_DIMENSION}px)")
    if zoom is not None:
        z = clamp_zoom(width, height, zoom)
        final = round_half_up(max(width, height) * z)
        print(f"Requested {zoom:g}x -> {z:.2f}x (final: {final}px)")
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="inset-pipe")
    p.add_argument(
        "--log-level",
        default=None,
        help="CRITICAL|ERROR|WARNING|INFO|DEBUG (or env INSET_LOG_LEVEL)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("version", help="Print package/engine version")

    p_chk = sub.add_parser("check-config", help="Validate an inset parameter YAML")
    p_chk.add_argument("--config", required=True)

    p_zoom = sub.add_parser("zoom-limit", help="Zoom range allowed for a region size")
    p_zoom.add_argument("--width", type=int, required=True)
    p_zoom.add_argument("--height", type=int, required=True)
    p_zoom.add_argument("--zoom", type=float, default=None, help="Clamp this zoom into range")

    args = p.parse_args(argv)

    setup_logging(args.log_level)

    if args.cmd == "version":
        return _cmd_version()
    if args.cmd == "check-config":
        return _cmd_check_config(args.config)
    if args.cmd == "zoom-limit":
        return _cmd_zoom_limit(args.width, args.height, args.zoom)
    return 2


if __name__ == "__main__":
    sys.exit(main())
