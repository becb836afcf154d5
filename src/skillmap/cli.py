from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from skillmap.interaction.controller import InteractionController
from skillmap.layout.clock import run_animation
from skillmap.render.frame import build_render_frame
from skillmap.render.svg import render_svg
from skillmap.skills.extract import load_skills_document
from skillmap.skills.query import find_node
from skillmap.skills.service import build_graph_state, graph_to_dict
from skillmap.skills.validate import validate_skills_document
from skillmap.utils.config import configure_logging, settings

logger = logging.getLogger(__name__)


def _write(text: str, out: str | None) -> None:
    if out:
        Path(out).write_text(text, encoding="utf-8")
        logger.info("[cli] wrote %s", out)
    else:
        sys.stdout.write(text + "\n")


def cmd_build(args) -> int:
    state = build_graph_state(load_skills_document(args.document))
    _write(json.dumps(graph_to_dict(state), indent=2, ensure_ascii=False), args.output)
    return 0


def cmd_render(args) -> int:
    state = build_graph_state(load_skills_document(args.document))
    ctrl = InteractionController(state)
    ctrl.tick(args.time_ms)
    if args.focus:
        node = find_node(state.graph, args.focus)
        if node is None:
            sys.stderr.write(f"unknown skill: {args.focus}\n")
            return 2
        ctrl.toggle_lock(node.id)
    _write(render_svg(build_render_frame(ctrl), standalone=True), args.output)
    return 0


def cmd_frames(args) -> int:
    """Export a live animation as numbered standalone SVG frames."""
    state = build_graph_state(load_skills_document(args.document))
    ctrl = InteractionController(state)
    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    count = max(args.count, 1)
    written = []

    def on_frame(elapsed_ms: float) -> None:
        ctrl.tick(elapsed_ms)
        path = out_dir / f"frame-{len(written):04d}.svg"
        path.write_text(render_svg(build_render_frame(ctrl), standalone=True), encoding="utf-8")
        written.append(path)
        if len(written) >= count:
            stop.set()

    async def run() -> int:
        return await run_animation(on_frame, stop, interval_ms=args.interval_ms)

    stop = asyncio.Event()
    asyncio.run(run())
    logger.info("[cli] wrote %d frames to %s", len(written), out_dir)
    return 0


def cmd_validate(args) -> int:
    report = validate_skills_document(load_skills_document(args.document))
    for message in report.errors:
        print(f"error: {message}")
    for message in report.warnings:
        print(f"warning: {message}")
    print("ok" if report.ok else f"{len(report.errors)} error(s)")
    return 0 if report.ok else 1


def cmd_serve(args) -> int:
    from skillmap.ui.gradio_app import build_ui

    demo = build_ui()
    demo.queue(default_concurrency_limit=2).launch(server_name=args.host, server_port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="skillmap", description="Correlated skills network tools.")
    parser.add_argument("--log-level", default=None, help=f"Logging level (default {settings.LOG_LEVEL})")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("build", help="Build the graph and dump nodes, edges and layout as JSON")
    p.add_argument("document", help="Portfolio JSON with a top-level 'skills' object")
    p.add_argument("-o", "--output", default=None, help="Output file (stdout if omitted)")
    p.set_defaults(func=cmd_build)

    p = sub.add_parser("render", help="Render one frame of the network as SVG")
    p.add_argument("document")
    p.add_argument("--time-ms", type=float, default=0.0, help="Animation time of the frame")
    p.add_argument("--focus", default=None, help="Skill id or label to lock focus on")
    p.add_argument("-o", "--output", default=None)
    p.set_defaults(func=cmd_render)

    p = sub.add_parser("frames", help="Write an animation as a sequence of SVG frames")
    p.add_argument("document")
    p.add_argument("out_dir", help="Directory for frame-NNNN.svg files")
    p.add_argument("--count", type=int, default=25)
    p.add_argument("--interval-ms", type=float, default=settings.FRAME_INTERVAL_MS)
    p.set_defaults(func=cmd_frames)

    p = sub.add_parser("validate", help="Check a portfolio document's skills section")
    p.add_argument("document")
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("serve", help="Launch the interactive gradio app")
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)
    p.set_defaults(func=cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        return args.func(args)
    except FileNotFoundError as e:
        sys.stderr.write(f"file not found: {e.filename}\n")
        return 2
    except ValueError as e:
        sys.stderr.write(f"{e}\n")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
