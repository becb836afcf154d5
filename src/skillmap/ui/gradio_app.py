# src/skillmap/ui/gradio_app.py
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Tuple

import gradio as gr

from skillmap.interaction.controller import InteractionController
from skillmap.interaction.events import apply_pointer_events, parse_pointer_payload
from skillmap.layout.clock import AnimationClock, FrameThrottle
from skillmap.render.frame import build_render_frame
from skillmap.render.panel import panel_html
from skillmap.render.svg import render_svg
from skillmap.skills.extract import load_skills_document
from skillmap.skills.service import build_graph_state, graph_to_dict
from skillmap.utils.config import configure_logging, settings

logger = logging.getLogger(__name__)

EMPTY = "<em>No skills loaded.</em>"

EVENTS_ELEM_ID = "skillmap-events"

_CSS = """
.skillmap-hidden { display: none !important; }
"""

# Batches pointer/wheel events on the SVG surface into the hidden textbox.
# Listeners sit on document/window because the SVG is replaced on every frame;
# pointerup/pointercancel go on window so a drag ends even off the surface.
_POINTER_JS = """
() => {
  if (window.__skillmapPointer) return;
  window.__skillmapPointer = true;
  const FLUSH_MS = %(flush_ms)d, HOVER_MS = 120;
  let queue = [], seq = 0, pressed = null, lastHover = 0;

  const surfaceOf = (el) => (el && el.closest) ? el.closest("svg.skills-network-svg") : null;
  const current = () => document.querySelector("svg.skills-network-svg");
  const toCanvas = (svg, e) => {
    const m = svg.getScreenCTM();
    if (!m) return null;
    const p = new DOMPoint(e.clientX, e.clientY).matrixTransform(m.inverse());
    return [Math.round(p.x * 100) / 100, Math.round(p.y * 100) / 100];
  };
  const push = (type, svg, e, extra) => {
    const xy = svg ? toCanvas(svg, e) : null;
    queue.push(Object.assign({
      type: type,
      x: xy ? xy[0] : null,
      y: xy ? xy[1] : null,
      pointer: (e.pointerId !== undefined) ? e.pointerId : 0,
    }, extra || {}));
  };

  document.addEventListener("pointerdown", (e) => {
    const svg = surfaceOf(e.target);
    if (!svg) return;
    pressed = e.pointerId;
    push("down", svg, e, {primary: e.isPrimary});
  });
  document.addEventListener("pointermove", (e) => {
    const svg = pressed !== null ? current() : surfaceOf(e.target);
    if (!svg) return;
    if (pressed === null) {
      const now = Date.now();
      if (now - lastHover < HOVER_MS) return;
      lastHover = now;
    }
    const last = queue[queue.length - 1];
    if (last && last.type === "move") queue.pop();
    push("move", svg, e);
  });
  const release = (type) => (e) => {
    if (pressed === null || e.pointerId !== pressed) return;
    pressed = null;
    push(type, null, e);
  };
  window.addEventListener("pointerup", release("up"));
  window.addEventListener("pointercancel", release("cancel"));
  document.addEventListener("click", (e) => {
    const svg = surfaceOf(e.target);
    if (svg) push("click", svg, e);
  });
  document.addEventListener("pointerout", (e) => {
    const svg = surfaceOf(e.target);
    if (!svg || pressed !== null) return;
    if (e.relatedTarget && svg.contains(e.relatedTarget)) return;
    push("leave", null, e);
  });
  document.addEventListener("wheel", (e) => {
    const svg = surfaceOf(e.target);
    if (!svg) return;
    e.preventDefault();
    push("wheel", svg, e, {delta: e.deltaY});
  }, {passive: false});

  setInterval(() => {
    const box = document.querySelector("#%(elem_id)s textarea");
    if (!queue.length || !box) return;
    seq += 1;
    box.value = JSON.stringify({seq: seq, events: queue});
    queue = [];
    box.dispatchEvent(new Event("input", {bubbles: true}));
  }, FLUSH_MS);
}
""" % {"flush_ms": max(int(settings.FRAME_INTERVAL_MS), 16), "elem_id": EVENTS_ELEM_ID}


# ---------- helpers ----------
def _new_session(document: Dict[str, Any], previous: Optional[dict] = None) -> dict:
    graph_state = build_graph_state(document)
    if previous and previous.get("controller"):
        previous["controller"].rebind(graph_state)
        return previous
    return {
        "controller": InteractionController(graph_state),
        "clock": AnimationClock(),
        "throttle": FrameThrottle(settings.FRAME_INTERVAL_MS),
    }


def _elapsed_ms(session: dict) -> float:
    return session["clock"].elapsed_ms()


def _focus_choices(ctrl: InteractionController) -> List[Tuple[str, str]]:
    return sorted(((n.label, n.id) for n in ctrl.graph.nodes), key=lambda c: c[0].lower())


def _views(session: Optional[dict]):
    """(svg, panel) for the session's current state."""
    if not session or not session.get("controller"):
        return EMPTY, EMPTY
    ctrl: InteractionController = session["controller"]
    svg = render_svg(build_render_frame(ctrl))
    panel = panel_html(ctrl.graph, ctrl.active_node_id, settings.PANEL_TOP_N)
    return svg, panel


def _status(session: Optional[dict]) -> str:
    if not session or not session.get("controller"):
        return ""
    ctrl: InteractionController = session["controller"]
    v = ctrl.view
    return (f"**{len(ctrl.graph.nodes)}** skills • **{len(ctrl.graph.edges)}** correlations • "
            f"zoom {v.viewport.scale:.2f}× • pinned {len(v.manual_positions)}")


def _load(document: Dict[str, Any], session: Optional[dict]):
    session = _new_session(document, session)
    ctrl: InteractionController = session["controller"]
    ctrl.tick(_elapsed_ms(session))
    svg, panel = _views(session)
    focus = gr.update(choices=_focus_choices(ctrl), value=ctrl.view.locked_node_id)
    return session, svg, panel, focus, graph_to_dict(ctrl.state), _status(session)


def _load_failed(session, message: str):
    return session, f"<em>{message}</em>", EMPTY, gr.update(), {}, ""


def on_load_default(session):
    try:
        document = load_skills_document(settings.DATA_PATH)
    except FileNotFoundError:
        logger.warning("[ui] default document not found: %s", settings.DATA_PATH)
        return _load({}, session)
    except ValueError as e:
        return _load_failed(session, f"Failed to load skills: {e}")
    return _load(document, session)


def on_upload(file_obj, session):
    if not file_obj:
        return _load_failed(session, "No file uploaded.")
    file_path = file_obj.name if hasattr(file_obj, "name") else file_obj
    try:
        document = load_skills_document(file_path)
    except (OSError, ValueError) as e:
        return _load_failed(session, f"Failed to load skills: {e}")
    return _load(document, session)


def on_tick(session):
    if not session or not session.get("controller"):
        return gr.update()
    elapsed = _elapsed_ms(session)
    if not session["throttle"].should_emit(elapsed):
        return gr.update()
    session["controller"].tick(elapsed)
    return _views(session)[0]


def on_focus(session, node_id):
    if not session or not session.get("controller"):
        return EMPTY, EMPTY
    ctrl: InteractionController = session["controller"]
    if not node_id:
        ctrl.reset_focus()
    elif ctrl.view.locked_node_id != node_id:
        ctrl.toggle_lock(node_id)
    return _views(session)


def on_pointer(session, payload):
    """Apply a batch of surface events; focus dropdown follows the lock."""
    if not session or not session.get("controller"):
        return gr.update(), gr.update(), gr.update(), gr.update()
    ctrl: InteractionController = session["controller"]
    locked = ctrl.view.locked_node_id
    if not apply_pointer_events(ctrl, parse_pointer_payload(payload)):
        return gr.update(), gr.update(), gr.update(), gr.update()
    svg, panel = _views(session)
    focus = gr.update(value=ctrl.view.locked_node_id) if ctrl.view.locked_node_id != locked else gr.update()
    return svg, panel, focus, _status(session)


def _action(name: str):
    def run(session):
        if session and session.get("controller"):
            ctrl: InteractionController = session["controller"]
            getattr(ctrl, name)()
        svg, panel = _views(session)
        locked = session["controller"].view.locked_node_id if session and session.get("controller") else None
        return svg, panel, gr.update(value=locked), _status(session)
    return run


# ---------- UI ----------
def build_ui():
    with gr.Blocks(title="Skills Map", css=_CSS, js=_POINTER_JS) as demo:
        gr.Markdown("## My Skills\nUnified map across product and technical skills.")

        session = gr.State(value=None)   # {"controller", "clock", "throttle"}

        with gr.Row():
            file_in = gr.File(label="Upload portfolio JSON", file_types=[".json"])
            focus_dd = gr.Dropdown(choices=[], value=None, label="Focus skill", allow_custom_value=False)

        status_md = gr.Markdown("")

        with gr.Row():
            with gr.Column(scale=3):
                graph_html = gr.HTML(label="Skills network")
                with gr.Row():
                    reset_focus_btn = gr.Button("Reset Focus")
                    reset_layout_btn = gr.Button("Reset Layout")
                    zoom_out_btn = gr.Button("-")
                    reset_view_btn = gr.Button("Reset View")
                    zoom_in_btn = gr.Button("+")
            with gr.Column(scale=2):
                panel = gr.HTML(label="Insights")

        with gr.Accordion("Graph (nodes & edges)", open=False):
            graph_json = gr.JSON(label="Graph")

        events_box = gr.Textbox(elem_id=EVENTS_ELEM_ID, elem_classes=["skillmap-hidden"],
                                show_label=False, container=False)

        timer = gr.Timer(value=settings.UI_TICK_SECONDS)

        load_outputs = [session, graph_html, panel, focus_dd, graph_json, status_md]
        demo.load(on_load_default, inputs=session, outputs=load_outputs)
        file_in.upload(on_upload, inputs=[file_in, session], outputs=load_outputs)

        timer.tick(on_tick, inputs=session, outputs=graph_html, show_progress="hidden")
        focus_dd.change(on_focus, inputs=[session, focus_dd], outputs=[graph_html, panel])

        action_outputs = [graph_html, panel, focus_dd, status_md]
        # one batch at a time so down/move/up keep their order
        events_box.input(on_pointer, inputs=[session, events_box], outputs=action_outputs,
                         show_progress="hidden", concurrency_limit=1)
        reset_focus_btn.click(_action("reset_focus"), inputs=session, outputs=action_outputs)
        reset_layout_btn.click(_action("reset_layout"), inputs=session, outputs=action_outputs)
        reset_view_btn.click(_action("reset_view"), inputs=session, outputs=action_outputs)
        zoom_in_btn.click(_action("zoom_in"), inputs=session, outputs=action_outputs)
        zoom_out_btn.click(_action("zoom_out"), inputs=session, outputs=action_outputs)

    return demo


def main():
    configure_logging()
    logger.info("[cfg] data=%s canvas=%dx%d", settings.DATA_PATH, settings.CANVAS_WIDTH, settings.CANVAS_HEIGHT)
    demo = build_ui()
    demo.queue(default_concurrency_limit=2).launch()


if __name__ == "__main__":
    main()
