# src/skillmap/render/svg.py
from __future__ import annotations
from html import escape as _esc

from skillmap.render.frame import RenderFrame

_STYLE = """
  .skills-network-svg { background:#0f1115; font-family:system-ui,sans-serif; touch-action:none; }
  .skills-node-hit { cursor:grab; transition:all 0.2s ease; }
  .skills-node-hit.dragging { cursor:grabbing; }
  .skills-node-label { fill:#eaeaea; font-size:12px; pointer-events:none; }
  .skills-node-label.active { font-weight:600; font-size:13px; }
"""


def _attr(value) -> str:
    return _esc(str(value), quote=True)


def render_svg(frame: RenderFrame, standalone: bool = False) -> str:
    """SVG markup for one frame.

    Every node is a ``<g data-node-id=...>`` wrapping a circle with the same
    ``data-node-id``; hosts attach pointer handlers to those hit targets.
    """
    w, h = frame.width, frame.height
    parts = []
    ns = ' xmlns="http://www.w3.org/2000/svg"' if standalone else ""
    parts.append(
        f'<svg{ns} class="skills-network-svg" viewBox="0 0 {w} {h}" role="img" '
        f'aria-label="Correlated skills network" width="100%" preserveAspectRatio="xMidYMid meet">'
    )
    parts.append(f"<style>{_STYLE}</style>")
    parts.append(f'<rect class="skills-network-bg" x="0" y="0" width="{w}" height="{h}" fill="transparent"/>')
    parts.append(f'<g class="skills-viewport" transform="{frame.viewport.svg_transform()}">')

    for e in frame.edges:
        dash = f' stroke-dasharray="{e.dash}"' if e.dash else ""
        parts.append(
            f'<path data-edge-id="{_attr(e.id)}" d="{e.path}" fill="none" stroke="{e.color}"'
            f' stroke-width="{e.width}" opacity="{e.opacity:.3f}"{dash}/>'
        )

    for n in frame.nodes:
        nid = _attr(n.id)
        label = _esc(n.label)
        classes = "skills-node-hit dragging" if n.dragging else "skills-node-hit"
        parts.append(f'<g class="skills-node-group" data-node-id="{nid}" transform="translate({n.x:.2f} {n.y:.2f})">')
        parts.append(
            f'<circle class="{classes}" data-node-id="{nid}" r="{n.radius:.2f}" fill="{n.fill}"'
            f' stroke="{n.stroke}" stroke-width="{n.stroke_width}" opacity="{n.opacity:.3f}">'
            f"<title>{label}</title></circle>"
        )
        if n.show_label:
            active = " active" if n.active else ""
            parts.append(
                f'<text class="skills-node-label{active}" x="{n.label_dx:.2f}" y="{n.label_dy:.2f}"'
                f' text-anchor="{n.label_anchor}" dominant-baseline="{n.label_baseline}"'
                f' opacity="{n.label_opacity:.3f}">{label}</text>'
            )
        parts.append("</g>")

    parts.append("</g></svg>")
    svg = "".join(parts)
    if standalone:
        return '<?xml version="1.0" encoding="UTF-8"?>\n' + svg
    return svg
