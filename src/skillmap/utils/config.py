import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field, fields, replace
from dotenv import load_dotenv
load_dotenv()

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[3]


@dataclass(frozen=True)
class CorrelationConfig:
    """Scoring and pruning knobs for the correlation engine.

    These are heuristic tuning values, not invariants: connectivity, uniqueness
    of pairs and determinism hold for any setting.
    """
    category_base: float = 2.7
    category_extra: float = 0.7
    theme_bonus: float = 1.25
    domain_bonus: float = 0.3
    cross_domain_theme_bonus: float = 0.55
    lexical_high: float = 0.33
    lexical_high_bonus: float = 0.55
    lexical_medium: float = 0.17
    lexical_medium_bonus: float = 0.25
    level_close_gap: float = 1.5
    level_close_bonus: float = 0.35
    level_far_gap: float = 4.5
    level_far_penalty: float = 0.2
    unrelated_penalty: float = 0.4

    candidate_threshold: float = 0.55
    max_edges_per_node: int = 10
    min_degree: int = 5
    min_cross_theme_links: int = 2
    bridge_threshold: float = 0.3
    min_bridge_weight: float = 0.15
    weight_precision: int = 2


def _correlation_from_env(raw: str) -> CorrelationConfig:
    base = CorrelationConfig()
    if not raw.strip():
        return base
    try:
        overrides = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("[cfg] SKILLMAP_CORRELATION is not valid JSON, using defaults: %s", e)
        return base
    if not isinstance(overrides, dict):
        logger.warning("[cfg] SKILLMAP_CORRELATION must be a JSON object, using defaults")
        return base

    known = {f.name: f.type for f in fields(CorrelationConfig)}
    clean = {}
    for key, value in overrides.items():
        if key not in known:
            logger.warning("[cfg] unknown correlation setting ignored: %s", key)
            continue
        default = getattr(base, key)
        try:
            clean[key] = type(default)(value)
        except (TypeError, ValueError):
            logger.warning("[cfg] bad value for %s: %r", key, value)
    return replace(base, **clean)


@dataclass
class Settings:
    DATA_PATH: str = os.getenv("SKILLMAP_DATA_PATH", str(PROJECT_ROOT / "data" / "portfolio-data.json"))

    CANVAS_WIDTH: int = int(os.getenv("SKILLMAP_CANVAS_WIDTH", "1024"))
    CANVAS_HEIGHT: int = int(os.getenv("SKILLMAP_CANVAS_HEIGHT", "1024"))
    NODE_PADDING: float = float(os.getenv("SKILLMAP_NODE_PADDING", "90"))

    MIN_ZOOM: float = float(os.getenv("SKILLMAP_MIN_ZOOM", "0.75"))
    MAX_ZOOM: float = float(os.getenv("SKILLMAP_MAX_ZOOM", "2.6"))

    # animation cadence: at most one frame per FRAME_INTERVAL_MS
    FRAME_INTERVAL_MS: float = float(os.getenv("SKILLMAP_FRAME_INTERVAL_MS", "40"))
    UI_TICK_SECONDS: float = float(os.getenv("SKILLMAP_UI_TICK_SECONDS", "0.25"))

    PANEL_TOP_N: int = int(os.getenv("SKILLMAP_PANEL_TOP_N", "8"))
    LOG_LEVEL: str = os.getenv("SKILLMAP_LOG_LEVEL", "INFO")

    CORRELATION: CorrelationConfig = field(
        default_factory=lambda: _correlation_from_env(os.getenv("SKILLMAP_CORRELATION", ""))
    )


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug("[cfg] DATA_PATH=%s", settings.DATA_PATH)
