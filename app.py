from skillmap.ui.gradio_app import build_ui
from skillmap.utils.config import configure_logging

configure_logging()
demo = build_ui()

if __name__ == "__main__":
    demo.queue(default_concurrency_limit=2).launch()
