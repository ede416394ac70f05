import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from PySide6.QtCore import QStandardPaths
from PySide6.QtWidgets import QApplication

ROOT = Path(__file__).resolve().parent
SRC_DIR = ROOT / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from rapflow.core.config import AppConfig, validate_environment
from rapflow.core.export import ExportCompositor, FolderDownloadSink
from rapflow.core.generation import GenerationController
from rapflow.core.generation_client import LyricsClient
from rapflow.core.logging_config import default_log_file, setup_logging
from rapflow.core.state import AppState, Notify
from rapflow.core.sync import PlaybackSynchronizer
from rapflow.player.player import BeatPlayer
from rapflow.ui.main_window import MainWindow
from rapflow.ui.render_surface import WidgetRenderSurface


def get_app_data_dir() -> Path:
    base = QStandardPaths.writableLocation(QStandardPaths.AppDataLocation)
    os.makedirs(base, exist_ok=True)
    return Path(base)


def get_download_dir() -> Path:
    return Path(QStandardPaths.writableLocation(QStandardPaths.DownloadLocation) or Path.home())


def init_app_state(config: AppConfig) -> AppState:
    app_state = AppState(config)

    app_data_dir = get_app_data_dir()
    app_state.beats_dir = config.beats_dir or (app_data_dir / "beats")
    app_state.beats_dir.mkdir(parents=True, exist_ok=True)

    if not validate_environment(config):
        app_state.queued_notifications.append(
            Notify(message="No API key found. Add GROQ_API_KEY or OPENAI_API_KEY to .env", notify_type="warn")
        )

    # one client for the whole process
    app_state.client = LyricsClient(config.backend)
    app_state.controller = GenerationController(app_state.client, expose_details=config.expose_error_details)

    try:
        app_state.player = BeatPlayer()
    except Exception as e:
        app_state.player = None
        app_state.queued_notifications.append(
            Notify(message=f"Failed to initialize audio player: {e}", notify_type="error")
        )

    app_state.synchronizer = PlaybackSynchronizer()
    app_state.sink = FolderDownloadSink(config.export_dir or get_download_dir())
    app_state.compositor = ExportCompositor(
        WidgetRenderSurface(), app_state.sink, default_watermark=config.watermark
    )
    app_state.wire()
    return app_state


def main() -> int:
    load_dotenv()
    config = AppConfig.from_env()
    qt_app = QApplication(sys.argv)
    qt_app.setApplicationName("RapFlow")

    # app data location depends on the application name
    setup_logging(
        config.log_level,
        log_file=default_log_file(get_app_data_dir()),
        verbose=not config.is_production,
    )

    app_state = init_app_state(config)
    main_window = MainWindow(app_state)
    main_window.show()

    return qt_app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
