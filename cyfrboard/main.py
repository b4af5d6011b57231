# Rev 0.2.0

# cyfrboard/main.py  (Rev 0.2.0)
import asyncio
import logging
import sys

import qasync
from PySide6.QtCore import QCoreApplication
from PySide6.QtGui import QFont
from PySide6.QtWidgets import QApplication, QMessageBox

from cyfrboard.app_context import AppContext
from cyfrboard.ui.main_window import MainWindow
from cyfrboard.utils.config import ConfigError, backend_config, load_settings
from cyfrboard.utils.logging_setup import setup_logging

log = logging.getLogger(__name__)


async def _run(app: QApplication, ctx: AppContext, settings: dict, logfile) -> None:
    closed = asyncio.Event()
    app.aboutToQuit.connect(closed.set)

    win = MainWindow(ctx=ctx, settings=settings, logfile=logfile)
    win.show()
    win.start()

    await closed.wait()
    win.shutdown()
    await ctx.aclose()


def main():
    logfile = setup_logging("cyfrboard")
    print(f"[logging] Writing to: {logfile}")

    app = QApplication(sys.argv)
    QCoreApplication.setOrganizationName("cyfr")
    QCoreApplication.setApplicationName("cyfrboard")
    app.setFont(QFont("Sans Serif", 10))

    settings = load_settings()
    try:
        cfg = backend_config(settings)
    except ConfigError as exc:
        log.error("%s", exc)
        QMessageBox.critical(None, "CYFR Board", str(exc))
        return 2

    # --- DI wiring ---
    ctx = AppContext.create(cfg)

    # asyncio loop driven by the Qt event loop
    loop = qasync.QEventLoop(app)
    asyncio.set_event_loop(loop)
    with loop:
        loop.run_until_complete(_run(app, ctx, settings, logfile))
    return 0


if __name__ == "__main__":
    sys.exit(main())
