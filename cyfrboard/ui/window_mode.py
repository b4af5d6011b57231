# Rev 0.2.0

# ui/window_mode.py
from PySide6.QtCore import QRect
from PySide6.QtGui import QGuiApplication


def _screen_rect(win) -> QRect:
    screen = QGuiApplication.screenAt(win.frameGeometry().center()) or QGuiApplication.primaryScreen()
    return screen.availableGeometry()


def apply_window_settings(win, settings: dict) -> None:
    """
    Size the main window from settings["main_window"], clamped to the
    available screen area (taskbar-safe).
    """
    cfg = settings.get("main_window") or {}
    rect = _screen_rect(win)
    w = min(int(cfg.get("width", 1200)), rect.width())
    h = min(int(cfg.get("height", 760)), rect.height())
    win.resize(w, h)
    if cfg.get("is_maximized"):
        win.showMaximized()


def remember_window_settings(win, settings: dict) -> dict:
    cfg = dict(settings.get("main_window") or {})
    cfg["is_maximized"] = bool(win.isMaximized())
    if not win.isMaximized():
        cfg["width"] = win.width()
        cfg["height"] = win.height()
    return {**settings, "main_window": cfg}
