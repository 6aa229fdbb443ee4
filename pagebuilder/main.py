from __future__ import annotations

import sys

from PyQt6 import QtWidgets

from .config import SettingsManager, configure_logging
from .ui.main_window import MainWindow

if sys.platform == "win32":
    try:
        import ctypes

        ctypes.windll.shell32.SetCurrentProcessExplicitAppUserModelID("PageBuilder.App")
    except (AttributeError, OSError):
        pass


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv if argv is None else argv)
    settings = SettingsManager()
    configure_logging(settings)
    app = QtWidgets.QApplication(argv)
    path = argv[1] if len(argv) > 1 else None
    win = MainWindow(settings, path)
    win.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
