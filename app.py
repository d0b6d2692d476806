import os
import sys
from pathlib import Path
from PySide6.QtWidgets import QApplication
from PySide6.QtGui import QIcon
from core.client import MediaClient
from core.models import PlayerPreference
from ui.main_window import MainWindow

def main():
    app = QApplication(sys.argv)
    app.setApplicationName("Empress")
    icon_path = Path(__file__).resolve().parent / "logo.png"
    if icon_path.exists():
        app.setWindowIcon(QIcon(str(icon_path)))
    client = MediaClient(preference=PlayerPreference(os.getenv("EMPRESS_PLAYER")))
    win = MainWindow(client)
    win.show()
    app.aboutToQuit.connect(win._stop_client)
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
