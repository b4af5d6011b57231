# Rev 0.2.0

# cyfrboard/ui/dialogs/confirm.py
from PySide6.QtWidgets import QMessageBox


def confirm(parent, title: str, text: str) -> bool:
    answer = QMessageBox.question(parent, title, text, QMessageBox.Yes | QMessageBox.No, QMessageBox.No)
    return answer == QMessageBox.Yes


def alert(parent, text: str) -> None:
    if text:
        QMessageBox.warning(parent, "CYFR Board", text)
