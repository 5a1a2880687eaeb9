from __future__ import annotations

from typing import Optional

from PyQt6 import QtCore, QtGui, QtWidgets

from diagnostics.logging_setup import get_logger

logger = get_logger(__name__)


class QtIconResolver:
    """Extracts the shell icon of a file and renders it to PNG bytes.

    ``QFileIconProvider`` needs a running ``QApplication``; without one the
    resolver reports no icon instead of creating an application behind the
    host's back.
    """

    def __init__(self, size_px: int = 48) -> None:
        self.size_px = max(16, int(size_px))
        self._provider: Optional[QtWidgets.QFileIconProvider] = None

    def __call__(self, source_path: str) -> Optional[bytes]:
        if QtWidgets.QApplication.instance() is None:
            logger.debug("no QApplication, skipping icon extraction for %s", source_path)
            return None
        if self._provider is None:
            self._provider = QtWidgets.QFileIconProvider()
        icon = self._provider.icon(QtCore.QFileInfo(source_path))
        if icon.isNull():
            return None
        pixmap = icon.pixmap(QtCore.QSize(self.size_px, self.size_px))
        if pixmap.isNull():
            return None
        return _png_bytes(pixmap)


def _png_bytes(pixmap: QtGui.QPixmap) -> Optional[bytes]:
    data = QtCore.QByteArray()
    buffer = QtCore.QBuffer(data)
    buffer.open(QtCore.QIODevice.OpenModeFlag.WriteOnly)
    try:
        if not pixmap.save(buffer, "PNG"):
            return None
    finally:
        buffer.close()
    return bytes(data)
