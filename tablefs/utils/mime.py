"""MIME 类型探测：根据路径扩展名判断，无法判断时再依据内容回退。"""

from __future__ import annotations

import mimetypes
from typing import Protocol

DEFAULT_MIME_TYPE = "application/octet-stream"
TEXT_MIME_TYPE = "text/plain"


class MimeTypeDetector(Protocol):
    def detect_mime_type(self, path: str, contents: bytes) -> str:
        ...


class ExtensionMimeTypeDetector:
    """默认探测器：优先使用扩展名映射，其次判断内容是否为 UTF-8 文本。"""

    def detect_mime_type(self, path: str, contents: bytes) -> str:
        mime, _ = mimetypes.guess_type(path)
        if mime:
            return mime
        if not contents:
            return DEFAULT_MIME_TYPE
        # NUL 字节基本可以判定为二进制内容
        if b"\x00" in contents:
            return DEFAULT_MIME_TYPE
        try:
            contents.decode("utf-8")
        except UnicodeDecodeError:
            return DEFAULT_MIME_TYPE
        return TEXT_MIME_TYPE
