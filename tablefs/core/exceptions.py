"""异常模块：定义文件系统操作的统一异常层级。

缺失的条目不是异常：``read`` 返回空字节、``has`` 返回 ``False``。
只有存储执行失败、配置非法与不支持的能力才会抛出下列异常。
"""

from typing import Any


class FilesystemException(Exception):
    """携带统一结构（消息 + 附加数据）的文件系统异常基类。"""

    def __init__(self, msg: str, data: Any = None) -> None:
        super().__init__(msg)
        self.msg = msg
        self.data = data


class ConfigurationError(FilesystemException):
    """配置非法：表名不合法、后端配置缺失等。"""


class StoreError(ConfigurationError):
    """语句执行失败；``data`` 保存驱动返回的原始诊断信息。"""

    @classmethod
    def from_driver(cls, msg: str, exc: Exception) -> "StoreError":
        """以驱动异常（优先取 ``orig``）的文本构造，调用方负责 ``raise ... from exc``。"""
        return cls(msg, [str(getattr(exc, "orig", None) or exc)])

    @property
    def detail(self) -> str:
        return self.data[0] if self.data else self.msg


class InvalidPathError(ConfigurationError):
    """路径包含 ``.``/``..`` 等无法安全映射到表行的片段。"""


class UnableToRetrieveMetadata(FilesystemException):
    """读取元数据时目标路径不存在。"""

    def __init__(self, path: str) -> None:
        super().__init__(f"无法获取元数据，路径不存在: {path}", {"path": path})
        self.path = path


class UnsupportedCapabilityError(FilesystemException):
    """后端不具备的能力（如可见性/权限）。"""
