"""tablefs：以单张关系表承载目录树的虚拟文件系统。"""

from .core.config import get_settings
from .core.exceptions import (
    ConfigurationError,
    FilesystemException,
    InvalidPathError,
    StoreError,
    UnableToRetrieveMetadata,
    UnsupportedCapabilityError,
)
from .core.logger import logger, setup_logging
from .schemas.attributes import DirectoryAttributes, FileAttributes
from .schemas.backend import DatabaseBackendConfig
from .services.database_adapter import DatabaseAdapter
from .services.storage_backends import Backend, build_adapter, build_backend, register_adapter

__all__ = [
    "Backend",
    "ConfigurationError",
    "DatabaseAdapter",
    "DatabaseBackendConfig",
    "DirectoryAttributes",
    "FileAttributes",
    "FilesystemException",
    "InvalidPathError",
    "StoreError",
    "UnableToRetrieveMetadata",
    "UnsupportedCapabilityError",
    "build_adapter",
    "build_backend",
    "get_settings",
    "logger",
    "register_adapter",
    "setup_logging",
]
