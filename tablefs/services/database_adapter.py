"""数据库文件系统适配器：在一张扁平表上提供文件系统风格的操作。

- 单行操作直接委托给条目 CRUD；
- 目录重命名/移动/删除等组合操作在同一个事务内完成，任一步失败即整体回滚，
  不会留下一半在旧前缀、一半在新前缀的目录树；
- 缺失的路径按空结果处理：``read`` 返回空字节，``has`` 返回 ``False``。
"""

from __future__ import annotations

import io
from contextlib import contextmanager
from typing import IO, Any, Dict, Iterator, Optional, Union

from sqlalchemy.engine import Engine, RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tablefs.core.config import Settings, get_settings, merge_credentials
from tablefs.core.exceptions import (
    FilesystemException,
    InvalidPathError,
    StoreError,
    UnableToRetrieveMetadata,
    UnsupportedCapabilityError,
)
from tablefs.core.logger import logger
from tablefs.core.timezone import unix_now
from tablefs.crud.entry import CRUDEntry
from tablefs.db.init_db import init_db
from tablefs.db.session import build_engine, build_session_factory, get_engine, get_session_factory
from tablefs.models.entry import ENTRY_TYPE_DIR, ENTRY_TYPE_FILE, build_entry_table
from tablefs.schemas.attributes import DirectoryAttributes, FileAttributes, StorageAttributes
from tablefs.schemas.backend import DatabaseBackendConfig
from tablefs.utils.mime import ExtensionMimeTypeDetector, MimeTypeDetector
from tablefs.utils.path_utils import (
    child_path,
    depth,
    is_child,
    is_descendant,
    is_root,
    normalize_path,
)

Contents = Union[bytes, bytearray, memoryview, str]


def _to_bytes(contents: Contents) -> bytes:
    if isinstance(contents, str):
        return contents.encode("utf-8")
    if isinstance(contents, (bytes, bytearray, memoryview)):
        return bytes(contents)
    raise TypeError(f"unsupported contents type: {type(contents).__name__}")


def _read_stream(stream: IO) -> bytes:
    return _to_bytes(stream.read())


class DatabaseAdapter:
    """以数据库表为存储的文件系统适配器。"""

    def __init__(
        self,
        engine: Engine,
        table_name: str,
        *,
        mime_type_detector: Optional[MimeTypeDetector] = None,
        create_table: bool = False,
        session_factory: Optional[sessionmaker] = None,
    ) -> None:
        # 表名校验必须先于任何数据库访问
        self.table = build_entry_table(table_name)
        self.engine = engine
        self.session_factory = session_factory or build_session_factory(engine)
        self.entries = CRUDEntry(self.table)
        self.mime_type_detector = mime_type_detector or ExtensionMimeTypeDetector()
        if create_table:
            init_db(engine, self.table)
        logger.debug("DatabaseAdapter ready on table %s", self.table.name)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **kwargs: Any) -> DatabaseAdapter:
        """按环境配置构建适配器；未显式传入配置时复用进程级引擎。"""
        if settings is None:
            settings = get_settings()
            engine = get_engine()
            kwargs.setdefault("session_factory", get_session_factory())
        else:
            engine = build_engine(settings.sql_database_url, echo=settings.database_echo)
        kwargs.setdefault("create_table", settings.create_table)
        return cls(engine, settings.table_name, **kwargs)

    @classmethod
    def from_backend_config(cls, config: DatabaseBackendConfig) -> DatabaseAdapter:
        url = merge_credentials(config.dsn, config.username, config.password)
        return cls(build_engine(url, echo=config.echo), config.table_name, create_table=config.create_table)

    # ----------------------------
    # 工具方法
    # ----------------------------
    @contextmanager
    def _session_scope(self, action: str, path: str) -> Iterator[Session]:
        """单次操作的事务边界：块内全部语句一起提交，任何异常都整体回滚。

        语句失败已由 CRUD 层转换；提交阶段的驱动异常（锁等待、序列化冲突）在这里转换。
        """
        context = {"action": action, "path": path, "table": self.table.name}
        db = self.session_factory()
        try:
            with db.begin():
                yield db
        except FilesystemException:
            logger.warning("Transaction rolled back", extra=context)
            raise
        except SQLAlchemyError as exc:
            error = StoreError.from_driver("事务提交失败", exc)
            logger.error("Transaction commit failed: %s", error.detail, extra=context)
            raise error from exc
        finally:
            db.close()

    @staticmethod
    def _entry_path(path: str) -> str:
        normalized = normalize_path(path)
        if is_root(normalized):
            raise InvalidPathError("根目录不能作为条目路径", {"path": path})
        return normalized

    def _move_subtree(self, db: Session, path: str, new_path: str, entry: Optional[RowMapping]) -> int:
        """改写条目及其全部后代的路径，返回条目本身被改写的行数。

        条目先于后代改写，后代按层级由浅到深改写：上移到祖先目录时（``/a/b`` -> ``/a``），
        每个目标路径若被子树内的行占用，该行必然更浅，已经先一步移走。
        """
        if entry is None or entry["type"] != ENTRY_TYPE_DIR:
            return self.entries.update_path(db, path=path, new_path=new_path)
        if is_descendant(new_path, path):
            raise InvalidPathError("不能将目录移动到其自身的子目录中", {"path": path, "new_path": new_path})

        descendants = self.entries.select_by_prefix(db, prefix=path, lock=True)
        moved = self.entries.update_path(db, path=path, new_path=new_path)
        for row in sorted(descendants, key=lambda r: (depth(r["path"]), r["path"])):
            self.entries.update_path(
                db, path=row["path"], new_path=child_path(new_path, path, row["path"])
            )
        logger.debug("Rewrote %d descendants of %s -> %s", len(descendants), path, new_path)
        return moved

    # ----------------------------
    # 写入
    # ----------------------------
    def write(self, path: str, contents: Contents) -> None:
        path = self._entry_path(path)
        data = _to_bytes(contents)
        mimetype = self.mime_type_detector.detect_mime_type(path, data)
        with self._session_scope("write", path) as db:
            self.entries.insert_file(
                db,
                path=path,
                contents=data,
                mimetype=mimetype,
                size=len(data),
                timestamp=unix_now(),
            )
        logger.debug("Wrote %s (%d bytes, %s)", path, len(data), mimetype)

    def write_stream(self, path: str, stream: IO) -> None:
        self.write(path, _read_stream(stream))

    def update(self, path: str, contents: Contents) -> Union[Dict[str, Any], bool]:
        """覆盖文件内容并重新计算大小与 MIME；语句失败或文件不存在时返回 ``False``。"""
        path = self._entry_path(path)
        data = _to_bytes(contents)
        mimetype = self.mime_type_detector.detect_mime_type(path, data)
        timestamp = unix_now()
        try:
            with self._session_scope("update", path) as db:
                affected = self.entries.update_file(
                    db,
                    path=path,
                    contents=data,
                    mimetype=mimetype,
                    size=len(data),
                    timestamp=timestamp,
                )
        except StoreError:
            return False
        if not affected:
            logger.debug("Update matched no file at %s", path)
            return False
        return {
            "path": path,
            "contents": data,
            "size": len(data),
            "mimetype": mimetype,
            "timestamp": timestamp,
        }

    def update_stream(self, path: str, stream: IO) -> Union[Dict[str, Any], bool]:
        return self.update(path, _read_stream(stream))

    def create_directory(self, path: str) -> None:
        path = self._entry_path(path)
        with self._session_scope("create_directory", path) as db:
            self.entries.insert_dir(db, path=path, timestamp=unix_now())
        logger.debug("Created directory %s", path)

    # ----------------------------
    # 结构性操作
    # ----------------------------
    def rename(self, path: str, new_path: str) -> bool:
        """重命名条目；目录会在同一事务内连同全部后代一起改写路径。

        源路径不存在时不会改写任何行并返回 ``False``。
        """
        path = self._entry_path(path)
        new_path = self._entry_path(new_path)
        with self._session_scope("rename", path) as db:
            entry = self.entries.select_by_path(db, path=path, lock=True)
            moved = self._move_subtree(db, path, new_path, entry)
        logger.debug("Renamed %s -> %s (%d row)", path, new_path, moved)
        return moved > 0

    def copy(self, path: str, new_path: str) -> None:
        """复制单个条目；源不存在时静默返回。目录只复制自身这一行。"""
        path = self._entry_path(path)
        new_path = self._entry_path(new_path)
        with self._session_scope("copy", path) as db:
            row = self.entries.select_by_path(db, path=path, with_contents=True)
            if row is None:
                logger.debug("Copy source %s does not exist, nothing to do", path)
                return
            self.entries.insert_row(db, path=new_path, row=row, timestamp=unix_now())
        logger.debug("Copied %s -> %s", path, new_path)

    def move(self, path: str, new_path: str) -> None:
        """移动条目：文件为同一事务内的复制 + 删除，目录整棵子树改写路径。"""
        path = self._entry_path(path)
        new_path = self._entry_path(new_path)
        with self._session_scope("move", path) as db:
            row = self.entries.select_by_path(db, path=path, with_contents=True, lock=True)
            if row is None:
                logger.debug("Move source %s does not exist, nothing to do", path)
                return
            if row["type"] == ENTRY_TYPE_DIR:
                self._move_subtree(db, path, new_path, row)
            else:
                self.entries.insert_row(db, path=new_path, row=row, timestamp=unix_now())
                self.entries.delete_by_path(db, path=path)
        logger.debug("Moved %s -> %s", path, new_path)

    def delete(self, path: str) -> None:
        path = self._entry_path(path)
        with self._session_scope("delete", path) as db:
            self.entries.delete_by_path(db, path=path)

    def delete_directory(self, dirname: str) -> None:
        """删除目录及其全部后代；目录行本身只在类型为 dir 时删除。"""
        dirname = normalize_path(dirname)
        with self._session_scope("delete_directory", dirname) as db:
            descendants = self.entries.select_by_prefix(db, prefix=dirname, lock=True)
            for row in descendants:
                self.entries.delete_by_path(db, path=row["path"])
            self.entries.delete_by_path(db, path=dirname, type=ENTRY_TYPE_DIR)
        logger.debug("Deleted directory %r with %d descendants", dirname, len(descendants))

    # ----------------------------
    # 查询
    # ----------------------------
    def has(self, path: str) -> bool:
        return self._exists(path, None)

    def file_exists(self, path: str) -> bool:
        return self._exists(path, ENTRY_TYPE_FILE)

    def directory_exists(self, path: str) -> bool:
        return self._exists(path, ENTRY_TYPE_DIR)

    def _exists(self, path: str, type: Optional[str]) -> bool:
        path = normalize_path(path)
        if is_root(path):
            return False
        with self._session_scope("exists", path) as db:
            return self.entries.exists_by_path_and_type(db, path=path, type=type)

    def read(self, path: str) -> bytes:
        path = normalize_path(path)
        if is_root(path):
            return b""
        with self._session_scope("read", path) as db:
            contents = self.entries.select_contents(db, path=path)
        return bytes(contents) if contents else b""

    def read_stream(self, path: str) -> Optional[io.BytesIO]:
        data = self.read(path)
        if not data:
            return None
        return io.BytesIO(data)

    def list_contents(self, directory: str = "", recursive: bool = False) -> Iterator[StorageAttributes]:
        """惰性列出目录内容；每次调用都会重新查询，不在调用之间保留游标。"""
        directory = normalize_path(directory)
        with self._session_scope("list_contents", directory) as db:
            rows = self.entries.select_by_prefix(db, prefix=directory)

        for row in rows:
            if not recursive and not is_child(row["path"], directory):
                continue
            if row["type"] == ENTRY_TYPE_DIR:
                yield DirectoryAttributes.from_row(row)
            elif row["type"] == ENTRY_TYPE_FILE:
                yield FileAttributes.from_row(row)

    def get_metadata(self, path: str) -> FileAttributes:
        path = normalize_path(path)
        if is_root(path):
            raise UnableToRetrieveMetadata(path)
        with self._session_scope("get_metadata", path) as db:
            row = self.entries.select_by_path(db, path=path)
        if row is None:
            raise UnableToRetrieveMetadata(path)
        return FileAttributes.from_row(row)

    def file_size(self, path: str) -> FileAttributes:
        return self.get_metadata(path)

    def mime_type(self, path: str) -> FileAttributes:
        return self.get_metadata(path)

    def last_modified(self, path: str) -> FileAttributes:
        return self.get_metadata(path)

    def visibility(self, path: str) -> FileAttributes:
        return self.get_metadata(path)

    def get_visibility(self, path: str) -> FileAttributes:
        raise UnsupportedCapabilityError(
            f"{type(self).__name__} does not support visibility. Path: {path}",
            {"path": path},
        )

    def set_visibility(self, path: str, visibility: str) -> None:
        raise UnsupportedCapabilityError(
            f"{type(self).__name__} does not support visibility. Path: {path}, visibility: {visibility}",
            {"path": path, "visibility": visibility},
        )
