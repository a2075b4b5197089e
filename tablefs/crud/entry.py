"""条目 CRUD：对条目表的单语句参数化读写，并统一转换驱动异常。

每个方法只发出一条语句，不负责提交；事务边界由调用方（服务层）控制，
这样组合操作可以把多条语句放进同一个事务中整体提交或回滚。
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.engine import Result, RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import Executable

from tablefs.core.exceptions import StoreError
from tablefs.core.logger import logger
from tablefs.models.entry import ENTRY_TYPE_DIR, ENTRY_TYPE_FILE
from tablefs.utils.path_utils import descendant_prefix, is_descendant, is_root

COPY_COLUMNS = ("contents", "size", "type", "mimetype")


class CRUDEntry:
    """封装条目表上的查询、插入、更新与删除。"""

    def __init__(self, table: Table):
        self.table = table

    # 列表与元数据查询不需要读取大字段
    @property
    def meta_columns(self) -> list:
        c = self.table.c
        return [c.id, c.path, c.size, c.type, c.mimetype, c.timestamp]

    def _execute(self, db: Session, stmt: Executable, *, action: str) -> Result:
        try:
            return db.execute(stmt)
        except SQLAlchemyError as exc:
            error = StoreError.from_driver("语句执行失败", exc)
            logger.error(
                "Query executing failed: %s",
                error.detail,
                extra={"action": action, "table": self.table.name},
            )
            raise error from exc

    # ----------------------------
    # 写入
    # ----------------------------
    def insert_file(
        self,
        db: Session,
        *,
        path: str,
        contents: bytes,
        mimetype: Optional[str],
        size: int,
        timestamp: int,
    ) -> None:
        stmt = insert(self.table).values(
            path=path,
            contents=contents,
            size=size,
            type=ENTRY_TYPE_FILE,
            mimetype=mimetype,
            timestamp=timestamp,
        )
        self._execute(db, stmt, action="insert_file")

    def update_file(
        self,
        db: Session,
        *,
        path: str,
        contents: bytes,
        mimetype: Optional[str],
        size: int,
        timestamp: int,
    ) -> int:
        stmt = (
            update(self.table)
            .where(self.table.c.path == path)
            .where(self.table.c.type == ENTRY_TYPE_FILE)
            .values(contents=contents, mimetype=mimetype, size=size, timestamp=timestamp)
        )
        return self._execute(db, stmt, action="update_file").rowcount

    def insert_dir(self, db: Session, *, path: str, timestamp: int) -> None:
        stmt = insert(self.table).values(path=path, type=ENTRY_TYPE_DIR, timestamp=timestamp)
        self._execute(db, stmt, action="insert_dir")

    def insert_row(self, db: Session, *, path: str, row: Mapping[str, Any], timestamp: int) -> None:
        """以 ``row`` 的内容/大小/类型/MIME 在新路径插入一行（复制用）。"""
        values = {column: row[column] for column in COPY_COLUMNS}
        stmt = insert(self.table).values(path=path, timestamp=timestamp, **values)
        self._execute(db, stmt, action="insert_row")

    def update_path(self, db: Session, *, path: str, new_path: str) -> int:
        stmt = update(self.table).where(self.table.c.path == path).values(path=new_path)
        return self._execute(db, stmt, action="update_path").rowcount

    def delete_by_path(self, db: Session, *, path: str, type: Optional[str] = None) -> int:
        stmt = delete(self.table).where(self.table.c.path == path)
        if type is not None:
            stmt = stmt.where(self.table.c.type == type)
        return self._execute(db, stmt, action="delete_by_path").rowcount

    # ----------------------------
    # 查询
    # ----------------------------
    def select_by_path(
        self, db: Session, *, path: str, with_contents: bool = False, lock: bool = False
    ) -> Optional[RowMapping]:
        columns = list(self.meta_columns)
        if with_contents:
            columns.append(self.table.c.contents)
        stmt = select(*columns).where(self.table.c.path == path)
        if lock:
            stmt = stmt.with_for_update()
        return self._execute(db, stmt, action="select_by_path").mappings().first()

    def select_contents(self, db: Session, *, path: str) -> Optional[bytes]:
        stmt = select(self.table.c.contents).where(self.table.c.path == path)
        return self._execute(db, stmt, action="select_contents").scalar()

    def select_by_prefix(
        self, db: Session, *, prefix: str, lock: bool = False
    ) -> Sequence[RowMapping]:
        """返回路径以 ``prefix + '/'`` 开头的所有行；根目录返回整张表。"""
        stmt = select(*self.meta_columns).order_by(self.table.c.path)
        if lock:
            # 结构性变更期间锁住整棵子树，不支持行锁的方言会忽略该子句
            stmt = stmt.with_for_update()
        if not is_root(prefix):
            # autoescape 让目录名中的 % 与 _ 按字面匹配
            stmt = stmt.where(
                self.table.c.path.startswith(descendant_prefix(prefix), autoescape=True)
            )
        rows = self._execute(db, stmt, action="select_by_prefix").mappings().all()
        if is_root(prefix):
            return rows
        # SQLite 与部分 MySQL 排序规则下 LIKE 不区分大小写，这里按字节再确认一次
        return [row for row in rows if is_descendant(row["path"], prefix)]

    def exists_by_path_and_type(
        self, db: Session, *, path: str, type: Optional[str] = None
    ) -> bool:
        stmt = select(self.table.c.id).where(self.table.c.path == path)
        if type is not None:
            stmt = stmt.where(self.table.c.type == type)
        return self._execute(db, stmt.limit(1), action="exists_by_path_and_type").first() is not None
