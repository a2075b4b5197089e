"""条目表定义：文件与目录共用一张扁平表。

存储规则：
- path：以 '/' 开头，不以 '/' 结尾；根目录不入库；唯一；
- type：'file' 或 'dir'，创建后不可变；
- 文件：contents/size/mimetype 有意义；目录三者均为 NULL；
- timestamp：unix 秒；目录为创建时间，文件为写入/复制时间。
"""

from typing import Optional

from sqlalchemy import CheckConstraint, Column, Integer, LargeBinary, MetaData, String, Table

from tablefs.models.base import new_metadata, validate_table_name

ENTRY_TYPE_FILE = "file"
ENTRY_TYPE_DIR = "dir"
ENTRY_TYPES = (ENTRY_TYPE_FILE, ENTRY_TYPE_DIR)


def build_entry_table(table_name: str, metadata: Optional[MetaData] = None) -> Table:
    """按校验过的表名构造条目表；非法表名在任何查询发生前即被拒绝。"""
    name = validate_table_name(table_name)
    return Table(
        name,
        metadata if metadata is not None else new_metadata(),
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("path", String(1024), nullable=False, unique=True),
        Column("contents", LargeBinary, nullable=True),
        Column("size", Integer, nullable=True),
        Column("type", String(8), nullable=False),
        Column("mimetype", String(255), nullable=True),
        Column("timestamp", Integer, nullable=False),
        CheckConstraint(
            "type IN ({})".format(", ".join(f"'{t}'" for t in ENTRY_TYPES)), name="entry_type"
        ),
    )
