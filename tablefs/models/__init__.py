"""模型包初始化，便于统一导入条目表定义。"""

from tablefs.models.entry import ENTRY_TYPE_DIR, ENTRY_TYPE_FILE, build_entry_table

__all__ = ["ENTRY_TYPE_DIR", "ENTRY_TYPE_FILE", "build_entry_table"]
