"""数据库初始化：确保条目表存在。"""

from sqlalchemy import Table, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from tablefs.core.exceptions import StoreError
from tablefs.core.logger import logger


def init_db(engine: Engine, table: Table) -> None:
    """若条目表不存在则创建；已存在时不做任何修改。"""
    try:
        if inspect(engine).has_table(table.name):
            logger.debug("Entry table %s already exists", table.name)
            return
        table.create(bind=engine, checkfirst=True)
    except SQLAlchemyError as exc:
        error = StoreError.from_driver("建表失败", exc)
        logger.error("Failed to create entry table: %s", error.detail, extra={"table": table.name})
        raise error from exc
    logger.info("Created entry table %s", table.name)
