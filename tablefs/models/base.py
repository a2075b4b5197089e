"""模型基础：统一命名约定的元数据工厂与表名校验。

表名来自配置，最终会出现在 SQL 文本中，因此只在构造时按严格白名单校验一次，
之后视为可信常量；调用方传入的路径等值一律作为绑定参数传递。
"""

import re

from sqlalchemy import MetaData

from tablefs.core.exceptions import ConfigurationError

convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "pk": "pk_%(table_name)s",
}

TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def new_metadata() -> MetaData:
    """每个适配器持有独立的元数据，避免同名表在多个实例间互相覆盖。"""
    return MetaData(naming_convention=convention)


def validate_table_name(table_name: str) -> str:
    if not isinstance(table_name, str) or not TABLE_NAME_PATTERN.fullmatch(table_name):
        raise ConfigurationError("非法表名", {"table_name": table_name})
    return table_name
