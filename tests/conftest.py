"""测试夹具：为 pytest 提供内存数据库与适配器的共享配置。"""

from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from tablefs.services.database_adapter import DatabaseAdapter

TEST_TABLE_NAME = "entries"


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    """单连接的内存 SQLite：所有会话共享同一个数据库。"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture()
def adapter(engine: Engine) -> DatabaseAdapter:
    return DatabaseAdapter(engine, TEST_TABLE_NAME, create_table=True)


@pytest.fixture()
def db_session_fixture(adapter: DatabaseAdapter) -> Generator[Session, None, None]:
    """提供给测试用例直接操作条目表的会话。"""
    session = adapter.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def populated(adapter: DatabaseAdapter) -> DatabaseAdapter:
    """预置目录树：

    /d/           /d/x.txt      /d/y/        /d/y/z.txt
    /d2/          /d2/x.txt     /top.txt
    """
    adapter.create_directory("/d")
    adapter.write("/d/x.txt", b"x")
    adapter.create_directory("/d/y")
    adapter.write("/d/y/z.txt", b"zz")
    adapter.create_directory("/d2")
    adapter.write("/d2/x.txt", b"sibling")
    adapter.write("/top.txt", b"top")
    return adapter
