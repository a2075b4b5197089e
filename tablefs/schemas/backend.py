"""后端配置模型：宿主文件管理器注册 "database" 后端时传入的参数。"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DatabaseBackendConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(default="default", min_length=1, max_length=100)
    adapter: str = Field(default="database", min_length=1)
    dsn: str = Field(..., min_length=1)
    username: Optional[str] = None
    password: Optional[str] = None
    # 与宿主配置保持一致，同时接受 tableName 写法
    table_name: str = Field(..., alias="tableName", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    create_table: bool = False
    echo: bool = False
