"""存储后端注册中心：按名称登记适配器工厂，并据配置构建宿主可用的后端。

内置注册名为 ``database`` 的适配器：根据 dsn/用户名/密码建立连接，
再以配置中的表名构造 :class:`DatabaseAdapter`。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Union

from pydantic import ValidationError

from tablefs.core.exceptions import ConfigurationError
from tablefs.core.logger import logger
from tablefs.schemas.backend import DatabaseBackendConfig
from tablefs.services.database_adapter import DatabaseAdapter

AdapterFactory = Callable[[DatabaseBackendConfig], DatabaseAdapter]
BackendConfigInput = Union[DatabaseBackendConfig, Mapping[str, Any]]


@dataclass(frozen=True)
class Backend:
    """宿主持有的后端：名称、原始配置与底层适配器。"""

    name: str
    config: DatabaseBackendConfig
    adapter: DatabaseAdapter


ADAPTER_REGISTRY: Dict[str, AdapterFactory] = {}


def register_adapter(name: str, factory: AdapterFactory) -> None:
    key = (name or "").strip().lower()
    if not key:
        raise ConfigurationError("适配器名称不能为空")
    if key in ADAPTER_REGISTRY:
        raise ConfigurationError(f"适配器已注册: {key}", {"adapter": key})
    ADAPTER_REGISTRY[key] = factory


def _coerce_config(config: BackendConfigInput) -> DatabaseBackendConfig:
    if isinstance(config, DatabaseBackendConfig):
        return config
    try:
        return DatabaseBackendConfig.model_validate(dict(config))
    except ValidationError as exc:
        raise ConfigurationError("后端配置不合法", exc.errors(include_url=False)) from exc


def build_adapter(config: BackendConfigInput) -> DatabaseAdapter:
    cfg = _coerce_config(config)
    key = cfg.adapter.strip().lower()
    factory = ADAPTER_REGISTRY.get(key)
    if factory is None:
        available = ", ".join(sorted(ADAPTER_REGISTRY))
        raise ConfigurationError(
            f"不支持的适配器类型: {cfg.adapter}，可用选项：{available}", {"adapter": cfg.adapter}
        )
    return factory(cfg)


def build_backend(config: BackendConfigInput) -> Backend:
    cfg = _coerce_config(config)
    adapter = build_adapter(cfg)
    logger.info("Built backend %s with adapter %s", cfg.name, cfg.adapter)
    return Backend(name=cfg.name, config=cfg, adapter=adapter)


register_adapter("database", DatabaseAdapter.from_backend_config)
