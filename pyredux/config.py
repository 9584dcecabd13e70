"""
Store 配置模型。
"""

from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator


class StoreConfig(BaseModel):
    """
    create_store 的配置。

    Attributes:
        isolate_listener_errors: 為 True 時，單一 listener 拋出的異常會交給
            錯誤處理器，其餘 listener 仍會被通知；預設直接向上傳播。
        logger_name: Store 追蹤 dispatch 與訂閱變化所用的 logger 名稱。
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    isolate_listener_errors: bool = False
    logger_name: str = "pyredux.store"

    @field_validator("logger_name")
    @classmethod
    def validate_logger_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("logger_name must not be blank")
        return value


def resolve_config(config: Optional[Union[StoreConfig, Mapping[str, Any]]]) -> StoreConfig:
    """將 None、映射或 StoreConfig 統一轉換為 StoreConfig。"""
    if config is None:
        return StoreConfig()
    if isinstance(config, StoreConfig):
        return config
    return StoreConfig.model_validate(dict(config))
