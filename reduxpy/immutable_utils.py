# reduxpy/immutable_utils.py
from collections.abc import Mapping
from typing import Any, Type, TypeVar

from immutables import Map
from pydantic import BaseModel

M = TypeVar("M", bound=BaseModel)


def to_immutable(obj: Any) -> Any:
    """
    將狀態或負載遞迴轉換為不可變結構。

    - Pydantic 模型、dict 及其他 Mapping 轉為 immutables.Map
    - list 轉為 tuple
    - set 轉為 frozenset
    - 其他值原樣返回
    """
    if isinstance(obj, Map):
        return obj
    if isinstance(obj, BaseModel):
        return Map({k: to_immutable(v) for k, v in obj.model_dump().items()})
    if isinstance(obj, Mapping):
        return Map({k: to_immutable(v) for k, v in obj.items()})
    if isinstance(obj, list):
        return tuple(to_immutable(i) for i in obj)
    if isinstance(obj, set):
        return frozenset(to_immutable(i) for i in obj)
    return obj


def to_dict(obj: Any) -> Any:
    """將 Map 及其巢狀結構轉換回普通的 dict / list / set。"""
    if isinstance(obj, Map):
        return {k: to_dict(v) for k, v in obj.items()}
    if isinstance(obj, tuple):
        return [to_dict(i) for i in obj]
    if isinstance(obj, frozenset):
        return {to_dict(i) for i in obj}
    return obj


def to_pydantic(map_obj: Map, model_class: Type[M]) -> M:
    """將 Map 狀態還原為 Pydantic 模型 (例如要輸出 JSON 時)。"""
    return model_class.model_validate(to_dict(map_obj))
