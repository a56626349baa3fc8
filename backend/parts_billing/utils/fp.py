"""小型函数式工具：取属性、组合谓词、分组"""

from collections.abc import Mapping
from functools import reduce
from typing import Any, Callable, Dict, Hashable, Iterable, List, Union

Predicate = Callable[[Any], bool]


def prop(name: str) -> Callable[[Any], Any]:
    """取字段值，对象属性或字典键均可；字段缺失时返回 None，0 和空串原样返回"""
    def getter(obj: Any) -> Any:
        if isinstance(obj, Mapping):
            return obj.get(name)
        return getattr(obj, name, None)
    return getter


def prop_eq(name: str, value: Any) -> Predicate:
    return lambda obj: prop(name)(obj) == value


def either(f: Predicate, g: Predicate) -> Predicate:
    return lambda obj: bool(f(obj) or g(obj))


def instance_of(cls: type) -> Predicate:
    return lambda obj: isinstance(obj, cls)


def pipe(*fns: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """从左到右依次调用"""
    return lambda value: reduce(lambda acc, fn: fn(acc), fns, value)


def nth(index: int) -> Callable[[List[Any]], Any]:
    def getter(items: List[Any]) -> Any:
        try:
            return items[index]
        except IndexError:
            return None
    return getter


def group_by(
    items: Iterable[Any],
    key: Union[str, Callable[[Any], Hashable]],
) -> Dict[Hashable, List[Any]]:
    """
    按 key 分组，保持首次出现的顺序

    Args:
        items: 待分组的元素
        key: 字段名或取键函数
    """
    key_fn = prop(key) if isinstance(key, str) else key
    groups: Dict[Hashable, List[Any]] = {}
    for item in items:
        groups.setdefault(key_fn(item), []).append(item)
    return groups
