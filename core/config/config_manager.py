import json
from dataclasses import MISSING, fields, is_dataclass
from typing import Any, Dict, List, Optional, Type, TypeVar, Union, get_args, get_origin

from core.logger import logger

T = TypeVar('T')


def _is_dataclass_type(tp: Any) -> bool:
    return isinstance(tp, type) and is_dataclass(tp)


def _strip_optional(ann: Any) -> Any:
    """Optional[X] -> X；其他注解原样返回"""
    if get_origin(ann) is Union:
        args = [a for a in get_args(ann) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return ann


def _convert_value(ann: Any, value: Any) -> Any:
    """按字段注解把 JSON 值还原为目标类型（嵌套 dataclass / 列表 / 字典递归处理）"""
    if value is None:
        return None
    ann = _strip_optional(ann)
    origin = get_origin(ann)

    if _is_dataclass_type(ann):
        if not isinstance(value, dict):
            raise TypeError(f'期望对象，实际是 {type(value).__name__}')
        return _build_dataclass(ann, value)
    if origin in (list, List):
        if not isinstance(value, list):
            raise TypeError(f'期望列表，实际是 {type(value).__name__}')
        inner = get_args(ann)[0] if get_args(ann) else Any
        return [_convert_value(inner, v) for v in value]
    if origin in (dict, Dict):
        if not isinstance(value, dict):
            raise TypeError(f'期望对象，实际是 {type(value).__name__}')
        kt, vt = get_args(ann) if len(get_args(ann)) == 2 else (Any, Any)
        return {_convert_value(kt, k): _convert_value(vt, v) for k, v in value.items()}
    if ann is float and isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if ann is int and isinstance(value, str):
        # JSON 对象的键总是字符串
        return int(value)
    if isinstance(ann, type) and ann is not Any and not isinstance(value, ann):
        raise TypeError(f'期望 {ann.__name__}，实际是 {type(value).__name__}')
    return value


def _build_dataclass(cls: Type[T], data: Dict[str, Any]) -> T:
    """
    宽松构造 dataclass：
    - 只取 cls 声明的字段，多余键忽略
    - 缺失字段使用 default / default_factory
    - 单个字段转换失败时回退到默认值并告警
    """
    kwargs: Dict[str, Any] = {}
    known = set()
    for f in fields(cls):
        known.add(f.name)
        if f.name not in data:
            continue
        try:
            kwargs[f.name] = _convert_value(f.type, data[f.name])
        except (TypeError, ValueError) as e:
            if f.default is MISSING and f.default_factory is MISSING:  # type: ignore[misc]
                raise
            logger.warning(f'[Config] 字段 {cls.__name__}.{f.name} 无效，使用默认值: {e}')
    for key in data:
        if key not in known:
            logger.debug(f'[Config] 忽略未知字段: {cls.__name__}.{key}')
    return cls(**kwargs)


def load_config(config_file: str, config_class: Type[T]) -> Optional[T]:
    """从 JSON 文件加载配置到指定 dataclass；失败时记录日志并返回 None。"""
    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning(f'[Config] 配置文件不存在: {config_file}')
        return None
    except (OSError, ValueError) as e:
        logger.error(f'[Config] 读取配置失败 {config_file}: {e}')
        return None

    if not isinstance(data, dict):
        logger.error(f'[Config] 配置根类型必须是对象(dict)，实际是 {type(data).__name__}')
        return None
    try:
        return _build_dataclass(config_class, data)
    except (TypeError, ValueError) as e:
        logger.error(f'[Config] 配置加载时出现错误: {e}')
        return None
