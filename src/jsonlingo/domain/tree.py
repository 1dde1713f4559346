# src/jsonlingo/domain/tree.py
"""
JSON 树与字符串叶子节点列表之间的双向转换。

路径是由对象键 (str) 与数组下标 (int) 组成的元组，唯一定位一个叶子节点。
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Union

from jsonlingo_core.exceptions import PathResolutionError, UnsupportedJsonTypeError

JsonValue = Union[None, bool, int, float, str, list["JsonValue"], dict[str, "JsonValue"]]
PathStep = Union[str, int]
Path = tuple[PathStep, ...]


@dataclass(frozen=True)
class StringNode:
    """JSON 树中的一个字符串叶子节点。"""

    path: Path
    value: str


def path_key(path: Path) -> str:
    """将路径转换为点分字符串，例如 ``("items", 0, "name") -> "items.0.name"``。"""
    return ".".join(str(step) for step in path)


def extract_strings(value: Any) -> list[StringNode]:
    """
    深度优先、从左到右地收集所有字符串叶子节点。

    对象按键的插入顺序遍历，数组按下标遍历。数字、布尔值与 null 被跳过。

    Raises:
        UnsupportedJsonTypeError: 遇到不属于 JSON 数据模型的值。
    """
    nodes: list[StringNode] = []
    _walk(value, (), nodes)
    return nodes


def _walk(value: Any, path: Path, out: list[StringNode]) -> None:
    # bool 是 int 的子类，但两者都属于被跳过的标量，无需区分
    if isinstance(value, str):
        out.append(StringNode(path=path, value=value))
    elif value is None or isinstance(value, (bool, int, float)):
        return
    elif isinstance(value, list):
        for index, item in enumerate(value):
            _walk(item, path + (index,), out)
    elif isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise UnsupportedJsonTypeError(
                    f"对象键必须是字符串，路径 '{path_key(path)}' 处发现 {type(key).__name__}"
                )
            _walk(item, path + (key,), out)
    else:
        raise UnsupportedJsonTypeError(
            f"路径 '{path_key(path)}' 处的值类型 {type(value).__name__} 不是合法的 JSON 值"
        )


def reconstruct(original: Any, nodes: list[StringNode]) -> Any:
    """
    深拷贝 `original`，并将每个节点的值写回其路径所在位置。

    原始对象不会被修改。

    Raises:
        PathResolutionError: 路径无法解析、容器类型与路径步骤不匹配，
            或目标位置不是字符串叶子。
    """
    result = copy.deepcopy(original)
    for node in nodes:
        if not node.path:
            if not isinstance(result, str):
                raise PathResolutionError("根节点不是字符串，无法替换", path=node.path)
            result = node.value
            continue
        parent = _resolve_parent(result, node.path)
        last = node.path[-1]
        if not isinstance(parent[last], str):
            raise PathResolutionError(
                f"路径 '{path_key(node.path)}' 指向的不是字符串叶子", path=node.path
            )
        parent[last] = node.value
    return result


def _resolve_parent(root: Any, path: Path) -> Any:
    current = root
    for depth, step in enumerate(path):
        if isinstance(step, int) and not isinstance(step, bool):
            ok = isinstance(current, list) and 0 <= step < len(current)
        else:
            ok = isinstance(current, dict) and step in current
        if not ok:
            raise PathResolutionError(
                f"无法解析路径 '{path_key(path)}'（在第 {depth} 步 {step!r} 处失败）",
                path=path,
            )
        if depth == len(path) - 1:
            return current
        current = current[step]
    return current
