"""大纲解析与规范化工具。"""

from __future__ import annotations

import json
from typing import Any

from prowriter.shared.logging import get_logger, log_extra

log = get_logger(__name__)

# 模型常用的数组键名，按优先级尝试
_TITLE_KEYS = ("titles", "sections", "items")


def placeholder_title(position: int) -> str:
    """第 position 个（从 1 开始）占位标题。"""
    return f"Section {position}"


def parse_outline_titles(raw: str | None) -> list[str]:
    """从模型输出中提取标题列表。

    接受 `{"titles": [...]}`、`sections`/`items` 键、裸数组，或对象中的第一个数组；
    非字符串与空字符串被丢弃。JSON 无法解析时返回空列表（由调用方补齐占位标题）。
    """
    try:
        data: Any = json.loads(raw or "{}")
    except (TypeError, ValueError):
        log.warning(
            "generation.outline_unparsable",
            extra=log_extra(raw_preview=(raw or "")[:200]),
        )
        return []

    results: list[Any] = []
    if isinstance(data, list):
        results = data
    elif isinstance(data, dict):
        for key in _TITLE_KEYS:
            if isinstance(data.get(key), list):
                results = data[key]
                break
        else:
            results = next((v for v in data.values() if isinstance(v, list)), [])

    return [r.strip() for r in results if isinstance(r, str) and r.strip()]


def normalize_outline(titles: list[str], count: int) -> list[str]:
    """将标题列表截断/补齐到恰好 count 个。"""
    out = list(titles[:count])
    while len(out) < count:
        out.append(placeholder_title(len(out) + 1))
    return out
