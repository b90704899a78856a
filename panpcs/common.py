"""JSON payloads, path helpers and formatting shared by the API modules."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Sequence

from tabulate import tabulate

PATH_SEPARATOR = "/"

KB = 1 << 10
MB = 1 << 20
GB = 1 << 30
TB = 1 << 40

_SIZE_UNITS = (("TB", TB), ("GB", GB), ("MB", MB), ("KB", KB))
_CST = timezone(timedelta(hours=8))
_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
_SCHEMES = {False: "http", True: "https"}


def _dumps(obj) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"))


def clean_path(path: str) -> str:
    """Return the shortest equivalent slash-separated path."""
    if not path:
        return "."
    rooted = path.startswith(PATH_SEPARATOR)
    parts: list[str] = []
    for segment in path.split(PATH_SEPARATOR):
        if segment in ("", "."):
            continue
        if segment == "..":
            if parts and parts[-1] != "..":
                parts.pop()
            elif not rooted:
                parts.append("..")
            continue
        parts.append(segment)
    joined = PATH_SEPARATOR.join(parts)
    if rooted:
        return PATH_SEPARATOR + joined
    return joined or "."


def dir_path(path: str) -> str:
    """Return all but the last element of ``path``, cleaned."""
    index = path.rfind(PATH_SEPARATOR)
    return clean_path(path[: index + 1])


@dataclass
class CpMv:
    """Source and destination of one copy or move."""

    from_path: str
    to_path: str

    def as_dict(self) -> dict:
        return {"from": self.from_path, "to": self.to_path}

    def to_json(self) -> str:
        return _dumps(self.as_dict())


def paths_list_json(paths: Iterable[str]) -> str:
    """Build the ``{"list": [{"path": ...}]}`` request parameter."""
    return _dumps({"list": [{"path": p} for p in paths]})


def cp_mv_list_json(items: Iterable[CpMv | None]) -> str:
    """Build the ``{"list": [{"from": ..., "to": ...}]}`` request parameter."""
    return _dumps({"list": [None if item is None else item.as_dict() for item in items]})


def format_cp_mv_table(items: Sequence[CpMv | None]) -> str:
    """Render copy/move pairs as a text table."""
    rows = [
        [index, item.from_path, item.to_path]
        for index, item in enumerate(items)
        if item is not None
    ]
    return tabulate(rows, headers=["#", "原路径", "目标路径"])


def _unique(values: Iterable[str]) -> list[str]:
    result: list[str] = []
    for value in values:
        if value not in result:
            result.append(value)
    return result


def cp_mv_related_dirs(items: Iterable[CpMv]) -> list[str]:
    """Return every parent directory touched by the pairs, in first-seen order."""
    return _unique(
        d for item in items for d in (dir_path(item.from_path), dir_path(item.to_path))
    )


def parent_dirs(paths: Iterable[str]) -> list[str]:
    """Return the distinct parent directories of ``paths``, in first-seen order."""
    return _unique(dir_path(p) for p in paths)


def block_list_json(blocks: Iterable[str]) -> str:
    """Build the ``{"block_list": [...]}`` request parameter."""
    return _dumps({"block_list": list(blocks)})


def fs_id_list_json(fs_ids: Iterable[int]) -> str:
    """Build the ``{"list": [{"fs_id": ...}]}`` request parameter."""
    return _dumps({"list": [{"fs_id": int(fs_id)} for fs_id in fs_ids]})


def merge_string_list(items: Iterable[str]) -> str:
    """Join strings into a JSON-style array literal."""
    return '["' + '","'.join(items) + '"]'


def merge_int64_list(items: Iterable[int]) -> str:
    """Join integers into a JSON-style array literal."""
    return "[" + ",".join(str(int(i)) for i in items) + "]"


def get_http_scheme(https: bool) -> str:
    """Return ``https`` when ``https`` is truthy, otherwise ``http``."""
    return _SCHEMES[bool(https)]


def public_suffix(domain: str) -> str:
    """Public suffix rule that lets cookies be shared across baidu.com hosts."""
    if domain.endswith(".baidu.com"):
        return "com"
    return domain


def format_file_size(size: int) -> str:
    """Render a byte count with a binary unit suffix."""
    if size < 0:
        return "0B"
    if size < KB:
        return f"{size}B"
    for unit, scale in _SIZE_UNITS:
        if size >= scale:
            return f"{size / scale:.6f}{unit}"
    return f"{size}B"


def format_time(timestamp: int) -> str:
    """Render a Unix timestamp in China Standard Time."""
    return datetime.fromtimestamp(timestamp, _CST).strftime(_TIME_FORMAT)