"""File and directory metadata, listings, quota and recycle bin operations."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from tabulate import tabulate

from .common import (
    PATH_SEPARATOR,
    clean_path,
    format_file_size,
    format_time,
    fs_id_list_json,
    merge_int64_list,
    paths_list_json,
)
from .errors import (
    BaiduError,
    ErrType,
    PanError,
    PCSError,
    decode_pan_json_error,
    handle_json_parse,
)
from .expiry import CachedItem
from .session import FORM_HEADERS, NETDISK_UA_HEADER, Operation, PCSSession

LIST_CACHE_TTL = 60.0
LIST_LIMIT = "0-2147483647"


class OrderBy(str, enum.Enum):
    """Field a listing is sorted by."""

    NAME = "name"
    TIME = "time"
    SIZE = "size"  # directories have no size


class Order(str, enum.Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class OrderOptions:
    """Sorting of a directory listing."""

    by: OrderBy = OrderBy.NAME
    order: Order = Order.ASC

    @property
    def cache_key(self) -> str:
        return f"{self.by.value}_{self.order.value}"


DEFAULT_ORDER_OPTIONS = OrderOptions()


class FileDirectoryList(list):
    """A list of FileDirectory entries, possibly with nested children."""

    def total_size(self) -> int:
        """Sum of the sizes of all entries, children included."""
        total = 0
        for fd in self:
            if fd is None:
                continue
            total += fd.size
            if fd.children is not None:
                total += fd.children.total_size()
        return total

    def count(self) -> tuple[int, int]:
        """Return the number of files and of directories, children included."""
        files = dirs = 0
        for fd in self:
            if fd is None:
                continue
            if fd.isdir:
                dirs += 1
            else:
                files += 1
            if fd.children is not None:
                sub_files, sub_dirs = fd.children.count()
                files += sub_files
                dirs += sub_dirs
        return files, dirs

    def all_file_paths(self) -> list[str]:
        """Every path in the list, each followed by the paths of its children."""
        paths: list[str] = []
        for fd in self:
            if fd is None:
                continue
            paths.append(fd.path)
            if fd.children is not None:
                paths.extend(fd.children.all_file_paths())
        return paths


def _as_int(value: Any, key: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"field {key!r} is not an integer: {value!r}")
    return value


def _as_str(value: Any, key: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"field {key!r} is not a string: {value!r}")
    return value


@dataclass
class FileDirectory:
    """Metadata of a file or directory."""

    fs_id: int = 0
    app_id: int = 0
    path: str = ""
    filename: str = ""
    ctime: int = 0
    mtime: int = 0
    md5: str = ""
    block_list: list[str] = field(default_factory=list)
    size: int = 0
    isdir: bool = False
    ifhassubdir: bool = False
    parent: Optional["FileDirectory"] = field(default=None, repr=False, compare=False)
    children: Optional[FileDirectoryList] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_json(cls, data: dict) -> "FileDirectory":
        blocks = data.get("block_list") or []
        if not isinstance(blocks, list):
            raise TypeError(f"field 'block_list' is not a list: {blocks!r}")
        return cls(
            fs_id=_as_int(data.get("fs_id"), "fs_id"),
            app_id=_as_int(data.get("app_id"), "app_id"),
            path=_as_str(data.get("path"), "path"),
            filename=_as_str(data.get("server_filename"), "server_filename"),
            ctime=_as_int(data.get("ctime"), "ctime"),
            mtime=_as_int(data.get("mtime"), "mtime"),
            md5=_as_str(data.get("md5"), "md5"),
            block_list=[_as_str(b, "block_list") for b in blocks],
            size=_as_int(data.get("size"), "size"),
            isdir=_as_int(data.get("isdir"), "isdir") != 0,
            ifhassubdir=_as_int(data.get("ifhassubdir"), "ifhassubdir") != 0,
        )

    def __str__(self) -> str:
        if self.isdir:
            rows = [
                ["类型", "目录"],
                ["目录路径", self.path],
                ["目录名称", self.filename],
            ]
        else:
            md5_info = "md5 (可能不正确)" if len(self.block_list) > 1 else "md5 (截图请打码)"
            rows = [
                ["类型", "文件"],
                ["文件路径", self.path],
                ["文件名称", self.filename],
                ["文件大小", f"{self.size}, {format_file_size(self.size)}"],
                [md5_info, self.md5],
            ]
        rows += [
            ["app_id", str(self.app_id)],
            ["fs_id", str(self.fs_id)],
            ["创建日期", format_time(self.ctime)],
            ["修改日期", format_time(self.mtime)],
        ]
        if self.ifhassubdir:
            rows.append(["是否含有子目录", "true"])
        return tabulate(rows, tablefmt="plain", disable_numparse=True, colalign=("left", "left"))


@dataclass
class RecycleItem:
    """A file or directory in the recycle bin."""

    fs_id: int = 0
    isdir: int = 0
    left_time: int = 0
    path: str = ""
    filename: str = ""
    ctime: int = 0
    mtime: int = 0
    md5: str = ""
    size: int = 0

    @classmethod
    def from_json(cls, data: dict) -> "RecycleItem":
        return cls(
            fs_id=_as_int(data.get("fs_id"), "fs_id"),
            isdir=_as_int(data.get("isdir"), "isdir"),
            left_time=_as_int(data.get("leftTime"), "leftTime"),
            path=_as_str(data.get("path"), "path"),
            filename=_as_str(data.get("server_filename"), "server_filename"),
            ctime=_as_int(data.get("server_ctime"), "server_ctime"),
            mtime=_as_int(data.get("server_mtime"), "server_mtime"),
            md5=_as_str(data.get("md5"), "md5"),
            size=_as_int(data.get("size"), "size"),
        )


HandleFileDirectory = Callable[[int, str, Optional[FileDirectory], Optional[BaiduError]], bool]


def _convert_list(error: BaiduError, items: Any, convert: Callable[[dict], Any]) -> list:
    """Convert decoded JSON entries, reporting malformed data on ``error``."""
    try:
        if items is None:
            return []
        if not isinstance(items, list):
            raise TypeError(f"expected a list, got {type(items).__name__}")
        return [convert(item) for item in items if item is not None]
    except (TypeError, ValueError, AttributeError) as exc:
        error.set_json_error(exc)
        raise error from exc


class FilesMixin(PCSSession):
    """Metadata, listing, quota and recycle bin calls."""

    def quota_info(self) -> tuple[int, int]:
        """Return the total quota and the used space, in bytes."""
        op = str(Operation.QUOTA_INFO)
        body = self._send(op, "GET", self._pcs_url("quota", "info"))
        err = PCSError(op)
        data = handle_json_parse(err, body)
        try:
            return _as_int(data.get("quota"), "quota"), _as_int(data.get("used"), "used")
        except TypeError as exc:
            err.set_json_error(exc)
            raise err from exc

    def _parse_fd_list(self, op: str, body: bytes) -> FileDirectoryList:
        err = PCSError(op)
        data = handle_json_parse(err, body)
        return FileDirectoryList(_convert_list(err, data.get("list"), FileDirectory.from_json))

    def files_directories_meta(self, path: str) -> FileDirectory:
        """Return the metadata of a single file or directory."""
        if not path:
            path = PATH_SEPARATOR
        fds = self.files_directories_batch_meta(path)
        if len(fds) != 1:
            raise PCSError(
                str(Operation.FILES_DIRECTORIES_META),
                ErrType.OTHERS,
                ValueError("未知返回数据"),
            )
        return fds[0]

    def files_directories_batch_meta(self, *args: str) -> FileDirectoryList:
        """Return the metadata of several files or directories."""
        op = str(Operation.FILES_DIRECTORIES_META)
        body = self._post_param(op, self._pcs_url("file", "meta"), paths_list_json(args))
        return self._parse_fd_list(op, body)

    def files_directories_list(
        self, path: str, options: OrderOptions | None = None
    ) -> FileDirectoryList:
        """List the entries of a directory."""
        op = str(Operation.FILES_DIRECTORIES_LIST)
        if options is None:
            options = DEFAULT_ORDER_OPTIONS
        if not path:
            path = PATH_SEPARATOR
        url = self._pcs_url(
            "file",
            "list",
            {
                "path": path,
                "by": options.by.value,
                "order": options.order.value,
                "limit": LIST_LIMIT,
            },
        )
        return self._parse_fd_list(op, self._send(op, "GET", url))

    def search(self, target_path: str, keyword: str, recursive: bool) -> FileDirectoryList:
        """Search files by name; directories are not matched."""
        op = str(Operation.SEARCH)
        if not target_path:
            target_path = PATH_SEPARATOR
        url = self._pcs_url(
            "file",
            "search",
            {"path": target_path, "wd": keyword, "re": "1" if recursive else "0"},
        )
        return self._parse_fd_list(op, self._send(op, "GET", url))

    def _recurse_list(
        self,
        path: str,
        depth: int,
        options: OrderOptions | None,
        handler: HandleFileDirectory,
    ) -> tuple[FileDirectoryList | None, bool]:
        try:
            fdl = self.files_directories_list(path, options)
        except BaiduError as exc:
            return None, handler(depth, path, None, exc)

        for fd in fdl:
            if not handler(depth + 1, fd.path, fd, None):
                return fdl, False
            if not fd.isdir:
                continue
            fd.children, ok = self._recurse_list(fd.path, depth + 1, options, handler)
            if not ok:
                return fdl, False
        return fdl, True

    def files_directories_recurse_list(
        self,
        path: str,
        options: OrderOptions | None,
        handler: HandleFileDirectory,
    ) -> FileDirectoryList | None:
        """List a directory tree, calling ``handler`` for each entry and error.

        ``handler(depth, path, entry, error)`` returns False to stop the walk.
        """
        try:
            fd = self.files_directories_meta(path)
        except BaiduError as exc:
            handler(0, path, None, exc)
            return None

        if not fd.isdir:
            handler(0, path, fd, None)
            return FileDirectoryList([fd])

        data, _ = self._recurse_list(path, 0, options, handler)
        return data

    def _list_cache_key(self, path: str, options: OrderOptions) -> str:
        return f"{path}_{options.cache_key}"

    def cache_files_directories_list(
        self, path: str, options: OrderOptions | None = None
    ) -> FileDirectoryList:
        """List a directory, reusing a result fetched within the last minute."""
        if options is None:
            options = DEFAULT_ORDER_OPTIONS
        cache = self.cache_map.pool(str(Operation.FILES_DIRECTORIES_LIST))
        key = self._list_cache_key(path, options)
        item = cache.get(key)
        if item is not None:
            return item.value
        data = self.files_directories_list(path, options)
        cache[key] = CachedItem(data, LIST_CACHE_TTL)
        return data

    def _update_files_directories_cache(self, dirs: Iterable[str]) -> None:
        """Invalidate cached default-ordered listings of ``dirs``."""
        cache = self.cache_map.pool(str(Operation.FILES_DIRECTORIES_LIST))
        for d in dirs:
            item = cache.get(self._list_cache_key(d, DEFAULT_ORDER_OPTIONS))
            if item is not None:
                item.set_expires(False)

    def isdir(self, pcspath: str) -> bool:
        """Whether ``pcspath`` is a directory on the drive."""
        if clean_path(pcspath) == PATH_SEPARATOR:
            return True
        return self.files_directories_meta(pcspath).isdir

    def _check_isdir(self, operation: Operation | str, target_path: str) -> None:
        """Refuse to write over a directory; remote lookup errors are ignored."""
        try:
            is_dir = self.isdir(target_path)
        except BaiduError as exc:
            if exc.err_type is not ErrType.REMOTE:
                raise
            is_dir = False
        if is_dir:
            raise PCSError(str(operation), ErrType.OTHERS, ValueError("保存路径不可以覆盖目录"))

    def recycle_list(self, page: int) -> list[RecycleItem]:
        """List one page of the recycle bin."""
        op = str(Operation.RECYCLE_LIST)
        url = self._pan_url("recycle/list", {"num": "100", "page": str(page)})
        body = self._send(op, "GET", url, error=PanError(op), headers=NETDISK_UA_HEADER)
        err = PanError(op)
        data = handle_json_parse(err, body)
        return _convert_list(err, data.get("list"), RecycleItem.from_json)

    def recycle_restore(self, *args: int) -> list[int]:
        """Restore entries from the recycle bin; return the restored fs_ids."""
        op = str(Operation.RECYCLE_RESTORE)
        body = self._post_param(op, self._pcs_url("file", "restore"), fs_id_list_json(args))
        err = PCSError(op)
        data = handle_json_parse(err, body)
        extra = data.get("extra") or {}
        items = extra.get("list") if isinstance(extra, dict) else None
        return _convert_list(err, items, lambda item: _as_int(item.get("fs_id"), "fs_id"))

    def recycle_delete(self, *args: int) -> None:
        """Delete entries from the recycle bin for good."""
        op = str(Operation.RECYCLE_DELETE)
        body = self._send(
            op,
            "POST",
            self._pan_url("recycle/delete"),
            error=PanError(op),
            data={"fidlist": merge_int64_list(args)},
            headers=FORM_HEADERS,
        )
        decode_pan_json_error(op, body)

    def recycle_clear(self) -> int:
        """Empty the recycle bin; return the number of entries removed."""
        op = str(Operation.RECYCLE_CLEAR)
        body = self._send(op, "GET", self._pcs_url("file", "delete", {"type": "recycle"}))
        err = PCSError(op)
        data = handle_json_parse(err, body)
        extra = data.get("extra") or {}
        try:
            return _as_int(extra.get("succNum") if isinstance(extra, dict) else None, "succNum")
        except TypeError as exc:
            err.set_json_error(exc)
            raise err from exc