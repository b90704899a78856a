"""Removing, creating, copying and moving entries, and offline download tasks."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from tabulate import tabulate

from .common import (
    CpMv,
    clean_path,
    cp_mv_list_json,
    cp_mv_related_dirs,
    dir_path,
    format_file_size,
    format_time,
    parent_dirs,
    paths_list_json,
)
from .errors import ErrType, PCSError, decode_pcs_json_error, handle_json_parse
from .files import FilesMixin
from .session import Operation

CLOUD_DL_PATH = "services/cloud_dl"
MAX_QUERY_TASK_IDS = 100
ADD_TASK_TIMEOUT = "2147483647"

_INT_RE = re.compile(r"[+-]?\d+")

_STATUS_TEXTS = {
    0: "下载成功",
    1: "下载进行中",
    2: "系统错误",
    3: "资源不存在",
    4: "下载超时",
    5: "资源存在但下载失败",
    6: "存储空间不足",
    7: "任务取消",
}


def _must_int(value: Any, key: str) -> int:
    """Parse a numeric string field; malformed numbers count as 0."""
    if value is None:
        return 0
    if not isinstance(value, str):
        raise TypeError(f"field {key!r} is not a string: {value!r}")
    if not _INT_RE.fullmatch(value):
        return 0
    return int(value)


def _str(value: Any, key: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"field {key!r} is not a string: {value!r}")
    return value


def _int(value: Any, key: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"field {key!r} is not an integer: {value!r}")
    return value


def _parse_task_id(value: Any) -> int | None:
    if isinstance(value, str) and _INT_RE.fullmatch(value):
        return int(value)
    return None


@dataclass
class CloudDlFileInfo:
    """A file fetched by an offline download task."""

    file_name: str = ""
    file_size: int = 0


@dataclass
class CloudDlTaskInfo:
    """State of one offline download task."""

    task_id: int = 0
    status: int = 0
    file_size: int = 0
    finished_size: int = 0
    create_time: int = 0
    start_time: int = 0
    finish_time: int = 0
    save_path: str = ""
    source_url: str = ""
    task_name: str = ""
    od_type: int = 0
    file_list: list[CloudDlFileInfo] = field(default_factory=list)
    result: int = 0

    @classmethod
    def from_json(cls, task_id: int, data: dict) -> "CloudDlTaskInfo":
        files = data.get("file_list") or []
        if not isinstance(files, list):
            raise TypeError(f"field 'file_list' is not a list: {files!r}")
        return cls(
            task_id=task_id,
            status=_must_int(data.get("status"), "status"),
            file_size=_must_int(data.get("file_size"), "file_size"),
            finished_size=_must_int(data.get("finished_size"), "finished_size"),
            create_time=_must_int(data.get("create_time"), "create_time"),
            start_time=_must_int(data.get("start_time"), "start_time"),
            finish_time=_must_int(data.get("finish_time"), "finish_time"),
            save_path=_str(data.get("save_path"), "save_path"),
            source_url=_str(data.get("source_url"), "source_url"),
            task_name=_str(data.get("task_name"), "task_name"),
            od_type=_must_int(data.get("od_type"), "od_type"),
            file_list=[
                CloudDlFileInfo(
                    file_name=_str(f.get("file_name"), "file_name"),
                    file_size=_must_int(f.get("file_size"), "file_size"),
                )
                for f in files
                if f is not None
            ],
            result=_int(data.get("result"), "result"),
        )

    @property
    def status_text(self) -> str:
        """Readable description of the status code."""
        return _STATUS_TEXTS.get(self.status, f"未知状态码: {self.status}")


class CloudDlTaskList(list):
    """A list of offline download tasks."""

    def __str__(self) -> str:
        rows = [
            [
                str(index),
                str(task.task_id),
                task.task_name,
                format_file_size(task.file_size),
                format_time(task.create_time),
                clean_path(task.save_path),
                task.source_url,
                task.status_text,
            ]
            for index, task in enumerate(self)
        ]
        return tabulate(
            rows,
            headers=["#", "任务ID", "任务名称", "文件大小", "创建日期", "保存路径", "资源地址", "状态"],
            disable_numparse=True,
        )


class ManipMixin(FilesMixin):
    """Calls that change the drive's contents and manage offline downloads."""

    def remove(self, *args: str) -> None:
        """Delete files or directories."""
        op = str(Operation.REMOVE)
        body = self._post_param(op, self._pcs_url("file", "delete"), paths_list_json(args))
        decode_pcs_json_error(op, body)
        self._update_files_directories_cache(parent_dirs(args))

    def mkdir(self, pcspath: str) -> None:
        """Create a directory."""
        op = str(Operation.MKDIR)
        body = self._send(op, "POST", self._pcs_url("file", "mkdir", {"path": pcspath}))
        decode_pcs_json_error(op, body)
        self._update_files_directories_cache([dir_path(pcspath)])

    def _cp_mv(self, operation: Operation, items: Iterable[CpMv]) -> None:
        if operation is Operation.COPY:
            method = "copy"
        elif operation in (Operation.MOVE, Operation.RENAME):
            method = "move"
        else:
            raise ValueError(f"Unknown opreation: {operation}")
        items = list(items)
        op = str(operation)
        body = self._post_param(op, self._pcs_url("file", method), cp_mv_list_json(items))
        decode_pcs_json_error(op, body)
        self._update_files_directories_cache(cp_mv_related_dirs(items))

    def rename(self, from_path: str, to_path: str) -> None:
        """Rename a file or directory."""
        self._cp_mv(Operation.RENAME, [CpMv(from_path, to_path)])

    def copy(self, *args: CpMv) -> None:
        """Copy files or directories."""
        self._cp_mv(Operation.COPY, args)

    def move(self, *args: CpMv) -> None:
        """Move files or directories."""
        self._cp_mv(Operation.MOVE, args)

    def cloud_dl_add_task(self, source_url: str, save_path: str) -> int:
        """Start an offline download; return its task id."""
        op = str(Operation.CLOUD_DL_ADD_TASK)
        url = self._pcs_url2(
            CLOUD_DL_PATH,
            "add_task",
            {"save_path": save_path, "source_url": source_url, "timeout": ADD_TASK_TIMEOUT},
        )
        body = self._send(op, "POST", url)
        err = PCSError(op)
        data = handle_json_parse(err, body)
        try:
            return _int(data.get("task_id"), "task_id")
        except TypeError as exc:
            err.set_json_error(exc)
            raise err from exc

    def _cloud_dl_query_task(self, operation: Operation, task_ids: Iterable[int]) -> CloudDlTaskList:
        err = PCSError(str(operation))
        ids = list(task_ids)
        if not ids:
            err.err_type = ErrType.OTHERS
            err.err = ValueError("no input any task_ids")
            raise err

        str_ids = [str(int(task_id)) for task_id in ids[:MAX_QUERY_TASK_IDS]]
        url = self._pcs_url2(CLOUD_DL_PATH, "query_task", {"op_type": "1"})
        body = self._post_param(
            Operation.CLOUD_DL_QUERY_TASK, url, ",".join(str_ids), field="task_ids"
        )
        data = handle_json_parse(err, body)

        try:
            info = data.get("task_info") or {}
            if not isinstance(info, dict):
                raise TypeError(f"field 'task_info' is not an object: {info!r}")
            return CloudDlTaskList(
                CloudDlTaskInfo.from_json(int(sid), info[sid])
                for sid in str_ids
                if info.get(sid) is not None
            )
        except (TypeError, ValueError, AttributeError) as exc:
            err.set_json_error(exc)
            raise err from exc

    def cloud_dl_query_task(self, task_ids: Iterable[int]) -> CloudDlTaskList:
        """Look up offline download tasks by id; at most 100 are queried."""
        return self._cloud_dl_query_task(Operation.CLOUD_DL_QUERY_TASK, task_ids)

    def cloud_dl_list_task(self) -> CloudDlTaskList:
        """List all offline download tasks with their details."""
        op = str(Operation.CLOUD_DL_LIST_TASK)
        url = self._pcs_url2(
            CLOUD_DL_PATH,
            "list_task",
            {"need_task_info": "1", "status": "255", "start": "0", "limit": "1000"},
        )
        body = self._send(op, "POST", url)
        err = PCSError(op)
        data = handle_json_parse(err, body)

        entries = data.get("task_info") or []
        if not isinstance(entries, list):
            err.set_json_error(TypeError(f"field 'task_info' is not a list: {entries!r}"))
            raise err
        if not entries:
            return CloudDlTaskList()

        task_ids = []
        for entry in entries:
            if entry is None:
                continue
            if not isinstance(entry, dict):
                err.set_json_error(TypeError(f"task entry is not an object: {entry!r}"))
                raise err
            task_id = _parse_task_id(entry.get("task_id"))
            if task_id is not None:
                task_ids.append(task_id)

        return self._cloud_dl_query_task(Operation.CLOUD_DL_LIST_TASK, task_ids)

    def _cloud_dl_manip_task(self, operation: Operation, method: str, task_id: int) -> None:
        op = str(operation)
        url = self._pcs_url2(CLOUD_DL_PATH, method, {"task_id": str(int(task_id))})
        body = self._send(op, "POST", url)
        decode_pcs_json_error(op, body)

    def cloud_dl_cancel_task(self, task_id: int) -> None:
        """Cancel an offline download task."""
        self._cloud_dl_manip_task(Operation.CLOUD_DL_CANCEL_TASK, "cancel_task", task_id)

    def cloud_dl_delete_task(self, task_id: int) -> None:
        """Delete an offline download task."""
        self._cloud_dl_manip_task(Operation.CLOUD_DL_DELETE_TASK, "delete_task", task_id)

    def cloud_dl_clear_task(self) -> int:
        """Clear the offline download history; return how many records went."""
        op = str(Operation.CLOUD_DL_CLEAR_TASK)
        body = self._send(op, "POST", self._pcs_url2(CLOUD_DL_PATH, "clear_task"))
        err = PCSError(op)
        data = handle_json_parse(err, body)
        try:
            return _int(data.get("total"), "total")
        except TypeError as exc:
            err.set_json_error(exc)
            raise err from exc