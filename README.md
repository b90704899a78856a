# panpcs

A Python client for the Baidu netdisk: the PCS REST API at `pcs.baidu.com`
and the web API at `pan.baidu.com`.

It covers:

- account information: the user's UK and the storage quota;
- file and directory metadata, listings (plain, cached for a minute, and
  recursive) and search by file name;
- removing, creating, copying, moving and renaming files and directories;
- offline (cloud) download tasks: add, query, list, cancel, delete, clear;
- the recycle bin: list, restore, delete, clear;
- the signature the pan home page hands out for its signed requests.

## Requirements

Python 3.10 or later, with `requests` and `tabulate`.

## Quick start

The most complete client class is `panpcs.manip.ManipMixin`. It builds on
`panpcs.files.FilesMixin`, which builds on `panpcs.session.PCSSession`.

```python
from panpcs.common import CpMv
from panpcs.files import Order, OrderBy, OrderOptions
from panpcs.manip import ManipMixin

pcs = ManipMixin.from_bduss(250528, "placeholder")
pcs.https = True  # use https for every URL

quota, used = pcs.quota_info()
print(f"{used} of {quota} bytes used")

for entry in pcs.files_directories_list("/", OrderOptions(OrderBy.TIME, Order.DESC)):
    print(entry.path, entry.size)

print(pcs.files_directories_meta("/apps"))  # a text table

pcs.mkdir("/backup")
pcs.copy(CpMv("/notes.txt", "/backup/notes.txt"))
pcs.rename("/backup/notes.txt", "/backup/notes-old.txt")
pcs.remove("/backup/notes-old.txt")
```

A session can also be built from a cookie string with
`ManipMixin.from_cookie_string(app_id, "BDUSS=placeholder; STOKEN=placeholder")`,
or around an existing `requests.Session` passed to the constructor.
`set_stoken()` and `set_user_agent()` change the cookie and header later.
Every request URL is logged at debug level on the `panpcs` logger.

## Listings

- `files_directories_list(path, options)` lists one directory; `options`
  defaults to name, ascending.
- `cache_files_directories_list(path, options)` reuses a listing fetched
  within the last 60 seconds. `remove`, `mkdir`, `copy`, `move` and `rename`
  drop the cached listings of the directories they touch.
- `files_directories_recurse_list(path, options, handler)` walks a tree.
  `handler(depth, path, entry, error)` is called for every entry and every
  failed listing; returning `False` stops the walk. Directory entries get
  their `children` filled in.
- `search(target_path, keyword, recursive)` finds files by name.
- `isdir(path)` tells whether a path is a directory; `/` always is.

A `FileDirectoryList` offers `total_size()`, `count()` (files, directories)
and `all_file_paths()`, all of which include children.

## Offline downloads

```python
task_id = pcs.cloud_dl_add_task("http://example.com/file.iso", "/downloads")
tasks = pcs.cloud_dl_query_task([task_id])  # at most 100 ids are queried
print(tasks)                                 # a text table
print(tasks[0].status_text)
pcs.cloud_dl_cancel_task(task_id)
pcs.cloud_dl_delete_task(task_id)
removed = pcs.cloud_dl_clear_task()
```

`cloud_dl_list_task()` returns every task with its details.

## Recycle bin

`recycle_list(page)` returns `RecycleItem` records, `recycle_restore(*fs_ids)`
returns the restored ids, `recycle_delete(*fs_ids)` deletes for good and
`recycle_clear()` returns how many entries were removed.

## Errors

Every call that fails raises a subclass of `panpcs.errors.BaiduError`:

- `PCSError` for the PCS API (`error_code` / `error_msg`),
- `PanError` for the pan web API (`errno`),
- `DlinkError` for the share-link service's error format.

Each error carries its `operation` and an `ErrType` (`NET`, `JSON_PARSE`,
`REMOTE`, `INTERNAL`, `OTHERS`). For remote errors the properties
`remote_err_code` and `remote_err_msg` give the server's code and a
readable message.

```python
from panpcs.errors import BaiduError, ErrType

try:
    pcs.mkdir("/backup/2024")
except BaiduError as exc:
    if exc.err_type is ErrType.REMOTE:
        print(exc.remote_err_code, exc.remote_err_msg)
    else:
        raise
```

`handle_json_parse`, `decode_pcs_json_error` and `decode_pan_json_error`
decode a response body and raise the matching error.

## Modules

- `panpcs.errors`: error types and helpers for decoding server errors.
- `panpcs.expiry`: `Expires`, `CachedItem` and the per-operation `CacheMap`.
- `panpcs.panhome`: `PanHome`, which reads signing data from the pan home
  page and caches the signature for an hour, and the `sign2` cipher.
- `panpcs.common`: JSON payload builders, path helpers and formatting.
- `panpcs.session`: `PCSSession` (cookies, URL building, `uk()`) and the
  `Operation` names.
- `panpcs.files`: metadata, listings, quota and recycle bin (`FilesMixin`).
- `panpcs.manip`: changes to the drive and offline downloads (`ManipMixin`).

## What it does not do

The package has no uploads (single, rapid or chunked), no download links or
file downloads, no share links, no MD5 repair and no shell-pattern path
matching. `PanHome` computes the pan home signature, but no call in the
package uses it yet. There is also no client for the share-link service;
only its error type, `DlinkError`, is present. There is no command-line
program.