import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_incrementing

IGNORED_DIR_NAMES = frozenset({"node_modules"})


def ensure_parent(path: Path) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def safe_unlink(path: os.PathLike[str] | str) -> None:
    try:
        Path(path).unlink(missing_ok=True)
    except OSError:
        return


def relpath_posix(path: Path, base_dir: Path) -> str:
    return Path(path).relative_to(base_dir).as_posix()


def file_size(path: Path) -> int:
    return int(path.stat().st_size)


def iter_files(
    root: Path, *, ignore_dirs: frozenset[str] = IGNORED_DIR_NAMES
) -> Iterator[Path]:
    """
    Yield every regular file below `root` in a stable (sorted) order.

    Symlinked directories are followed; directories named in `ignore_dirs` are
    pruned at any depth. A missing root yields nothing.
    """
    root = Path(root)
    if not root.is_dir():
        return

    for dirpath, dirnames, filenames in os.walk(root, followlinks=True):
        dirnames[:] = sorted(d for d in dirnames if d not in ignore_dirs)
        for name in sorted(filenames):
            p = Path(dirpath) / name
            if p.is_file():
                yield p


def iter_relative_files(
    root: Path, *, ignore_dirs: frozenset[str] = IGNORED_DIR_NAMES
) -> Iterator[str]:
    """Like `iter_files`, but yields POSIX paths relative to `root`."""
    root = Path(root)
    for p in iter_files(root, ignore_dirs=ignore_dirs):
        yield relpath_posix(p, root)


def copy_file(src: Path, dst: Path) -> None:
    """Copy `src` to `dst`, creating parent directories."""
    dst = Path(dst)
    ensure_parent(dst)
    shutil.copy2(src, dst)


def copy_tree(src: Path, dst: Path) -> None:
    """Merge the contents of `src` into `dst` (existing files are overwritten)."""
    shutil.copytree(Path(src), Path(dst), dirs_exist_ok=True)


def _remove_once(path: Path) -> None:
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return
    if path.exists():
        raise OSError(f"Directory still exists after removal: {path}")


def remove_tree(path: Path, *, attempts: int = 3, delay_s: float = 0.1) -> None:
    """
    Remove a directory tree, retrying when the filesystem is slow to release it.

    A missing directory is not an error. The last failure is re-raised.
    """
    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_incrementing(start=delay_s, increment=delay_s),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    for attempt in retrying:
        with attempt:
            _remove_once(Path(path))


def fsync_dir(parent: Path) -> None:
    """
    Ensure directory entry durability after atomic rename.
    """
    fd: int | None = None
    try:
        fd = os.open(parent, os.O_RDONLY)
        os.fsync(fd)
    except OSError:
        return
    finally:
        if fd is not None:
            os.close(fd)


def atomic_write_text(
    path: Path,
    text: str,
    *,
    encoding: str = "utf-8",
    newline: str = "\n",
    mode: int = 0o644,
) -> None:
    """
    Atomically write text to `path`.

    Guarantees:
      - readers either see the old complete file or the new complete file
      - no partial/truncated file on crash
      - temp file written in the same directory (atomic replace works)
      - file contents are fsync()'d before replace
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd: int | None = None
    tmp_path: Path | None = None

    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.",
            suffix=".tmp",
            dir=str(path.parent),
            text=True,
        )
        tmp_path = Path(tmp_name)

        with os.fdopen(fd, "w", encoding=encoding, newline=newline) as f:
            fd = None
            f.write(text)
            f.flush()
            os.fsync(f.fileno())

        try:
            os.chmod(tmp_path, mode)
        except OSError:
            pass

        os.replace(tmp_path, path)

        fsync_dir(path.parent)

    finally:
        if fd is not None:
            try:
                os.close(fd)
            except OSError:
                pass
        if tmp_path is not None and tmp_path.exists():
            safe_unlink(tmp_path)


@dataclass(frozen=True, slots=True)
class DirectoryStats:
    file_count: int
    total_bytes: int


def directory_stats(root: Path) -> DirectoryStats:
    """Count files and their total size below `root` (nothing is ignored)."""
    count = 0
    total = 0
    for p in iter_files(root, ignore_dirs=frozenset()):
        count += 1
        total += file_size(p)
    return DirectoryStats(file_count=count, total_bytes=total)
