from pathlib import Path

from pagesmith.errors import FolderNotFound


def resolve_subfolder(root: Path, path: str | Path) -> Path:
    """Return the directory at `path` under `root`, resolved to an absolute path.

    Absolute paths and `..` segments that lead outside `root` are rejected.
    """
    folder = (root / path).resolve()
    if not folder.is_relative_to(root.resolve()) or not folder.is_dir():
        raise FolderNotFound(path)
    return folder
