import hashlib
import os
import stat
from pathlib import Path

from pagesmith.errors import FingerprintError

_CHUNK_SIZE = 64 * 1024


def fingerprint(directory: Path) -> str:
    """Return a digest of the names, layout and file contents under `directory`.

    Two snapshots with the same structure and bytes produce the same digest.
    Modification times are ignored, so touching a file is not a change.
    Symlinks are recorded by their target and never followed; sockets, FIFOs
    and devices are recorded by type only, so they are never opened.
    """
    if not directory.is_dir():
        raise FingerprintError(f"Cannot fingerprint '{directory}': not a directory.")

    digest = hashlib.sha256()

    def _raise(exc: OSError) -> None:
        raise exc

    try:
        for root, dirs, files in os.walk(directory, onerror=_raise):
            dirs.sort()
            rel_root = os.fsencode(os.path.relpath(root, directory))
            digest.update(b"D\0" + rel_root + b"\0")
            for name in sorted(dirs + files):
                path = os.path.join(root, name)
                mode = os.lstat(path).st_mode
                entry = rel_root + b"/" + os.fsencode(name) + b"\0"
                if stat.S_ISDIR(mode):
                    # Hashed when the walk enters it
                    continue
                if stat.S_ISLNK(mode):
                    digest.update(b"L\0" + entry + os.fsencode(os.readlink(path)) + b"\0")
                elif stat.S_ISREG(mode):
                    digest.update(b"F\0" + entry)
                    with open(path, "rb") as f:
                        while chunk := f.read(_CHUNK_SIZE):
                            digest.update(chunk)
                    # Separates this file's bytes from the next entry
                    digest.update(b"\0E\0")
                else:
                    digest.update(b"O\0" + entry + str(stat.S_IFMT(mode)).encode() + b"\0")
    except OSError as exc:
        raise FingerprintError(f"Cannot fingerprint '{directory}': {exc}") from exc

    return digest.hexdigest()
