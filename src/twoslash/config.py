import os

DEFAULT_VFS_ROOT = "/"


def get_vfs_root() -> str:
    root = os.getenv("TWOSLASH_VFS_ROOT", DEFAULT_VFS_ROOT).replace("\\", "/")
    return root if root.endswith("/") else root + "/"
