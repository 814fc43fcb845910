from __future__ import annotations


class AssetRoomError(Exception):
    """Base class for every catalog failure surfaced to callers."""


class RootNotFound(AssetRoomError):
    def __init__(self, root: object):
        super().__init__(f"root folder does not exist: {root}")
        self.root = root


class InvalidArgument(AssetRoomError, ValueError):
    pass


class NotFound(AssetRoomError, LookupError):
    def __init__(self, asset_id: str):
        super().__init__(f"no asset with id {asset_id!r}")
        self.asset_id = asset_id


class ConstraintViolation(AssetRoomError):
    pass


class StorageIOError(AssetRoomError, OSError):
    pass


class CatalogClosed(AssetRoomError, RuntimeError):
    def __init__(self, message: str = "no catalog is open"):
        super().__init__(message)
