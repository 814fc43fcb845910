from __future__ import annotations

import uuid

from assetroom.errors import InvalidArgument


def new_asset_id() -> str:
    return str(uuid.uuid4()).upper()


def new_cover_token() -> str:
    return str(uuid.uuid4()).upper()


def normalize_asset_id(value: str) -> str:
    raw = value.strip()
    if not raw:
        raise InvalidArgument("asset id must not be empty")
    return raw
