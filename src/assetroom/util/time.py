from __future__ import annotations

import time


def now_epoch() -> int:
    return int(time.time())
