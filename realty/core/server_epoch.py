"""
Process boot marker.

Every session token carries the start time of the process that issued it.
A token minted before the current process started no longer matches and is
rejected, which logs everyone out on restart without a revocation list.
"""

import time
from typing import Optional

SERVER_START_TIME: int = int(time.time() * 1000)


def get_server_start_time() -> int:
    """Epoch milliseconds at which this process imported the module."""
    return SERVER_START_TIME


def has_server_restarted(token_start_time: object, current: Optional[int] = None) -> bool:
    """True when a token's embedded start time is not this process's."""
    return token_start_time != (current if current is not None else SERVER_START_TIME)
