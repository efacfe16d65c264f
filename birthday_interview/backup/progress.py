"""Progress callback plumbing shared by the packer and unpacker."""

import inspect
from typing import Awaitable, Callable, Optional, Union

# (processed, total, current_filename); may be a plain function or a coroutine function
ProgressCallback = Callable[[int, int, str], Union[None, Awaitable[None]]]


async def emit_progress(
    callback: Optional[ProgressCallback], processed: int, total: int, filename: str,
) -> None:
    if callback is None:
        return
    result = callback(processed, total, filename)
    if inspect.isawaitable(result):
        await result
