"""Session runner: variable initialization, sequencing and result decoding."""

from .runner import (
    FeedMap,
    feed,
    flatten,
    global_variables_initializer,
    run,
    run_one,
    session,
    session_run,
    with_session,
)

__all__ = [
    "FeedMap",
    "feed",
    "flatten",
    "global_variables_initializer",
    "run",
    "run_one",
    "session",
    "session_run",
    "with_session",
]
