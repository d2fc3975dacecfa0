"""Run a callable on a daemon thread and wait for it up to a deadline.

The thread is never interrupted. On timeout the caller stops waiting and the
call runs to its own end in the background; its result is discarded. Daemon
threads do not hold the interpreter open at exit.
"""
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Callable, TypeVar

T = TypeVar("T")


class DeadlineExceeded(TimeoutError):
    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"exceeded {timeout:g}s")


def call_with_deadline(fn: Callable[..., T], timeout: float, *args: Any, name: str = "deadline") -> T:
    """fn(*args) or DeadlineExceeded after timeout seconds. Exceptions from fn propagate."""
    future: Future = Future()

    def target() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = fn(*args)
        except BaseException as e:
            future.set_exception(e)
        else:
            future.set_result(result)

    threading.Thread(target=target, name=name, daemon=True).start()
    try:
        return future.result(timeout=timeout)
    except FutureTimeout:
        # fn may itself raise TimeoutError (the same class on 3.11+)
        if future.done():
            return future.result()
        raise DeadlineExceeded(timeout) from None
