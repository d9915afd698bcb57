"""Deadline enforcement for long-running font operations."""

import signal
import threading
from typing import Any, Callable, TypeVar

T = TypeVar("T")


def _timeout_error(timeout_seconds: int) -> TimeoutError:
    return TimeoutError(
        f"Font processing timed out after {timeout_seconds} seconds. "
        f"To process: set FONTSPLIT_TIMEOUT={timeout_seconds * 2} environment variable, "  # noqa: E501
        f"or use ResourceLimits(timeout={timeout_seconds * 2}) in Python API."
    )


def _can_use_alarm() -> bool:
    # Signal handlers can only be installed from the main thread
    return (
        hasattr(signal, "SIGALRM")
        and threading.current_thread() is threading.main_thread()
    )


def _call_with_alarm(
    func: Callable[..., T], timeout_seconds: int, args: tuple, kwargs: dict
) -> T:
    def on_alarm(signum: int, frame: Any) -> None:
        raise _timeout_error(timeout_seconds)

    previous = signal.signal(signal.SIGALRM, on_alarm)
    signal.alarm(timeout_seconds)
    try:
        return func(*args, **kwargs)
    finally:
        signal.alarm(0)
        signal.signal(signal.SIGALRM, previous)


def _call_in_worker(
    func: Callable[..., T], timeout_seconds: int, args: tuple, kwargs: dict
) -> T:
    outcome: dict[str, Any] = {}

    def run() -> None:
        try:
            outcome["result"] = func(*args, **kwargs)
        except Exception as e:
            outcome["error"] = e

    # Daemon so an abandoned worker does not keep the interpreter alive
    worker = threading.Thread(target=run, name="fontsplit-timeout", daemon=True)
    worker.start()
    worker.join(timeout=timeout_seconds)
    if worker.is_alive():
        raise _timeout_error(timeout_seconds)
    if "error" in outcome:
        raise outcome["error"]
    return outcome["result"]


def with_timeout(
    func: Callable[..., T], timeout_seconds: int, *args: Any, **kwargs: Any
) -> T:
    """Call ``func(*args, **kwargs)`` and give up after ``timeout_seconds``.

    A non-positive timeout disables the deadline. On the main thread of a
    platform with ``SIGALRM`` the call is interrupted by an alarm; otherwise
    it runs in a worker thread and the caller stops waiting, which cannot
    interrupt native code inside fontTools.

    Raises:
        TimeoutError: If the deadline passes before ``func`` returns.
    """
    if timeout_seconds <= 0:
        return func(*args, **kwargs)
    if _can_use_alarm():
        return _call_with_alarm(func, timeout_seconds, args, kwargs)
    return _call_in_worker(func, timeout_seconds, args, kwargs)
