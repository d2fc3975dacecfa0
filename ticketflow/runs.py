"""Store and retrieve finished run payloads by run_id. Process memory only; oldest entries are evicted."""
import threading
from collections import OrderedDict

MAX_RUNS = 1000

_store: OrderedDict[str, dict] = OrderedDict()
_lock = threading.Lock()


def store_run(run_id: str, payload: dict) -> None:
    """Store the payload of a finished run (PipelineRun.to_payload())."""
    with _lock:
        _store[run_id] = payload
        _store.move_to_end(run_id)
        while len(_store) > MAX_RUNS:
            _store.popitem(last=False)


def get_run(run_id: str) -> dict | None:
    with _lock:
        return _store.get(run_id)


def clear_runs() -> None:
    with _lock:
        _store.clear()
