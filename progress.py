from __future__ import annotations

import logging
import os
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

from config import CFG

# ------------------------------
# Thread-safe global progress state
# ------------------------------

PROGRESS_LOCK = threading.Lock()


def _init_logger() -> logging.Logger:
    logger = logging.getLogger("solver.attempt_log")
    if logger.handlers:
        return logger

    log_path = Path(os.environ.get("JS_LOG_DIR") or CFG.LOG_DIR) / "solver_attempts.log"
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    except OSError:
        # progress tracking must not break the solver
        logger.handlers.clear()
    return logger


ATTEMPT_LOGGER = _init_logger()


def _log_enabled() -> bool:
    return bool(ATTEMPT_LOGGER.handlers)


def _fmt_seconds(seconds: Optional[float]) -> Optional[str]:
    if seconds is None:
        return None
    try:
        return f"{float(seconds):.2f}s"
    except (TypeError, ValueError):
        return None


def _emit_log(event: str, **fields: Any) -> None:
    if not _log_enabled():
        return
    extras = [
        f"{key}={value}"
        for key, value in fields.items()
        if value is not None and value != ""
    ]
    try:
        if extras:
            ATTEMPT_LOGGER.info("%s | %s", event, " ".join(extras))
        else:
            ATTEMPT_LOGGER.info("%s", event)
    except Exception:
        # Logging failures must never bubble back to callers.
        pass


# Single source of truth for /progress
PROGRESS: Dict[str, Any] = {
    "status": "Idle",          # Idle | Solving | Solved | Error
    "engine": "",              # backtracking | cp_sat
    "nodes": 0,                # decision points explored
    "remaining": 0,            # parts handed to the solver
    "elapsed_start": None,
    "elapsed": 0.0,
    "message": "",
    "done": False,
    "ok": None,
    "run_id": 0,
}


def _now() -> float:
    return time.time()


def _touch_elapsed_locked() -> None:
    t0 = PROGRESS.get("elapsed_start")
    if t0 is not None:
        PROGRESS["elapsed"] = _now() - float(t0)


def reset() -> None:
    with PROGRESS_LOCK:
        PROGRESS.update({
            "status": "Idle",
            "engine": "",
            "nodes": 0,
            "remaining": 0,
            "elapsed_start": None,
            "elapsed": 0.0,
            "message": "",
            "done": False,
            "ok": None,
            "run_id": int(PROGRESS.get("run_id") or 0) + 1,
        })
        _emit_log("Progress reset")


def start(remaining: int) -> None:
    with PROGRESS_LOCK:
        PROGRESS["status"] = "Solving"
        PROGRESS["remaining"] = max(0, int(remaining))
        PROGRESS["elapsed_start"] = _now()
        PROGRESS["elapsed"] = 0.0
        _emit_log("Run started", run_id=PROGRESS["run_id"], remaining=PROGRESS["remaining"])


def set_engine(v: Any) -> None:
    with PROGRESS_LOCK:
        engine = "" if v is None else str(v)
        if engine != PROGRESS["engine"]:
            _emit_log("Engine started", engine=engine)
        PROGRESS["engine"] = engine


def set_nodes(n: Any) -> None:
    try:
        i = int(n)
    except (TypeError, ValueError):
        i = 0
    with PROGRESS_LOCK:
        PROGRESS["nodes"] = max(0, i)
        _touch_elapsed_locked()


def set_message(msg: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["message"] = "" if msg is None else str(msg)


def set_done(ok: Any = None, *, reason: Any = None) -> None:
    """Mark the run complete; ``ok`` picks the final status when given."""
    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        if ok is not None:
            PROGRESS["ok"] = bool(ok)
            PROGRESS["status"] = "Solved" if ok else "Error"
        elif PROGRESS.get("status") in ("", "Idle", "Solving", None):
            PROGRESS["status"] = "Solved"
            PROGRESS["ok"] = True
        if reason is not None:
            PROGRESS["message"] = str(reason)
        PROGRESS["done"] = True
        _emit_log(
            "Run finished",
            status=PROGRESS.get("status"),
            ok=PROGRESS.get("ok"),
            engine=PROGRESS.get("engine"),
            nodes=PROGRESS.get("nodes"),
            duration=_fmt_seconds(PROGRESS.get("elapsed")),
            message=PROGRESS.get("message"),
        )


def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        if not PROGRESS["done"]:
            _touch_elapsed_locked()
        return {
            "status": PROGRESS["status"],
            "engine": PROGRESS["engine"],
            "nodes": PROGRESS["nodes"],
            "remaining": PROGRESS["remaining"],
            "elapsed": PROGRESS["elapsed"],
            "message": PROGRESS["message"],
            "done": PROGRESS["done"],
            "ok": PROGRESS["ok"],
            "run_id": PROGRESS["run_id"],
        }


def as_json() -> Dict[str, Any]:
    # Alias used by /progress
    return snapshot()
