import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# ======= Board layout (fixed) =======
BOARD_SIZE     = 8
REACTOR_OFFSET = 0
AUX1_OFFSET    = 4
AUX2_OFFSET    = 6

# ======= Catalog / default selection =======
CATALOG_PATH      = os.getenv("JS_CATALOG_PATH", os.path.join(BASE_DIR, "data", "catalog.json"))
DEFAULT_SHIP      = os.getenv("JS_DEFAULT_SHIP", "catamaran")
DEFAULT_SHIP_TIER = int(os.getenv("JS_DEFAULT_SHIP_TIER", "0"))

# ======= Solver engine =======
# "backtracking" reproduces the exhaustive MRV search; "cp_sat" hands the
# same placement model to OR-Tools.
SOLVER_ENGINE = os.getenv("JS_SOLVER_ENGINE", "backtracking").strip().lower()

# ======= Backtracking budget =======
# Zero means unbounded: the search runs to completion or exhaustion.
BACKTRACK_NODE_LIMIT = int(os.getenv("JS_BACKTRACK_NODE_LIMIT", "0"))
BACKTRACK_SECONDS    = float(os.getenv("JS_BACKTRACK_SECONDS", "0"))

# ======= CP-SAT fallback =======
CP_SAT_FALLBACK = int(os.getenv("JS_CP_SAT_FALLBACK", "1")) != 0
CP_SAT_SECONDS  = float(os.getenv("JS_CP_SAT_SECONDS", "10"))
CP_SAT_WORKERS  = int(os.getenv("JS_CP_SAT_WORKERS", "1"))

# ======= Output / logging =======
BOARD_SVG_SCALE = int(os.getenv("JS_BOARD_SVG_SCALE", "48"))
LOG_DIR         = os.getenv("JS_LOG_DIR", os.path.join(BASE_DIR, "logs"))


class CFG:
    BOARD_SIZE     = BOARD_SIZE
    REACTOR_OFFSET = REACTOR_OFFSET
    AUX1_OFFSET    = AUX1_OFFSET
    AUX2_OFFSET    = AUX2_OFFSET

    CATALOG_PATH      = CATALOG_PATH
    DEFAULT_SHIP      = DEFAULT_SHIP
    DEFAULT_SHIP_TIER = DEFAULT_SHIP_TIER

    SOLVER_ENGINE = SOLVER_ENGINE

    BACKTRACK_NODE_LIMIT = BACKTRACK_NODE_LIMIT
    BACKTRACK_SECONDS    = BACKTRACK_SECONDS

    CP_SAT_FALLBACK = CP_SAT_FALLBACK
    CP_SAT_SECONDS  = CP_SAT_SECONDS
    CP_SAT_WORKERS  = CP_SAT_WORKERS

    BOARD_SVG_SCALE = BOARD_SVG_SCALE
    LOG_DIR         = LOG_DIR


# legacy convenience
BOARD_SIZE = CFG.BOARD_SIZE

__all__ = ["CFG", "BOARD_SIZE"]
