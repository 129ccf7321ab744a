import os
import logging
from logging.handlers import RotatingFileHandler

# --- CONFIGURATION & LOGGING ---
DATA_DIR = os.getenv("POOL_DATA_DIR", "/data")
LOG_FILE = f"{DATA_DIR}/pool_balance.log"
LOG_LEVEL = os.getenv("POOL_LOG_LEVEL", "INFO").upper()

HOST = os.getenv("POOL_HOST", "0.0.0.0")
PORT = int(os.getenv("POOL_PORT", "5000"))

# Used when a test sheet has no TDS reading
DEFAULT_TDS = float(os.getenv("POOL_DEFAULT_TDS", "1000"))

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

logger = logging.getLogger("PoolBalance")


def init_logging():
    """
    Structured logging to console plus a rotating file under DATA_DIR.
    Safe to call more than once.
    """
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO), format=LOG_FORMAT)

    # Attached to the root logger so every module logger reaches the file
    root = logging.getLogger()
    if any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        return logger

    try:
        if not os.path.exists(DATA_DIR): os.makedirs(DATA_DIR)
        file_handler = RotatingFileHandler(LOG_FILE, maxBytes=1_000_000, backupCount=5)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)
    except OSError as e:
        logger.warning(f"File logging disabled ({DATA_DIR} not writable): {e}")

    return logger
