# app/utils.py
"""Shared utilities: logging setup and the JSON list codec used for the
`features` and `images` columns."""
import os
import json
import logging
from typing import Any, Iterable, List, Optional
from dotenv import load_dotenv

load_dotenv()

def get_logger(name=__name__):
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, level, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("carhub")

def encode_json_list(items: Optional[Iterable[Any]]) -> str:
    return json.dumps(list(items or []), ensure_ascii=False)

def decode_json_list(raw: Optional[str]) -> List[Any]:
    """Decode a serialized list column; missing or malformed text yields []."""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        logger.warning("Could not decode list column value %r", raw[:80])
        return []
    return value if isinstance(value, list) else []

def env_int(name: str, default: int) -> int:
    return int(os.getenv(name, default))
