"""Application settings read from the environment.

Provider and event-processing configuration lives in ``domain.toml`` and is
owned by Protean; these are the business knobs of the ordering core.
"""

import json
import os
from pathlib import Path

DEFAULT_RETURN_WINDOW_DAYS = 7

DEFAULT_VOUCHERS = {
    "SALE10": {"type": "discount", "rate": 0.10},
    "FREESHIP": {"type": "freeship", "rate": 0.0},
}


def return_window_days() -> int:
    return int(os.getenv("ORDERING_RETURN_WINDOW_DAYS", DEFAULT_RETURN_WINDOW_DAYS))


def media_root() -> Path:
    return Path(os.getenv("ORDERING_MEDIA_ROOT", os.getcwd()))


def voucher_table() -> dict:
    """Voucher code -> rule mapping. ``ORDERING_VOUCHERS`` holds a JSON override."""
    raw = os.getenv("ORDERING_VOUCHERS")
    if not raw:
        return DEFAULT_VOUCHERS
    return json.loads(raw)
