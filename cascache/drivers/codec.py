"""Value serialization shared by the network drivers.

Values are stored as JSON text. Anything that fails to decode on read
(e.g. a value written by another application) is returned raw.
"""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def encode(value: Any) -> str:
    """Serialize a value for storage."""
    return json.dumps(value)


def decode(raw: Any) -> Any:
    """Deserialize a stored value, falling back to the raw reply."""
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        logger.debug("Stored value is not JSON, returning raw reply")
        return raw
