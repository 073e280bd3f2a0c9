"""Enum base for server enums that must tolerate values added after this SDK was released."""

import logging
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ServerEnum(str, Enum):
    """String enum whose unrecognized values decode to the member named ``UNKNOWN``.

    Subclasses must declare an ``UNKNOWN`` member.
    """

    @classmethod
    def _missing_(cls, value: Any) -> "ServerEnum":
        logger.error("enum=<%s>, value=<%s> | unrecognized value, using UNKNOWN", cls.__name__, value)
        return cls["UNKNOWN"]
