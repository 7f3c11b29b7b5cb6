import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

# Outer<TypeA, TypeB> with plain coin types; nested generics do not match
POOL_TYPE_PATTERN = re.compile(r"<([^,<>]+),\s*([^,<>]+)>$")


def parse_pool_types(type_string: Optional[str]) -> Optional[Tuple[str, str]]:
    """Extract (type_a, type_b) from a two-parameter generic type string"""

    if not type_string:
        return None

    match = POOL_TYPE_PATTERN.search(type_string)
    if not match:
        return None

    type_a, type_b = match.group(1).strip(), match.group(2).strip()
    if not type_a or not type_b:
        return None
    return type_a, type_b


class CetusPoolParser:
    """Reads Cetus CLMM pool objects returned by sui_getObject/multiGetObjects"""

    POOL_TYPE_MARKER = "::pool::Pool<"
    RESERVE_FIELDS = ("coin_a", "coin_b")

    def is_pool_type(self, object_type: Optional[str]) -> bool:
        return bool(object_type) and self.POOL_TYPE_MARKER in object_type

    def object_type(self, response: Dict[str, Any]) -> Optional[str]:
        data = response.get('data') or {}
        return data.get('type') or (data.get('content') or {}).get('type')

    def parse_types(self, response: Dict[str, Any]) -> Optional[Tuple[str, str]]:
        """Pool coin types from an object response, None if malformed"""

        if not response or response.get('error'):
            return None
        return parse_pool_types(self.object_type(response))

    def parse_pool(self, response: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Parse a pool object into ids, types and raw reserves.

        Returns None for error responses, objects without content, objects
        that are not pools, and pools whose reserves cannot be read.
        """

        if not response or response.get('error'):
            error = (response or {}).get('error') or {}
            logger.warning(
                f"Skipping pool (error): {error.get('code')} {error.get('object_id', '')}".rstrip()
            )
            return None

        data = response.get('data') or {}
        content = data.get('content') or {}
        fields = content.get('fields')
        object_id = data.get('objectId')

        if not content or not fields:
            logger.warning(f"Skipping pool {object_id}: no content")
            return None

        object_type = self.object_type(response)
        if not self.is_pool_type(object_type):
            logger.warning(f"Skipping object {object_id}: not a pool object ({object_type})")
            return None

        types = parse_pool_types(object_type)
        if not types:
            logger.warning(f"Skipping pool {object_id}: malformed type {object_type}")
            return None

        try:
            amount_a = Decimal(str(fields[self.RESERVE_FIELDS[0]]))
            amount_b = Decimal(str(fields[self.RESERVE_FIELDS[1]]))
        except (KeyError, InvalidOperation) as e:
            logger.warning(f"Skipping pool {object_id}: unreadable reserves ({e})")
            return None

        return {
            'pool': object_id,
            'type_a': types[0],
            'type_b': types[1],
            'amount_a': amount_a,
            'amount_b': amount_b
        }
