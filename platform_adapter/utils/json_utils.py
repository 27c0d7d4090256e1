import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Union


class EnhancedJSONEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        elif isinstance(obj, (datetime, date)):
            return obj.isoformat()
        elif isinstance(obj, Enum):
            return obj.value
        # Pydantic models (envelopes, read schemas)
        elif hasattr(obj, "model_dump"):
            return obj.model_dump(mode="json")
        return super().default(obj)


def dumps(obj: Any, **kwargs) -> str:
    """JSON dumps with Decimal, datetime, Enum and pydantic support."""
    return json.dumps(obj, cls=EnhancedJSONEncoder, **kwargs)


def loads(s: Union[str, bytes, bytearray], **kwargs) -> Any:
    """Standard JSON loads function."""
    return json.loads(s, **kwargs)


def loads_object(s: Union[str, bytes, bytearray]) -> Dict[str, Any]:
    """
    Decode a JSON document that must be an object.

    Raises:
        ValueError: If the document is not valid JSON or not an object
            (json.JSONDecodeError is a ValueError)
    """
    value = json.loads(s)
    if not isinstance(value, dict):
        raise ValueError(f"Expected a JSON object, got {type(value).__name__}")
    return value
