from typing import Any, Dict, Optional


def success_response(message: str, data: Optional[Any] = None) -> Dict[str, Any]:
    """Wrap a handler result in the shared ``{status, message, data}`` envelope."""
    return {"status": "success", "message": message, "data": data}
