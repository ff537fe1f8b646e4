# src/results.py
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ValidationError

from config import settings


class ActionResult(BaseModel):
    """Envelope returned by every mutation action.

    Either ``success`` is true and ``data`` holds the written rows, or it is
    false and ``errors`` maps a field name (or ``"form"``) to messages.
    """
    success: bool
    data: Optional[Union[Dict[str, Any], List[Dict[str, Any]]]] = None
    errors: Optional[Dict[str, List[str]]] = None

    @classmethod
    def ok(cls, data: Union[Dict[str, Any], List[Dict[str, Any]]]) -> "ActionResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, errors: Dict[str, List[str]]) -> "ActionResult":
        return cls(success=False, errors=errors)

    @classmethod
    def field_error(cls, field: str, message: str) -> "ActionResult":
        return cls(success=False, errors={field: [message]})

    @classmethod
    def form_error(cls, message: str) -> "ActionResult":
        return cls(success=False, errors={"form": [message]})


def _clean_message(message: str) -> str:
    # pydantic prefixes messages raised from validators
    for prefix in ("Value error, ", "Assertion failed, "):
        if message.startswith(prefix):
            return message[len(prefix):]
    return message


def flatten_validation_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """Group pydantic errors by their top-level field."""
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        field = str(loc[0]) if loc else "form"
        errors.setdefault(field, []).append(_clean_message(error.get("msg", "Invalid value")))
    return errors


def check_record_id(value: int, message: str) -> int:
    """Reject ids that cannot name a row; used by the input schemas."""
    if not 1 <= value <= settings.MAX_RECORD_ID:
        raise ValueError(message)
    return value
