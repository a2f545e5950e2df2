"""
Shared Pydantic types for API params.

- RefreshFlag: "1" / "true" / "yes" -> True, anything else -> False
"""

from typing import Annotated, Any

from pydantic import BeforeValidator

TRUTHY = {'1', 'true', 'yes', 'on'}


def coerce_flag(v: Any) -> bool:
    """
    Interpret a query-string flag.

    Examples:
        "1" -> True
        "TRUE" -> True
        "0" -> False
        None -> False
    """
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    return str(v).strip().lower() in TRUTHY


RefreshFlag = Annotated[bool, BeforeValidator(coerce_flag)]
