from beanie import PydanticObjectId as OID
from fastapi import HTTPException


def parse_oid(value: str | OID, label: str = "id") -> OID:
    """ObjectId from a path/body value, 400 when malformed."""
    if isinstance(value, OID):
        return value
    try:
        return OID(value)
    except Exception:
        raise HTTPException(status_code=400, detail=f"Invalid {label} format: {value}")
