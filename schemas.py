from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class UserDTO(BaseModel):
    """
    Sparse wire representation of a user.

    Only the fields of the negotiated generation are populated, and unset
    fields are dropped from the serialized body instead of sent as null.
    Fields are read by their camelCase wire names only.
    """

    username: Optional[str] = None
    full_name: Optional[str] = Field(default=None, alias="fullName")
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
