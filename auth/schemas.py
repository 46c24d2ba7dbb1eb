"""
Pydantic schemas for request/response models in the auth module.
"""

from pydantic import BaseModel


class UserOut(BaseModel):
    """Schema for responses containing a user handle."""
    user_id: str
    message: str
