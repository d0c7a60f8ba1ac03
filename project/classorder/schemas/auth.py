# classorder/schemas/auth.py

from typing import Optional
from pydantic import BaseModel

class LoginRequest(BaseModel):
    password: Optional[str] = None
