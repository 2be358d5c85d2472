from pydantic import BaseModel, Field
from typing import List, Optional

class SignupRequest(BaseModel):
    email: str = Field(
        ...,
        description="Trimmed email address as submitted",
        example="user@example.com"
    )
    captcha_token: str = Field(
        ...,
        description="Turnstile response token from the signup form"
    )
    client_ip: Optional[str] = Field(
        None,
        description="Client IP forwarded to the verification service",
        example="203.0.113.7"
    )

class SubscribeResponse(BaseModel):
    success: bool = True
    message: str

class ErrorResponse(BaseModel):
    error: str
    codes: Optional[List[str]] = None

class WaitlistSubscriber(BaseModel):
    email: str
    subscribedAt: Optional[str] = None

class WaitlistListResponse(BaseModel):
    count: int
    subscribers: List[WaitlistSubscriber]

    class Config:
        json_schema_extra = {
            "example": {
                "count": 1,
                "subscribers": [
                    {"email": "user@example.com", "subscribedAt": "2025-01-13T03:33:03.123456+00:00"}
                ]
            }
        }
