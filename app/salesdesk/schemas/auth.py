from pydantic import BaseModel, EmailStr


class LoginRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "jane@example.com",
                "password": "Secret123",
            }
        }
    }

    email: EmailStr
    password: str


class UserProfile(BaseModel):
    id: int
    name: str
    email: str
    role: str
    status: str
    pos_ids: list[int]


class TokenResponse(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "access_token": "<jwt>",
                "token_type": "bearer",
                "user": {
                    "id": 1,
                    "name": "Jane",
                    "email": "jane@example.com",
                    "role": "USER",
                    "status": "active",
                    "pos_ids": [3],
                },
                "trace_id": "trace-123",
            }
        }
    }

    access_token: str
    token_type: str = "bearer"
    user: UserProfile
    trace_id: str


class VerifyResponse(BaseModel):
    valid: bool = True
    user: UserProfile
    trace_id: str
