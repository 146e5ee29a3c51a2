from pydantic import BaseModel


class ApiErrorResponse(BaseModel):
    code: str
    message: str
    details: dict | None = None
    trace_id: str | None = None


class ApiValidationErrorItem(BaseModel):
    field: str | None = None
    message: str
    type: str
    loc: list[str | int] | None = None
    input: object | None = None
    ctx: dict | None = None


class ApiValidationErrorDetails(BaseModel):
    errors: list[ApiValidationErrorItem]


class ApiValidationErrorResponse(ApiErrorResponse):
    details: ApiValidationErrorDetails | dict | None = None


def error_responses(*status_codes: int) -> dict[int, dict]:
    descriptions = {
        400: ("Validation error or duplicate entry", ApiValidationErrorResponse),
        401: ("Missing or invalid token", ApiErrorResponse),
        403: ("Permission denied", ApiErrorResponse),
        404: ("Resource not found", ApiErrorResponse),
        409: ("Reference data conflict", ApiErrorResponse),
        500: ("Attachment storage failure", ApiErrorResponse),
    }
    return {
        code: {"description": descriptions[code][0], "model": descriptions[code][1]}
        for code in status_codes
    }
