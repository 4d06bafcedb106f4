from fastapi import HTTPException, status


class InvalidRequest(HTTPException):
    """Malformed identifier or missing/empty required field."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFound(HTTPException):
    """Record is absent or not owned by the caller."""

    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class PayloadTooLarge(HTTPException):
    def __init__(self, detail: str = "File too large"):
        super().__init__(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=detail)


class IngestionFailed(HTTPException):
    """Unexpected failure while persisting a photo; the cause is only logged."""

    def __init__(self, detail: str = "Failed to upload photo"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
