from fastapi import HTTPException, status


class InvalidFeedFilter(HTTPException):
    """Exception raised when a feed filter value is not recognised"""

    def __init__(self, field: str, value: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid value '{value}' for '{field}'"
        )


class FeedTimeout(HTTPException):
    """Exception raised when the feed takes longer than the configured timeout"""

    def __init__(self, timeout: float):
        super().__init__(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail=f"Activity feed not computed within {timeout:g}s"
        )
