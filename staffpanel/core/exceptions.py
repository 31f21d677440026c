from fastapi import HTTPException, status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def to_http(self) -> HTTPException:
        if self.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
            return HTTPException(status_code=self.status_code, detail="Internal server error")
        return HTTPException(status_code=self.status_code, detail=self.message)


def not_found(what: str) -> ServiceError:
    return ServiceError(f"{what} not found", status.HTTP_404_NOT_FOUND)


def bad_request(message: str) -> ServiceError:
    return ServiceError(message, status.HTTP_400_BAD_REQUEST)


def forbidden(message: str = "Forbidden") -> ServiceError:
    return ServiceError(message, status.HTTP_403_FORBIDDEN)
