"""
Domain errors raised by the service layer.

Each error is an HTTPException so FastAPI maps it to its status code; the
handler registered in storefront.main renders them as {"success": false, "errors": ...}.
"""
from fastapi import HTTPException, status

AUTHENTICATE_MESSAGE = "Please authenticate using a valid token"


class StorefrontError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Request failed"

    def __init__(self, detail=None):
        super().__init__(status_code=self.status_code, detail=detail or self.message)


class DuplicateUser(StorefrontError):
    message = "existing user found with same email address"


class UnknownUser(StorefrontError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Wrong email"


class BadCredentials(StorefrontError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Incorrect password"


class MissingToken(StorefrontError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = AUTHENTICATE_MESSAGE

    def __init__(self, detail=None):
        super().__init__(detail)
        self.headers = {"WWW-Authenticate": "Bearer"}


class InvalidToken(MissingToken):
    pass


class NotFound(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class ProductNotFound(NotFound):
    message = "Product not found"


class UnsupportedImage(StorefrontError):
    message = "Invalid image file"


class UpstreamUploadFailure(StorefrontError):
    status_code = status.HTTP_502_BAD_GATEWAY
    message = "Image upload failed"
