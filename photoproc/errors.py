"""
Typed failures raised by the pipeline and the deletion entry point.
"""

from typing import Optional


class PhotoprocError(Exception):
    """
    Base error carrying a stable machine-readable code.

    Subclasses define `code` and a default `message`.
    """
    code = 'internal'
    message = 'Internal error'

    def __init__(self, message: Optional[str] = None):
        if message:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {'code': self.code, 'message': self.message}


class Unauthenticated(PhotoprocError):
    code = 'unauthenticated'
    message = 'Must be signed in'


class InvalidArgument(PhotoprocError):
    code = 'invalid-argument'
    message = 'photoId required'


class NotFound(PhotoprocError):
    code = 'not-found'
    message = 'photo not found'


class PermissionDenied(PhotoprocError):
    code = 'permission-denied'
    message = 'Not allowed'


class InternalError(PhotoprocError):
    code = 'internal'
    message = 'Failed to delete image'


class DerivativeError(PhotoprocError):
    """A derivative could not be produced from the original."""
    code = 'processing-failed'
    message = 'Failed to generate derivatives'
