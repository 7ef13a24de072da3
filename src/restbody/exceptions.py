import typing


class RestBodyError(Exception):
    """Base error type for 'restbody' which carries the
    encapsulated error if this error wraps a different exception.
    """

    def __init__(self, message: str, error: typing.Optional[BaseException] = None):
        super().__init__(message)

        self.message = message
        self.error = error


class BodySerializationError(RestBodyError):
    """Error raised when the request body can't be serialized
    while the request headers are being prepared.
    """


class UnrewindableBodyError(RestBodyError):
    """Error raised when a request body needs to be written again
    but the underlying stream cannot be rewound.
    """
