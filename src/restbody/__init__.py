from .encoders import BodyEncoder, JSONBodyEncoder, FormBodyEncoder, StreamBodyEncoder
from .exceptions import RestBodyError, BodySerializationError, UnrewindableBodyError
from .models import Headers, NO_BODY
from .serialization import JSONSerializer, compact_json_dumps

__all__ = [
    "BodyEncoder",
    "JSONBodyEncoder",
    "FormBodyEncoder",
    "StreamBodyEncoder",
    "JSONSerializer",
    "compact_json_dumps",
    "Headers",
    "NO_BODY",
    "RestBodyError",
    "BodySerializationError",
    "UnrewindableBodyError",
]

__version__ = "dev"
