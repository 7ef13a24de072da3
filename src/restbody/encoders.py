import io
import logging
import typing
from .exceptions import BodySerializationError, UnrewindableBodyError
from .models import NO_BODY, BodyType, add_header, is_absent
from .serialization import JSONSerializer
from .utils import CHUNK_SIZE, guess_content_type, urlencode_bytes

logger = logging.getLogger(__name__)

StrOrInt = typing.Union[str, int]
FormType = typing.Union[
    typing.Sequence[typing.Tuple[str, typing.Optional[StrOrInt]]],
    typing.Mapping[
        str,
        typing.Optional[typing.Union[StrOrInt, typing.Sequence[StrOrInt]]],
    ],
]


class BodyEncoder:
    """Represents a request body that's attached to a request before
    it's sent. The REST client calls 'prepare_headers()' before opening
    the connection and 'write_body()' once the output stream is available.

    Encoders that buffer their payload compute it exactly once, during
    'prepare_headers()', and hand the same bytes to every 'write_body()'.
    Calling 'write_body()' on an encoder that was never prepared is a no-op.
    """

    content_type: typing.Optional[str] = None

    def __init__(self) -> None:
        self._body: typing.Optional[bytes] = None

    @property
    def body(self) -> typing.Optional[bytes]:
        """The cached encoded body, 'None' until the headers are prepared."""
        return self._body

    @property
    def is_prepared(self) -> bool:
        return self._body is not None

    def prepare_headers(self, headers: typing.Any) -> None:
        raise NotImplementedError()

    def write_body(self, stream: typing.Optional[typing.BinaryIO]) -> None:
        if self._body is not None and stream is not None:
            stream.write(self._body)

    def _set_content_length(self, headers: typing.Any, body: bytes) -> None:
        add_header(headers, "Content-Length", str(len(body)))
        logger.debug(
            "Prepared %s body of %d bytes", self.content_type, len(body),
        )


class JSONBodyEncoder(BodyEncoder):
    """Serializes an object into JSON and sends it with
    'Content-Type: application/json'.
    """

    content_type = "application/json"

    def __init__(
        self,
        request: BodyType[typing.Any] = NO_BODY,
        *,
        serializer: typing.Optional[JSONSerializer] = None,
    ):
        super().__init__()
        self.request = request
        self.serializer = serializer or JSONSerializer()

    def prepare_headers(self, headers: typing.Any) -> None:
        if is_absent(self.request):
            return

        add_header(headers, "Content-Type", self.content_type)
        self._set_content_length(headers, self._encode_json())

    def _encode_json(self) -> bytes:
        if self._body is None:
            try:
                body = self.serializer.dumps(self.request)
            except (TypeError, ValueError, OSError, RecursionError) as e:
                logger.debug("Failed to serialize request body", exc_info=True)
                raise BodySerializationError(
                    f"Unable to serialize request body to JSON: {e}", error=e
                ) from e
            self._body = body
        return self._body


class FormBodyEncoder(BodyEncoder):
    """Implements application/x-www-form-urlencoded as a body encoder"""

    content_type = "application/x-www-form-urlencoded"

    def __init__(self, form: BodyType[FormType] = NO_BODY):
        super().__init__()
        self.form = form

    def prepare_headers(self, headers: typing.Any) -> None:
        if is_absent(self.form):
            return

        add_header(headers, "Content-Type", self.content_type)
        self._set_content_length(headers, self._encode_form())

    def _encode_form(self) -> bytes:
        if self._body is None:
            form = self.form
            output: typing.List[bytes] = []
            for k, vs in form.items() if hasattr(form, "items") else form:
                if isinstance(k, bytes):
                    k = k.decode("utf-8")
                if isinstance(vs, (str, bytes)) or not hasattr(vs, "__iter__"):
                    vs = (vs,)
                for v in vs:
                    if v is None:
                        continue
                    if isinstance(v, bytes):
                        v = v.decode("utf-8")
                    output.append(urlencode_bytes(k) + b"=" + urlencode_bytes(str(v)))

            self._body = b"&".join(output)

        return self._body


class StreamBodyEncoder(BodyEncoder):
    """Sends the contents of a binary file-like object. Nothing is buffered
    so 'body' stays 'None'. When the file-like object is seekable we take
    down the starting position via '.tell()' so the 'Content-Length' can be
    calculated and the body can be written more than once.
    """

    def __init__(
        self,
        stream: BodyType[typing.BinaryIO] = NO_BODY,
        content_type: typing.Optional[str] = None,
    ):
        super().__init__()
        self.stream = stream
        self.content_type = content_type

        # Initial location of the file pointer before data
        # transmission starts.
        self._fp_begin: typing.Optional[int] = None
        self._prepared = False
        self._written = False

    @property
    def is_prepared(self) -> bool:
        return self._prepared

    @property
    def seekable(self) -> bool:
        fp = self.stream
        try:
            return bool(fp.seekable()) if hasattr(fp, "seekable") else False
        except (OSError, ValueError):
            return False

    def prepare_headers(self, headers: typing.Any) -> None:
        if is_absent(self.stream):
            return

        if self.content_type is None:
            self.content_type = self._sniff_content_type()
        add_header(headers, "Content-Type", self.content_type)

        if self.seekable:
            fp_begin = self._get_fp_begin()
            self.stream.seek(0, io.SEEK_END)
            fp_end = self.stream.tell()
            self.stream.seek(fp_begin, io.SEEK_SET)
            add_header(headers, "Content-Length", str(fp_end - fp_begin))
            logger.debug(
                "Prepared %s stream body of %d bytes",
                self.content_type,
                fp_end - fp_begin,
            )
        else:
            logger.debug(
                "Prepared %s stream body of unknown length", self.content_type
            )
        self._prepared = True

    def write_body(self, stream: typing.Optional[typing.BinaryIO]) -> None:
        if not self._prepared or stream is None:
            return

        if self.seekable:
            self.stream.seek(self._get_fp_begin(), io.SEEK_SET)
        elif self._written:
            raise UnrewindableBodyError(
                "Request body stream has already been written and can't be rewound"
            )

        self._written = True
        data = self.stream.read(CHUNK_SIZE)
        while data:
            stream.write(data)
            data = self.stream.read(CHUNK_SIZE)

    def _sniff_content_type(self) -> str:
        name = getattr(self.stream, "name", None)
        if not isinstance(name, str):
            name = None
        if not self.seekable:
            return guess_content_type(b"", name)

        fp_begin = self._get_fp_begin()
        data = self.stream.read(CHUNK_SIZE)
        self.stream.seek(fp_begin, io.SEEK_SET)
        return guess_content_type(data, name)

    def _get_fp_begin(self) -> int:
        if self._fp_begin is None:
            self._fp_begin = self.stream.tell()
        return self._fp_begin
