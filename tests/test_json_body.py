import io
import pytest
import restbody


class Unserializable:
    pass


def test_json_body_headers_and_body():
    encoder = restbody.JSONBodyEncoder({"a": 1})
    headers = restbody.Headers()
    encoder.prepare_headers(headers)

    assert headers["Content-Type"] == "application/json"
    assert headers["Content-Length"] == "7"
    assert encoder.body == b'{"a":1}'
    assert encoder.is_prepared


def test_json_body_content_length_matches_utf8_bytes():
    encoder = restbody.JSONBodyEncoder({"name": "café"})
    headers = restbody.Headers()
    encoder.prepare_headers(headers)

    assert encoder.body == '{"name":"café"}'.encode("utf-8")
    assert headers["Content-Length"] == str(len(encoder.body))
    assert int(headers["Content-Length"]) == 16


@pytest.mark.parametrize("request_body", [None, restbody.NO_BODY])
def test_absent_request_is_noop(request_body):
    encoder = restbody.JSONBodyEncoder(request_body)
    headers = restbody.Headers()
    encoder.prepare_headers(headers)

    assert list(headers.items()) == []
    assert encoder.body is None
    assert not encoder.is_prepared

    sink = io.BytesIO()
    encoder.write_body(sink)
    assert sink.getvalue() == b""


def test_default_request_is_absent():
    encoder = restbody.JSONBodyEncoder()
    headers = {}
    encoder.prepare_headers(headers)

    assert headers == {}


def test_write_body_before_prepare_is_noop():
    encoder = restbody.JSONBodyEncoder({"a": 1})
    sink = io.BytesIO()
    encoder.write_body(sink)

    assert sink.getvalue() == b""


def test_write_body_without_sink_is_noop():
    encoder = restbody.JSONBodyEncoder({"a": 1})
    encoder.prepare_headers(restbody.Headers())
    encoder.write_body(None)

    assert encoder.body == b'{"a":1}'


def test_write_body_writes_cached_bytes():
    encoder = restbody.JSONBodyEncoder({"hello": ["world", 1, {}]})
    headers = restbody.Headers()
    encoder.prepare_headers(headers)

    sink = io.BytesIO()
    encoder.write_body(sink)

    assert sink.getvalue() == b'{"hello":["world",1,{}]}'
    assert headers["Content-Length"] == "24"


def test_write_body_twice_writes_same_bytes_without_reserializing():
    calls = []

    def json_dumps(obj):
        calls.append(obj)
        return restbody.compact_json_dumps(obj)

    serializer = restbody.JSONSerializer(json_dumps=json_dumps)
    encoder = restbody.JSONBodyEncoder({"a": 1}, serializer=serializer)
    encoder.prepare_headers(restbody.Headers())

    sink = io.BytesIO()
    encoder.write_body(sink)
    encoder.write_body(sink)

    assert sink.getvalue() == b'{"a":1}{"a":1}'
    assert encoder.body == b'{"a":1}'
    assert len(calls) == 1


def test_prepare_headers_twice_reuses_cached_body():
    request = {"a": 1}
    encoder = restbody.JSONBodyEncoder(request)
    encoder.prepare_headers(restbody.Headers())
    body = encoder.body

    request["b"] = 2
    headers = restbody.Headers()
    encoder.prepare_headers(headers)

    assert encoder.body is body
    assert headers["Content-Length"] == "7"


def test_plain_mapping_headers():
    encoder = restbody.JSONBodyEncoder([1, 2, 3])
    headers = {}
    encoder.prepare_headers(headers)

    assert headers == {"Content-Type": "application/json", "Content-Length": "7"}


def test_serialization_failure_raises_and_skips_content_length():
    encoder = restbody.JSONBodyEncoder({"value": Unserializable()})
    headers = restbody.Headers()

    with pytest.raises(restbody.BodySerializationError) as e:
        encoder.prepare_headers(headers)

    assert isinstance(e.value.error, TypeError)
    assert e.value.__cause__ is e.value.error
    assert isinstance(e.value, restbody.RestBodyError)

    # The content-type header isn't rolled back.
    assert headers["Content-Type"] == "application/json"
    assert "Content-Length" not in headers
    assert encoder.body is None

    sink = io.BytesIO()
    encoder.write_body(sink)
    assert sink.getvalue() == b""


def test_io_failure_in_dumps_is_wrapped():
    def json_dumps(obj):
        raise OSError("disk full")

    encoder = restbody.JSONBodyEncoder(
        {"a": 1}, serializer=restbody.JSONSerializer(json_dumps=json_dumps)
    )
    headers = restbody.Headers()

    with pytest.raises(restbody.BodySerializationError) as e:
        encoder.prepare_headers(headers)

    assert isinstance(e.value.error, OSError)
    assert "content-length" not in headers


def test_circular_reference_is_wrapped():
    request = {}
    request["self"] = request
    encoder = restbody.JSONBodyEncoder(request)

    with pytest.raises(restbody.BodySerializationError) as e:
        encoder.prepare_headers(restbody.Headers())

    assert isinstance(e.value.error, ValueError)


def test_write_failure_propagates():
    class BrokenSink:
        def write(self, data):
            raise OSError("connection reset")

    encoder = restbody.JSONBodyEncoder({"a": 1})
    encoder.prepare_headers(restbody.Headers())

    with pytest.raises(OSError):
        encoder.write_body(BrokenSink())


def test_serializer_options_are_applied():
    serializer = restbody.JSONSerializer(
        sort_keys=True, omit_nulls=True, omit_empty_collections=True
    )
    encoder = restbody.JSONBodyEncoder(
        {"b": 1, "a": None, "c": [], "d": "x"}, serializer=serializer
    )
    headers = restbody.Headers()
    encoder.prepare_headers(headers)

    assert encoder.body == b'{"b":1,"d":"x"}'
    assert headers["Content-Length"] == "15"


def test_failed_prepare_serializes_again_on_retry():
    request = {"value": Unserializable()}
    encoder = restbody.JSONBodyEncoder(request)
    headers = restbody.Headers()

    with pytest.raises(restbody.BodySerializationError):
        encoder.prepare_headers(headers)
    assert not encoder.is_prepared

    request["value"] = 1
    encoder.prepare_headers(headers)

    assert encoder.is_prepared
    assert encoder.body == b'{"value":1}'
    assert headers.get_all("Content-Type") == ["application/json", "application/json"]
    assert headers.get_all("Content-Length") == ["11"]
