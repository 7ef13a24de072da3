import io
import restbody


encoder = restbody.FormBodyEncoder(
    {"grant_type": "password", "scope": ["read", "write"]}
)

headers = restbody.Headers()
encoder.prepare_headers(headers)
print(headers)

stream = io.BytesIO()
encoder.write_body(stream)
print(stream.getvalue())
