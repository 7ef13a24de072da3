import io
import restbody


serializer = restbody.JSONSerializer(sort_keys=True, omit_nulls=True)
encoder = restbody.JSONBodyEncoder(
    {"name": "restbody", "features": ["json", "forms"], "homepage": None},
    serializer=serializer,
)

headers = restbody.Headers()
encoder.prepare_headers(headers)
print(headers)

stream = io.BytesIO()
encoder.write_body(stream)
print(stream.getvalue())
