import dataclasses
import datetime
import decimal
import enum
import json
import typing
import uuid
from .models import JSONType

JSONDumpsType = typing.Callable[[JSONType], typing.Union[str, bytes]]


def compact_json_dumps(obj: JSONType) -> str:
    """Function that doesn't add extra whitespace when encoding JSON"""
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


class JSONSerializer:
    """Turns arbitrary Python objects into UTF-8 encoded JSON.

    Objects that the 'json' module doesn't understand are converted
    before encoding:

    - dataclass instances become objects of their fields
    - 'enum.Enum' members become their value
    - 'datetime', 'date' and 'time' become ISO 8601 strings
    - 'Decimal' and 'UUID' become strings
    - sets become arrays
    - anything with a '__json__()' method becomes its return value

    Anything else raises a 'TypeError'.

    The 'sort_keys', 'omit_nulls' and 'omit_empty_collections' options
    apply to every object in the graph, not only the top-level one, and
    hold for a custom 'json_dumps' too. 'ensure_ascii' and 'allow_nan'
    only apply to the built-in encoder.
    Nulls and empty collections are only ever dropped from objects,
    never from arrays.
    """

    def __init__(
        self,
        *,
        sort_keys: bool = False,
        omit_nulls: bool = False,
        omit_empty_collections: bool = False,
        ensure_ascii: bool = False,
        allow_nan: bool = True,
        # Replaces the built-in encoder, receives the converted object.
        json_dumps: typing.Optional[JSONDumpsType] = None,
    ):
        self.sort_keys = sort_keys
        self.omit_nulls = omit_nulls
        self.omit_empty_collections = omit_empty_collections
        self.ensure_ascii = ensure_ascii
        self.allow_nan = allow_nan
        self.json_dumps = json_dumps

        if json_dumps is not None and (ensure_ascii or not allow_nan):
            raise ValueError(
                "'ensure_ascii' and 'allow_nan' can't be applied "
                "to a custom 'json_dumps'"
            )

    def dumps(self, obj: typing.Any) -> bytes:
        value = self.to_jsonable(obj)
        if self.json_dumps is not None:
            data = self.json_dumps(value)
        else:
            data = json.dumps(
                value,
                separators=(",", ":"),
                sort_keys=self.sort_keys,
                ensure_ascii=self.ensure_ascii,
                allow_nan=self.allow_nan,
            )
        if isinstance(data, str):
            data = data.encode("utf-8")
        return data

    def to_jsonable(self, obj: typing.Any) -> JSONType:
        return self._convert(obj, set())

    def _convert(self, obj: typing.Any, seen: typing.Set[int]) -> JSONType:
        # Enums go first as they may also be 'str' or 'int'.
        if isinstance(obj, enum.Enum):
            return self._convert(obj.value, seen)
        if obj is None or isinstance(obj, (str, bool, int, float)):
            return obj
        if isinstance(obj, (datetime.datetime, datetime.date, datetime.time)):
            return obj.isoformat()
        if isinstance(obj, (decimal.Decimal, uuid.UUID)):
            return str(obj)
        if hasattr(obj, "__json__"):
            return self._convert(obj.__json__(), seen)

        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            items: typing.Iterable[typing.Tuple[typing.Any, typing.Any]] = [
                (field.name, getattr(obj, field.name))
                for field in dataclasses.fields(obj)
            ]
        elif isinstance(obj, typing.Mapping):
            items = obj.items()
        elif isinstance(obj, (list, tuple, set, frozenset)):
            with _visiting(obj, seen):
                return [self._convert(x, seen) for x in obj]
        else:
            raise TypeError(
                f"Object of type {type(obj).__name__} is not JSON serializable"
            )

        output: typing.Dict[typing.Any, JSONType] = {}
        with _visiting(obj, seen):
            if self.sort_keys:
                items = sorted(items, key=lambda item: item[0])
            for key, value in items:
                value = self._convert(value, seen)
                if value is None and self.omit_nulls:
                    continue
                if (
                    self.omit_empty_collections
                    and isinstance(value, (list, dict))
                    and not value
                ):
                    continue
                output[key] = value
        return output


class _visiting:
    """Tracks the containers on the current path so that
    circular references are reported instead of recursing forever.
    """

    def __init__(self, obj: typing.Any, seen: typing.Set[int]):
        self.key = id(obj)
        self.seen = seen

    def __enter__(self) -> None:
        if self.key in self.seen:
            raise ValueError("Circular reference detected")
        self.seen.add(self.key)

    def __exit__(self, *_: typing.Any) -> None:
        self.seen.discard(self.key)
