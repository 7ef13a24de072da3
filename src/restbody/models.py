import typing


JSONType = typing.Union[
    typing.Mapping[typing.Any, typing.Any],
    typing.Sequence[typing.Any],
    int,
    bool,
    str,
    float,
    None,
]


class _NoBody(object):
    def __bool__(self) -> bool:
        # We want this sentinel to evaluate as 'falsy'
        return False

    def __repr__(self) -> str:
        return "restbody.NO_BODY"

    __str__ = __repr__

    def __eq__(self, other: typing.Any) -> bool:
        return other is NO_BODY and self is NO_BODY

    def __ne__(self, other: typing.Any) -> bool:
        return other is not NO_BODY or self is not NO_BODY

    def __hash__(self) -> int:
        return id(self)


NO_BODY = _NoBody()

T = typing.TypeVar("T")
BodyType = typing.Union[T, _NoBody, None]


def is_absent(value: typing.Any) -> bool:
    """Returns whether a pending request body is absent. Both the
    explicit 'NO_BODY' sentinel and 'None' mean there's nothing to send.
    """
    return value is NO_BODY or value is None


KT = typing.TypeVar("KT")
VT = typing.TypeVar("VT")
NormKT = typing.TypeVar("NormKT")
NormVT = typing.TypeVar("NormVT")
MultiMappingType = typing.Union[
    typing.Mapping[KT, VT], typing.Sequence[typing.Tuple[KT, VT]]
]


class MultiMapping(typing.Generic[KT, VT, NormKT, NormVT]):
    def __init__(self, values: MultiMappingType = ()):
        self._internal: typing.Dict[
            NormKT, typing.List[typing.Tuple[NormKT, NormVT]]
        ] = {}
        if values:
            self.extend(values)

    def get_one(
        self, key: KT, default: typing.Optional[NormVT] = None
    ) -> typing.Optional[NormVT]:
        try:
            return self._internal[self._normalize_key(key)][0][1]
        except (KeyError, IndexError):
            return default

    get = get_one

    def get_all(self, key: KT) -> typing.List[NormVT]:
        try:
            return [x[1] for x in self._internal[self._normalize_key(key)]]
        except KeyError:
            return []

    def add(self, key: KT, value: VT) -> None:
        key = self._normalize_key(key)
        self._internal.setdefault(key, []).append((key, self._normalize_value(value)))

    def extend(self, items: MultiMappingType) -> None:
        for k, v in items.items() if hasattr(items, "items") else items:
            self.add(k, v)

    def items(self) -> typing.Iterable[typing.Tuple[NormKT, NormVT]]:
        for items in self._internal.values():
            for k, v in items:
                yield k, v

    def __contains__(self, item: KT) -> bool:
        return bool(self._internal.get(self._normalize_key(item), None))

    def __getitem__(self, item: KT) -> VT:
        try:
            return self._internal[self._normalize_key(item)][0][1]
        except (KeyError, IndexError):
            raise KeyError(item) from None

    def __setitem__(self, key: KT, value: VT):
        key = self._normalize_key(key)
        self._internal[key] = [(key, self._normalize_value(value))]

    def __delitem__(self, key: KT) -> None:
        self._internal.pop(self._normalize_key(key), None)

    def __len__(self) -> int:
        return sum(len(items) for items in self._internal.values())

    def _normalize_key(self, key: KT) -> NormKT:
        return key

    def _normalize_value(self, value: VT) -> NormVT:
        return value


class Headers(
    MultiMapping[
        typing.Union[str, bytes],
        typing.Optional[typing.Union[str, bytes]],
        str,
        typing.Optional[str],
    ]
):
    """Case-insensitive set of outgoing HTTP headers. Keys are
    lower-cased and 'bytes' keys and values are decoded as UTF-8.
    """

    def _normalize_key(self, key: KT) -> NormKT:
        if isinstance(key, bytes):
            key = key.decode("utf-8")
        return key.lower()

    def _normalize_value(self, value: VT) -> NormVT:
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def __repr__(self) -> str:
        # Switches to list-of-tuple mode when multiple
        # values for one key are detected.
        if any(len(x) > 1 for x in self._internal.values()):
            internal_repr = repr([(k, v) for k, v in self.items()])
        else:
            # Note the unpacking within (k, v),
            internal_repr = repr({k: v for (k, v), in self._internal.values()})
        return f"<Headers {internal_repr}>"

    __str__ = __repr__


def add_header(headers: typing.Any, name: str, value: str) -> None:
    """Adds a header to either a 'Headers' like object with an
    'add()' method or to a plain mutable mapping.
    """
    if hasattr(headers, "add"):
        headers.add(name, value)
    else:
        headers[name] = value
