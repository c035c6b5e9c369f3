"""
Header sanitization for upstream-bound requests.
"""

from typing import Dict, Iterable, Mapping, Sequence, Tuple, Union

HeaderValue = Union[str, Sequence[str]]
HeaderInput = Union[Mapping[str, HeaderValue], Iterable[Tuple[str, str]]]

REQUEST_ID_HEADER = "x-request-id"
UNKNOWN_REQUEST_ID = "unknown"

# Headers invalid once the request is re-issued, or that leak client
# fingerprinting data to the backend.
DENIED_HEADERS = frozenset({
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "proxy-connection",
    "te",
    "trailer",
    "trailers",
    "transfer-encoding",
    "upgrade",
    "content-length",
    "accept-encoding",
    "accept-language",
    "referer",
    "origin",
})

DENIED_PREFIXES = ("sec-fetch-",)


def is_denied(name: str) -> bool:
    lowered = name.lower()
    return lowered in DENIED_HEADERS or lowered.startswith(DENIED_PREFIXES)


def _iter_pairs(headers: HeaderInput) -> Iterable[Tuple[str, str]]:
    items = headers.items() if isinstance(headers, Mapping) else headers
    for name, value in items:
        if value is None:
            continue
        if isinstance(value, (str, bytes)):
            yield name, value.decode("latin-1") if isinstance(value, bytes) else value
        else:
            for item in value:
                yield name, item


class HeaderSanitizer:
    """Builds the header set that is legal to send to a backend."""

    def __init__(self, request_id_header: str = REQUEST_ID_HEADER, unknown_request_id: str = UNKNOWN_REQUEST_ID):
        self.request_id_header = request_id_header.lower()
        self.unknown_request_id = unknown_request_id

    def sanitize(self, headers: HeaderInput, target_host: str) -> Dict[str, str]:
        """Return lower-cased, single-valued headers for ``target_host``.

        ``headers`` is either a mapping whose values are strings or lists of
        strings, or an iterable of ``(name, value)`` pairs in which a name may
        repeat. Repeated values are joined with ``", "``.
        """
        collected: Dict[str, list] = {}
        for name, value in _iter_pairs(headers):
            key = name.lower()
            if is_denied(key):
                continue
            collected.setdefault(key, []).append(value)

        sanitized = {key: ", ".join(values) for key, values in collected.items()}

        if not sanitized.get(self.request_id_header):
            sanitized[self.request_id_header] = self.unknown_request_id

        sanitized["host"] = target_host
        return sanitized
