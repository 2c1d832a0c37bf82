"""Classify storage identifiers and compute the origin URL they resolve against.

Two shapes are recognized:

* pair form ``<objectid>/<objectid>`` (two 24-character hex object ids),
  served by the public pair origin;
* path form, anything else, served by the path origin behind basic auth.
  Every path segment is validated before any I/O happens.
"""
import re
from dataclasses import dataclass
from typing import Literal
from storage_resolver.core.errors import ConfigurationError, InvalidIdentifierError, NotFoundError
from storage_resolver.modules.storage.schemas import OriginConfig

OBJECT_ID_RE = re.compile(r"[0-9a-fA-F]{24}")
FORBIDDEN_CHARS = frozenset('/:*?#%&<>\\')

IdentifierForm = Literal["pair", "path"]

@dataclass(frozen=True)
class StorageTarget:
    unique: str
    form: IdentifierForm
    url: str
    auth: bool


def is_object_id(val: str) -> bool:
    return OBJECT_ID_RE.fullmatch(val) is not None


def is_pair(segments: list[str]) -> bool:
    return len(segments) == 2 and all(is_object_id(s) for s in segments)


def valid_segment(segment: str) -> bool:
    if not segment or segment.strip() != segment:
        return False
    if segment.startswith("."):
        return False
    return not any(c in FORBIDDEN_CHARS for c in segment)


def classify(val: str, origins: OriginConfig) -> StorageTarget:
    """Resolve ``val`` to the origin URL it must be fetched from.

    Raises ``ConfigurationError`` when the pair origin is missing (or the
    path origin has no credentials) and ``NotFoundError`` when the path
    origin is missing or a path segment is invalid.
    """
    segments = val.split("/")
    if is_pair(segments):
        if not origins.pair_origin:
            raise ConfigurationError("storage origin is required")
        return StorageTarget(unique=val, form="pair", url=f"{origins.pair_origin}/{val}/", auth=False)

    if not origins.path_origin:
        raise NotFoundError()
    for segment in segments:
        if not valid_segment(segment):
            raise InvalidIdentifierError()
    require_credentials(origins)
    return StorageTarget(unique=val, form="path", url=f"{origins.path_origin}/{val}", auth=True)


def require_credentials(origins: OriginConfig) -> tuple[str, str]:
    if not origins.username:
        raise ConfigurationError("storage username is required")
    if not origins.password:
        raise ConfigurationError("storage password is required")
    return origins.username, origins.password
