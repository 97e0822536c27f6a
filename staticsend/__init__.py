from staticsend._cache import CacheEntry as CacheEntry, MetadataCache as MetadataCache
from staticsend._core._headers import Headers as Headers
from staticsend._core.models import (
    Request as Request,
    Response as Response,
    SendContext as SendContext,
)
from staticsend._exceptions import (
    ConfigurationError as ConfigurationError,
    ForbiddenPathError as ForbiddenPathError,
    InternalError as InternalError,
    MaliciousPathError as MaliciousPathError,
    NotFoundError as NotFoundError,
    SendError as SendError,
)
from staticsend._options import Options as Options
from staticsend._policies import (
    AlwaysCachePolicy as AlwaysCachePolicy,
    CachePolicy as CachePolicy,
    NoCachePolicy as NoCachePolicy,
    PatternPolicy as PatternPolicy,
    PredicatePolicy as PredicatePolicy,
)
from staticsend._resolve_path import resolve_path as resolve_path
from staticsend._send import send as send
from staticsend._sender import AsyncStaticSender as AsyncStaticSender

__all__ = (
    # Entry points
    "send",
    "resolve_path",
    "AsyncStaticSender",
    "Options",
    ## Models
    "Request",
    "Response",
    "SendContext",
    "Headers",
    ## Cache
    "CacheEntry",
    "MetadataCache",
    "CachePolicy",
    "NoCachePolicy",
    "AlwaysCachePolicy",
    "PatternPolicy",
    "PredicatePolicy",
    ## Errors
    "SendError",
    "MaliciousPathError",
    "ForbiddenPathError",
    "NotFoundError",
    "InternalError",
    "ConfigurationError",
)

__version__ = "0.1.0"
