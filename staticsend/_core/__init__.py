from staticsend._core._headers import Headers as Headers
from staticsend._core.models import (
    Request as Request,
    Response as Response,
    SendContext as SendContext,
)

__all__ = ("Headers", "Request", "Response", "SendContext")
