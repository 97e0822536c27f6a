import logging

from staticsend import Options
from staticsend.asgi import StaticFiles

logging.basicConfig(level=logging.DEBUG)

# Serve ./public, answering "/" with index.html, trying ".html" for extension-less
# paths and keeping metadata for stylesheets and scripts in memory.
#
# Run with any ASGI server, e.g. `uvicorn examples.asgi_app:app`.
app = StaticFiles(
    Options(
        root="public",
        index="index.html",
        extensions=["html"],
        max_age=3_600_000,
        cache=r"\.(css|js)$",
    )
)
