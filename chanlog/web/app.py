from __future__ import annotations

from urllib.parse import quote

from flask import Flask, Response, request

from ..core.config import ConfigSource
from .router import HttpRequest, LogRouter


def create_app(config_source: ConfigSource) -> Flask:
    app = Flask(__name__)
    router = LogRouter(config_source)
    app.extensions["chanlog_router"] = router

    @app.route("/", defaults={"path": ""})
    @app.route("/<path:path>")
    def dispatch(path: str):
        req = HttpRequest(
            # werkzeug has already decoded the path; the router decodes it itself
            path=quote(request.path),
            method=request.method,
            headers=dict(request.headers),
        )
        res = router.handle(req)
        out = Response(res.body, status=res.status)
        if res.headers:
            out.headers.update(res.headers)
        else:
            out.headers.pop("Content-Type", None)
        return out

    return app
