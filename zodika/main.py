# zodika/main.py
from __future__ import annotations

import logging
import os
import traceback
from time import perf_counter
from typing import Any, Dict, Mapping, Optional, Union

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from zodika.api.routes import api as _routes_bp
from zodika.core.constants import ASPECT_NAMES, SUPPORTED_LANGS
from zodika.core.orbs import get_orb_table
from zodika.core.texts import CorpusUnavailableError, TextResolver, default_resolver
from zodika.utils.config import load_config
from zodika.utils.metrics import GAUGE_APP_UP, MET_REQUESTS, REQ_LATENCY, seed
from zodika.version import VERSION

_SEEDED_ROUTES = (
    "/", "/health",
    "/api/health", "/api/config",
    "/api/aspects/report", "/api/aspects/detect",
    "/metrics",
)


# ───────────────────────── helpers: logging & errors ─────────────────────────
def _configure_logging(app: Flask) -> None:
    gerr = logging.getLogger("gunicorn.error")
    if gerr.handlers:
        app.logger.handlers = gerr.handlers
        app.logger.setLevel(gerr.level)
        logging.getLogger("zodika").handlers = gerr.handlers
        logging.getLogger("zodika").setLevel(gerr.level)
    else:
        logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))


def _register_errors(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        app.logger.warning("HTTP %s at %s %s: %s", e.code, request.method, request.path, e.description)
        return jsonify(
            ok=False,
            error="http_error",
            code=e.code,
            name=e.name,
            message=e.description,
            path=request.path,
        ), e.code

    @app.errorhandler(Exception)
    def _any(e: Exception):
        tb = traceback.format_exc()
        app.logger.error("UNHANDLED %s at %s %s\n%s", type(e).__name__, request.method, request.path, tb)
        return jsonify(
            ok=False,
            error="internal_error",
            type=type(e).__name__,
            message=str(e),
            path=request.path,
        ), 500


# ───────────────────────── health & utils ─────────────────────────
def _register_health(app: Flask) -> None:
    @app.route("/", methods=["GET"])
    def root():
        return jsonify(ok=True, service="zodika", health="/health"), 200

    @app.route("/health", methods=["GET"])
    @app.route("/healthz", methods=["GET"])
    def health():
        return jsonify(ok=True, status="ok"), 200


def _metrics_auth_ok() -> bool:
    auth = request.authorization
    user = os.getenv("METRICS_USER", "")
    pw = os.getenv("METRICS_PASS", "")
    return bool(
        auth and auth.type == "basic" and auth.username == user and auth.password == pw and user and pw
    )


def _warm_resolvers(app: Flask) -> None:
    """Load each language's corpus at boot; a failure is logged here and answered with 503 per request."""
    paths = app.cfg.texts.paths  # type: ignore[attr-defined]
    for lang in SUPPORTED_LANGS:
        if lang in app.resolvers:  # type: ignore[attr-defined]
            continue
        try:
            res = default_resolver(paths.get(lang), lang)
        except CorpusUnavailableError as e:
            app.logger.error("aspect texts for %s not loaded at startup (%s); those reports will return 503", lang, e)
            continue
        app.logger.info("%s aspect texts ready: %d pairs, version %s", lang, len(res), res.version)


def _injected_resolvers(
    resolver: Union[TextResolver, Mapping[str, TextResolver], None],
) -> Dict[str, TextResolver]:
    """A single resolver serves every language; a mapping pins only the languages it names."""
    if resolver is None:
        return {}
    if isinstance(resolver, TextResolver):
        return {lang: resolver for lang in SUPPORTED_LANGS}
    return dict(resolver)


# ───────────────────────── app factory ─────────────────────────
def create_app(
    cfg: Optional[Any] = None,
    resolver: Union[TextResolver, Mapping[str, TextResolver], None] = None,
) -> Flask:
    """
    `cfg` defaults to load_config(). `resolver` pins text corpora: one
    TextResolver for all languages, or a {lang: TextResolver} mapping (tests
    inject these). Languages left unpinned use the cached corpus from
    cfg.texts.paths, falling back to the bundled file for that language.
    """
    app = Flask(__name__)
    app.json.sort_keys = False  # type: ignore[attr-defined]
    app.json.ensure_ascii = False  # type: ignore[attr-defined]
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)  # type: ignore

    _configure_logging(app)

    app.cfg = cfg if cfg is not None else load_config()  # type: ignore[attr-defined]
    app.resolvers = _injected_resolvers(resolver)  # type: ignore[attr-defined]

    # fail fast on a bad orb table name in config
    orbs = get_orb_table(app.cfg.orbs.table, app.cfg.orbs.get("overrides") or None)  # type: ignore[attr-defined]

    seed(_SEEDED_ROUTES, ASPECT_NAMES)

    @app.before_request
    def _before():
        p = request.path or ""
        if p.startswith("/api/") or p in ("/", "/health", "/healthz", "/metrics"):
            MET_REQUESTS.labels(route=p).inc()
            request._t0 = perf_counter()  # type: ignore[attr-defined]

    @app.after_request
    def _after(resp):
        p = request.path or ""
        t0 = getattr(request, "_t0", None)
        if t0 is not None and p != "/metrics":
            REQ_LATENCY.labels(route=p).observe(perf_counter() - t0)
        return resp

    _register_health(app)
    _register_errors(app)
    app.register_blueprint(_routes_bp)

    @app.get("/favicon.ico")
    def _noop_favicon():
        return ("", 204)

    # /metrics (Basic Auth)
    @app.route("/metrics", methods=["GET"])
    def metrics_endpoint():
        if not _metrics_auth_ok():
            return Response("Unauthorized", 401, {"WWW-Authenticate": 'Basic realm="metrics"'})
        GAUGE_APP_UP.set(1.0)
        data = generate_latest(REGISTRY)
        return Response(data, mimetype=CONTENT_TYPE_LATEST)

    _warm_resolvers(app)

    # CORS for browser UIs
    allowed_origin = os.environ.get("CORS_ALLOW_ORIGIN") or "*"
    CORS(
        app,
        resources={r"/.*": {"origins": allowed_origin}},
        supports_credentials=False,
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=600,
    )

    app.logger.info(
        "App initialized; version=%s, orb_table=%s, report_limit=%s, lang=%s",
        VERSION, orbs.name, app.cfg.report.limit, app.cfg.report.lang,  # type: ignore[attr-defined]
    )
    return app


# ───────────────────────── app instance ─────────────────────────
app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
