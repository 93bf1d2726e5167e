"""Flask application exposing stored patches and the chat webhook."""

from __future__ import annotations

import json
import re
from datetime import datetime
from email.utils import format_datetime
from pathlib import Path
from typing import Any, Callable

import httpx
from flask import Flask, Response, current_app, render_template, request
from pydantic import ValidationError

from ..bot import CommandBot, LingrStatus
from ..config import AppConfig
from ..errors import QueryError
from ..logging_conf import get_logger
from ..query import QueryFacade

CALLBACK_PATTERN = re.compile(r"^[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*$")
EXTENSION_KEY = "patchwatch"


def _state() -> dict[str, Any]:
    return current_app.extensions[EXTENSION_KEY]


def _plain(text: str, status: int = 200, charset: bool = False) -> Response:
    mimetype = "text/plain; charset=utf-8" if charset else "text/plain"
    return Response(text, status=status, content_type=mimetype)


def _jsonp(body: str) -> Response:
    callback = request.args.get("callback", "")
    if callback:
        if not CALLBACK_PATTERN.match(callback):
            return _plain("bad callback", status=400)
        body = f"{callback}({body})"
    return Response(body, content_type="application/json")


def create_app(
    config: AppConfig,
    facade: QueryFacade,
    refresh: Callable[[], Any],
    bot: CommandBot,
    http_client: httpx.Client | None = None,
) -> Flask:
    """Build the Flask app; ``refresh`` runs one synchronous scrape cycle."""

    logger = get_logger("web")
    public_dir: Path | None = config.server.public_dir
    app = Flask(
        __name__,
        static_folder=str(public_dir.resolve()) if public_dir else None,
        static_url_path="",
    )
    app.extensions[EXTENSION_KEY] = {
        "config": config,
        "facade": facade,
        "refresh": refresh,
        "bot": bot,
        "http": http_client or httpx.Client(follow_redirects=True, timeout=config.source.timeout),
    }

    @app.template_filter("rfc822")
    def _rfc822(value: datetime) -> str:
        return format_datetime(value)

    @app.errorhandler(QueryError)
    def _query_failed(error: QueryError):
        logger.error("query_failed", error=str(error))
        return _plain(str(error), status=500)

    if public_dir:

        @app.route("/")
        def index():
            return app.send_static_file("index.html")

    @app.route("/patches/")
    def patches_rss():
        state = _state()
        items = state["facade"].recent(request.args.get("count"))
        body = render_template(
            "feed.rss",
            items=items,
            title=state["config"].server.feed_title,
            link=state["config"].source.url,
        )
        return Response(body, content_type="application/rss+xml")

    @app.route("/patches/json")
    def patches_json():
        items = _state()["facade"].recent(request.args.get("count"))
        return _jsonp(json.dumps([item.as_json() for item in items], ensure_ascii=False))

    @app.route("/patches/pull", methods=["GET", "POST"])
    def patches_pull():
        state = _state()
        state["refresh"]()
        return _plain(f"OK: {state['config'].source.url}")

    @app.route("/lingr", methods=["GET", "POST"])
    def lingr_webhook():
        if request.method != "POST":
            return _plain("bad request", status=400)
        payload = request.get_json(force=True, silent=True)
        if not isinstance(payload, dict):
            return _plain("bad request", status=400)
        try:
            status = LingrStatus.model_validate(payload)
        except ValidationError:
            return _plain("bad request", status=400)
        return _plain(_state()["bot"].respond(status), charset=True)

    @app.route("/vimmers")
    def vimmers():
        state = _state()
        url = state["config"].server.vimmers_url
        if not url:
            return _plain("not found", status=404)
        try:
            upstream = state["http"].get(url)
            upstream.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("vimmers_fetch_failed", url=url, error=str(exc))
            return _plain(str(exc), status=500)
        return _jsonp(upstream.text)

    return app


__all__ = ["CALLBACK_PATTERN", "create_app"]
