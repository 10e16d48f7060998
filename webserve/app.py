"""aiohttp front door: routes requests into the resolver and reload channel."""
from __future__ import annotations

import asyncio
import logging
import mimetypes
from typing import AsyncIterator

from aiohttp import WSMsgType, web

from .broadcaster import ReloadBroadcaster
from .compose import compose, is_html
from .config import ServeConfig
from .listing import render_listing
from .resolver import ListDirectory, NotFound, resolve
from .watcher import ChangeWatcher

logger = logging.getLogger(__name__)

CONFIG_KEY = web.AppKey("config", ServeConfig)
BROADCASTER_KEY = web.AppKey("broadcaster", ReloadBroadcaster)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


# -------- File watcher --------
async def watcher_ctx(app: web.Application) -> AsyncIterator[None]:
    config = app[CONFIG_KEY]
    watcher = ChangeWatcher(config.root, app[BROADCASTER_KEY], asyncio.get_running_loop())
    watcher.start()
    try:
        yield
    finally:
        watcher.stop()


# -------- Reload channel --------
async def reload_handler(request: web.Request) -> web.Response:
    """Long-poll: answer once the next change event arrives."""

    with request.app[BROADCASTER_KEY].subscribe() as subscription:
        await subscription.wait()
    return web.Response(text="reload")


async def websocket_handler(request: web.Request) -> web.WebSocketResponse:
    ws = web.WebSocketResponse(heartbeat=30.0)
    await ws.prepare(request)

    with request.app[BROADCASTER_KEY].subscribe() as subscription:
        reader = asyncio.ensure_future(_read_until_closed(ws))
        waiter = asyncio.ensure_future(subscription.wait())
        try:
            while True:
                done, _ = await asyncio.wait({reader, waiter}, return_when=asyncio.FIRST_COMPLETED)
                if reader in done or ws.closed:
                    break
                try:
                    await ws.send_str("reload")
                except ConnectionResetError:
                    logger.debug("Reload websocket went away mid-send")
                    break
                waiter = asyncio.ensure_future(subscription.wait())
        finally:
            reader.cancel()
            waiter.cancel()

    return ws


async def _read_until_closed(ws: web.WebSocketResponse) -> None:
    async for msg in ws:
        if msg.type == WSMsgType.ERROR:
            logger.debug("Reload websocket closed with %s", ws.exception())
            break


# -------- HTTP handler --------
async def file_handler(request: web.Request) -> web.StreamResponse:
    config = request.app[CONFIG_KEY]
    resolution = resolve(config.root, request.match_info.get("path", ""), config.spa)

    if isinstance(resolution, NotFound):
        raise web.HTTPNotFound()

    if isinstance(resolution, ListDirectory):
        try:
            listing = await asyncio.to_thread(render_listing, resolution.path, url_prefix=request.path)
        except OSError as exc:
            logger.debug("Directory %s unreadable: %s", resolution.path, exc)
            raise web.HTTPNotFound() from exc
        body, content_type = compose(
            resolution, listing.encode("utf-8"), "text/html", config.watch, config.transport
        )
        return web.Response(body=body, content_type=content_type, charset="utf-8")

    guessed, _ = mimetypes.guess_type(resolution.path.name)
    content_type = guessed or DEFAULT_CONTENT_TYPE
    if not config.watch or not is_html(content_type):
        # Answers 404 itself if the file is gone by the time it is opened.
        return web.FileResponse(resolution.path)

    try:
        data = await asyncio.to_thread(resolution.path.read_bytes)
    except OSError as exc:
        logger.debug("File %s vanished before it was read: %s", resolution.path, exc)
        raise web.HTTPNotFound() from exc

    body, content_type = compose(resolution, data, content_type, config.watch, config.transport)
    return web.Response(body=body, content_type=content_type)


# -------- Application --------
def create_app(config: ServeConfig) -> web.Application:
    app = web.Application()
    app[CONFIG_KEY] = config
    app[BROADCASTER_KEY] = ReloadBroadcaster(config.capacity)

    if config.watch:
        app.router.add_get("/reload", reload_handler)
        app.router.add_get("/__ws", websocket_handler)
        app.cleanup_ctx.append(watcher_ctx)
    app.router.add_get("/{path:.*}", file_handler)
    return app


def run(config: ServeConfig) -> None:
    app = create_app(config)
    logger.info("Serving %s on http://%s", config.root, config.address)
    if config.spa:
        logger.info("SPA mode: unknown paths fall back to index.html")
    web.run_app(
        app,
        host=config.host,
        port=config.port,
        handler_cancellation=True,
        print=None,
    )
