"""
HTTP server for server-rendered pages.

Each `Route` maps a path to a function building the page's element tree. The
tree is rendered once per request and returned as `text/html`; any other path
gets a plain `Not Found`.
"""

import logging
from collections.abc import Callable, Sequence
from typing import NamedTuple

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sprinkle.env import env as envvars
from sprinkle.html import HTMLElement, render
from sprinkle.script import MarshalError

logger = logging.getLogger(__name__)


class Route(NamedTuple):
	path: str
	page: Callable[[], HTMLElement]


class App:
	"""
	Usage:
	    app = App(routes=[Route("/", home)])
	    app.run()

	`app.fastapi` is the underlying ASGI application.
	"""

	routes: list[Route]
	fastapi: FastAPI
	indent: int

	def __init__(self, routes: Sequence[Route] = (), indent: int = 0) -> None:
		paths = [r.path for r in routes]
		if len(set(paths)) != len(paths):
			raise ValueError(f"Duplicate route paths: {paths}")
		for path in paths:
			if not path.startswith("/"):
				raise ValueError(f"Route paths must start with '/', got {path!r}")
		self.routes = list(routes)
		self.indent = indent
		self.fastapi = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
		self.setup()

	def setup(self) -> None:
		for route in self.routes:
			self.fastapi.add_api_route(
				route.path,
				self._endpoint(route),
				methods=["GET"],
				response_class=HTMLResponse,
			)

		@self.fastapi.exception_handler(StarletteHTTPException)
		async def http_exception_handler(  # pyright: ignore[reportUnusedFunction]
			request: Request, exc: StarletteHTTPException
		):
			return PlainTextResponse(
				str(exc.detail), status_code=exc.status_code, headers=exc.headers
			)

	def _endpoint(self, route: Route):
		def endpoint():
			try:
				content = self.render(route)
			except MarshalError:
				logger.exception("Failed to render %s", route.path)
				return PlainTextResponse("Internal Server Error", status_code=500)
			return HTMLResponse(content)

		endpoint.__name__ = f"render_{getattr(route.page, '__name__', 'page')}"
		return endpoint

	def render(self, route: Route) -> str:
		"""Full document for `route`. Markup errors propagate to the caller."""
		tree = route.page()
		content = render(tree, indent=self.indent)
		if tree.tag != "html":
			# Only <html> roots get a doctype from the renderer
			content = "<!DOCTYPE html>" + ("\n" if self.indent else "") + content
		return content

	def render_path(self, path: str) -> str | None:
		"""Render the page registered at `path`, or None if there is none."""
		for route in self.routes:
			if route.path == path:
				return self.render(route)
		return None

	def run(self, host: str | None = None, port: int | None = None) -> None:
		host = host or envvars.host
		port = port if port is not None else envvars.port
		logger.info("Serving %d route(s) on http://%s:%d", len(self.routes), host, port)
		uvicorn.run(self.fastapi, host=host, port=port)
