"""
Command-line interface for the Sprinkle demo server.
"""
# typer relies on function calls used as default values
# pyright: reportCallInDefaultInitializer=false

import logging

import typer
import uvicorn
from rich.console import Console

from sprinkle.demo import create_app
from sprinkle.env import env

cli = typer.Typer(
	name="sprinkle",
	help="Sprinkle - server-rendered pages with inline scripts written in Python",
	no_args_is_help=True,
)


@cli.callback()
def configure() -> None:
	"""Configure logging from SPRINKLE_LOG_LEVEL."""
	logging.basicConfig(
		level=env.log_level,
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)


@cli.command("run")
def run(
	host: str | None = typer.Option(
		None, "--host", help="Host uvicorn binds to (default: SPRINKLE_HOST)"
	),
	port: int | None = typer.Option(
		None, "--port", help="Port uvicorn binds to (default: SPRINKLE_PORT)"
	),
	reload: bool = typer.Option(False, "--reload/--no-reload"),
):
	"""Serve the demo page."""
	console = Console()
	host = host or env.host
	port = port if port is not None else env.port
	console.log(f"Server running at http://{host}:{port}")
	if reload:
		# The reloader needs an import string to rebuild the app in a subprocess
		env.host = host
		env.port = port
		uvicorn.run(
			"sprinkle.demo:create_app",
			factory=True,
			host=host,
			port=port,
			reload=True,
		)
		return
	create_app().run(host=host, port=port)


@cli.command("render")
def render_page(
	path: str = typer.Argument("/", help="Path of the page to render"),
):
	"""Print the rendered document for PATH."""
	app = create_app()
	html = app.render_path(path)
	if html is None:
		console = Console(stderr=True)
		console.log(f"No page at {path}")
		raise typer.Exit(1)
	typer.echo(html)


def main():
	"""Main CLI entry point."""
	try:
		cli()
	except Exception:
		console = Console()
		console.print_exception()
		raise typer.Exit(1) from None


if __name__ == "__main__":
	main()
