"""Command line interface for hashdrop."""

import click
import uvicorn
from loguru import logger

from hashdrop import config
from hashdrop.app import create_app
from hashdrop.exceptions import HashDropError
from hashdrop.log import setup_logging
from hashdrop.store import HashStore


file_store_option = click.option(
    "--file-store",
    envvar="HASHDROP_FILE_STORE",
    default=config.DEFAULT_FILE_STORE,
    show_default=True,
    help="Directory to store files in.",
)
tmp_dir_option = click.option(
    "--tmp-dir",
    envvar="HASHDROP_TMP_DIR",
    default=config.DEFAULT_TMP_DIR,
    show_default=True,
    help="Temporary files directory.",
)
url_base_option = click.option(
    "--url-base",
    envvar="HASHDROP_URL_BASE",
    default=config.DEFAULT_URL_BASE,
    show_default=True,
    help="Public URL prefix.",
)
log_level_option = click.option(
    "--log-level",
    envvar="HASHDROP_LOG_LEVEL",
    default=config.DEFAULT_LOG_LEVEL,
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"],
                      case_sensitive=False),
)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="hashdrop")
def main():
    """Content-addressed file drop."""


@main.command()
@click.option("--listen",
              envvar="HASHDROP_LISTEN",
              default=config.DEFAULT_LISTEN,
              show_default=True,
              help="host:port to listen on.")
@file_store_option
@url_base_option
@tmp_dir_option
@click.option("--useragent",
              "user_agent",
              envvar="HASHDROP_USER_AGENT",
              default=config.DEFAULT_USER_AGENT,
              help="User-Agent string for link downloads.")
@click.option("--allow-error-status/--no-allow-error-status",
              envvar="HASHDROP_ALLOW_ERROR_STATUS",
              default=False,
              help="Store non-2xx responses of link downloads.")
@log_level_option
def serve(listen, file_store, url_base, tmp_dir, user_agent,
          allow_error_status, log_level):
    """Serve the /up and /down endpoints."""
    settings = config.Settings(
        listen=listen,
        file_store=file_store,
        url_base=url_base,
        tmp_dir=tmp_dir,
        user_agent=user_agent,
        log_level=log_level,
        allow_error_status=allow_error_status,
    )

    try:
        host, port = settings.address
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--listen")

    setup_logging(settings.log_level)

    app = create_app(settings)
    logger.info("Serving {} on {}:{}", settings.file_store, host, port)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())


@main.command()
@click.argument("paths",
                nargs=-1,
                required=True,
                type=click.Path(exists=True, dir_okay=False))
@file_store_option
@url_base_option
@tmp_dir_option
@log_level_option
def put(paths, file_store, url_base, tmp_dir, log_level):
    """Store local files and print their public URLs."""
    setup_logging(log_level)
    store = HashStore(file_store, tmp_dir)

    for path in paths:
        try:
            address = store.put(open(path, "rb"), path)
        except HashDropError as exc:
            raise click.ClickException("{0}: {1}".format(path, exc.message))

        click.echo(url_base + address.relpath)
