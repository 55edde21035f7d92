import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import typer

from . import __version__
from .android import AndroidUploadOptions, list_android_mappings, upload_android_mapping
from .constants import REALM_ENV_VAR, TOKEN_ENV_VAR
from .errors import UserFriendlyError
from .http_client import BackendError
from .ios import DsymUploadOptions, list_dsyms, upload_dsyms
from .logger import create_logger
from .reporting import build_run_summary, write_json_summary
from .sourcemaps import (
    InjectOptions,
    UploadOptions,
    list_source_maps,
    run_injection,
    run_upload,
)
from .spinner import Spinner

INJECT_DESCRIPTION = """\
Inject a code snippet into your JavaScript bundles to enable automatic source
mapping of your application's JavaScript errors.

Before running this command: verify your production build tool is configured
to generate source maps, run the production build, and check that the
JavaScript bundles and source maps were emitted to the same output directory.

Pass the build output folder as --directory. JavaScript files (.js, .cjs, .mjs)
and source map files (.js.map, .cjs.map, .mjs.map) are located recursively.
When a JavaScript file has a source map, a snippet carrying its sourceMapId is
injected into the JavaScript file.

Afterwards, run "sourcemaps upload" and deploy the injected JavaScript files.
"""

UPLOAD_DESCRIPTION = """\
Upload the source map files in --directory. Each file is stored under the
sourceMapId computed from its contents, matching the id injected by
"sourcemaps inject".
"""

LIST_DESCRIPTION = """\
List the metadata of previously uploaded source map files.
"""

ANDROID_UPLOAD_DESCRIPTION = """\
Upload an Android ProGuard/R8 mapping file (.txt or .gz). Provide the
application ID and version code of the app, and optionally a UUID that
identifies the build.
"""

ANDROID_LIST_DESCRIPTION = """\
List the metadata of the mapping files uploaded for an application. The
backend returns the most recent uploads first.
"""

IOS_UPLOAD_DESCRIPTION = """\
Upload zipped dSYMs. --path is a .dSYM.zip or .dSYMs.zip archive, or a dSYMs
directory holding such archives.
"""

IOS_LIST_DESCRIPTION = """\
List the metadata of the uploaded dSYM files. The backend returns the most
recent uploads first.
"""

app = typer.Typer(
    help="Tools for handling symbol and mapping files for symbolication.",
    no_args_is_help=True,
)
sourcemaps_app = typer.Typer(help="Prepare and upload JavaScript source maps.", no_args_is_help=True)
app.add_typer(sourcemaps_app, name="sourcemaps")
android_app = typer.Typer(help="Upload and list Android mapping files.", no_args_is_help=True)
app.add_typer(android_app, name="android")
ios_app = typer.Typer(help="Upload and list iOS symbolication files (dSYMs).", no_args_is_help=True)
app.add_typer(ios_app, name="ios")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit."
    ),
) -> None:
    pass


def _typer_version() -> str:
    return getattr(typer, "__version__", "unknown")


def _run_command(logger: logging.Logger, action: Callable[[], bool]) -> None:
    """Run ``action`` and translate its outcome into an exit status.

    ``action`` returns False when some files failed; the run still finished.
    """
    try:
        succeeded = action()
    except UserFriendlyError as err:
        if err.original_error is not None:
            logger.debug(f"{type(err.original_error).__name__}: {err.original_error}")
        logger.error(err.message)
        raise typer.Exit(code=1)
    except BackendError as err:
        logger.error(str(err))
        raise typer.Exit(code=1)
    except Exception as err:
        logger.error("Exiting due to an unexpected error:")
        logger.error(str(err))
        logger.debug("Traceback:", exc_info=True)
        raise typer.Exit(code=1)
    if not succeeded:
        raise typer.Exit(code=1)


def _write_report(
    logger: logging.Logger,
    report_dir: Optional[Path],
    command: str,
    directory: Path,
    summary: Dict[str, Any],
    dry_run: bool,
    cli_arguments: Dict[str, Any],
) -> None:
    if report_dir is None:
        return
    run_summary = build_run_summary(
        command,
        directory,
        summary,
        dry_run=dry_run,
        cli_arguments=cli_arguments,
        typer_version=_typer_version(),
    )
    path = write_json_summary(report_dir, run_summary)
    logger.info(f"Wrote run summary to {path}")


@sourcemaps_app.command("inject", help=INJECT_DESCRIPTION)
def inject_command(
    directory: Path = typer.Option(
        ..., "--directory", help="Path to the directory containing both JavaScript files and source map files."
    ),
    include: Optional[List[str]] = typer.Option(
        None, "--include", help="Glob of files to inject, relative to --directory. Repeatable."
    ),
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", help="Glob of files to leave untouched, relative to --directory. Repeatable."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Preview the files that would be injected without modifying any files."
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logs."),
    report_dir: Optional[Path] = typer.Option(
        None, "--report-dir", help="Write a JSON run summary into this directory."
    ),
) -> None:
    """Inject sourceMapIds into JavaScript bundles."""
    logger = create_logger(debug)
    options = InjectOptions(
        directory=directory,
        include=list(include or []),
        exclude=list(exclude or []),
        dry_run=dry_run,
    )

    def action() -> bool:
        summary = run_injection(options, logger)
        _write_report(
            logger,
            report_dir,
            "inject",
            directory,
            summary.to_dict(),
            dry_run,
            {"include": options.include, "exclude": options.exclude, "dry_run": dry_run},
        )
        return summary.ok

    _run_command(logger, action)


@sourcemaps_app.command("upload", help=UPLOAD_DESCRIPTION)
def upload_command(
    directory: Path = typer.Option(..., "--directory", help="Path to the directory containing source maps."),
    realm: str = typer.Option(
        ..., "--realm", envvar=REALM_ENV_VAR, help=f"Realm for your organization (example: us0). Env: {REALM_ENV_VAR}."
    ),
    token: str = typer.Option(
        ..., "--token", envvar=TOKEN_ENV_VAR, help=f"API access token. Env: {TOKEN_ENV_VAR}."
    ),
    app_name: Optional[str] = typer.Option(None, "--app-name", help="Application name."),
    app_version: Optional[str] = typer.Option(None, "--app-version", help="Application version."),
    include: Optional[List[str]] = typer.Option(
        None, "--include", help="Glob of source maps to upload, relative to --directory. Repeatable."
    ),
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", help="Glob of source maps to skip, relative to --directory. Repeatable."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview the files that would be uploaded."),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logs."),
    report_dir: Optional[Path] = typer.Option(
        None, "--report-dir", help="Write a JSON run summary into this directory."
    ),
) -> None:
    """Upload source map files."""
    logger = create_logger(debug)
    options = UploadOptions(
        directory=directory,
        realm=realm,
        token=token,
        app_name=app_name,
        app_version=app_version,
        include=list(include or []),
        exclude=list(exclude or []),
        dry_run=dry_run,
    )

    def action() -> bool:
        summary = run_upload(options, logger, spinner=Spinner())
        _write_report(
            logger,
            report_dir,
            "upload",
            directory,
            summary.to_dict(),
            dry_run,
            {
                "realm": realm,
                "app_name": app_name,
                "app_version": app_version,
                "include": options.include,
                "exclude": options.exclude,
                "dry_run": dry_run,
            },
        )
        return summary.ok

    _run_command(logger, action)


@sourcemaps_app.command("list", help=LIST_DESCRIPTION)
def list_command(
    realm: str = typer.Option(
        ..., "--realm", envvar=REALM_ENV_VAR, help=f"Realm for your organization (example: us0). Env: {REALM_ENV_VAR}."
    ),
    token: str = typer.Option(
        ..., "--token", envvar=TOKEN_ENV_VAR, help=f"API access token. Env: {TOKEN_ENV_VAR}."
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logs."),
) -> None:
    """List uploaded source maps."""
    logger = create_logger(debug)

    def action() -> bool:
        metadata = list_source_maps(realm, token)
        typer.echo(json.dumps(metadata, indent=2, sort_keys=True))
        return True

    _run_command(logger, action)


@android_app.command("upload", help=ANDROID_UPLOAD_DESCRIPTION)
def android_upload_command(
    app_id: str = typer.Option(..., "--app-id", help="Application ID."),
    version_code: str = typer.Option(..., "--version-code", help="Version code (integer)."),
    file: Path = typer.Option(..., "--file", help="Path to the mapping file."),
    realm: str = typer.Option(
        ..., "--realm", envvar=REALM_ENV_VAR, help=f"Realm for your organization (example: us0). Env: {REALM_ENV_VAR}."
    ),
    token: str = typer.Option(
        ..., "--token", envvar=TOKEN_ENV_VAR, help=f"API access token. Env: {TOKEN_ENV_VAR}."
    ),
    uuid: Optional[str] = typer.Option(None, "--uuid", help="Optional UUID for the upload."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview the file that will be uploaded."),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logs."),
) -> None:
    """Upload an Android mapping file."""
    logger = create_logger(debug)
    options = AndroidUploadOptions(
        file=file,
        app_id=app_id,
        version_code=version_code,
        realm=realm,
        token=token,
        uuid=uuid,
        dry_run=dry_run,
    )

    def action() -> bool:
        upload_android_mapping(options, logger, spinner=Spinner())
        return True

    _run_command(logger, action)


@android_app.command("list", help=ANDROID_LIST_DESCRIPTION)
def android_list_command(
    app_id: str = typer.Option(..., "--app-id", help="Application ID."),
    realm: str = typer.Option(
        ..., "--realm", envvar=REALM_ENV_VAR, help=f"Realm for your organization (example: us0). Env: {REALM_ENV_VAR}."
    ),
    token: str = typer.Option(
        ..., "--token", envvar=TOKEN_ENV_VAR, help=f"API access token. Env: {TOKEN_ENV_VAR}."
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logs."),
) -> None:
    """List uploaded Android mapping files."""
    logger = create_logger(debug)

    def action() -> bool:
        metadata = list_android_mappings(realm, token, app_id)
        typer.echo(json.dumps(metadata, indent=2, sort_keys=True))
        return True

    _run_command(logger, action)


@ios_app.command("upload", help=IOS_UPLOAD_DESCRIPTION)
def ios_upload_command(
    path: Path = typer.Option(..., "--path", help="Path to a dSYMs directory or a .dSYM.zip / .dSYMs.zip file."),
    realm: str = typer.Option(
        ..., "--realm", envvar=REALM_ENV_VAR, help=f"Realm for your organization (example: us0). Env: {REALM_ENV_VAR}."
    ),
    token: str = typer.Option(
        ..., "--token", envvar=TOKEN_ENV_VAR, help=f"API access token. Env: {TOKEN_ENV_VAR}."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Perform a trial run with no changes made."),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logs."),
) -> None:
    """Upload dSYM archives."""
    logger = create_logger(debug)
    options = DsymUploadOptions(path=path, realm=realm, token=token, dry_run=dry_run)

    def action() -> bool:
        return upload_dsyms(options, logger, spinner=Spinner()).ok

    _run_command(logger, action)


@ios_app.command("list", help=IOS_LIST_DESCRIPTION)
def ios_list_command(
    realm: str = typer.Option(
        ..., "--realm", envvar=REALM_ENV_VAR, help=f"Realm for your organization (example: us0). Env: {REALM_ENV_VAR}."
    ),
    token: str = typer.Option(
        ..., "--token", envvar=TOKEN_ENV_VAR, help=f"API access token. Env: {TOKEN_ENV_VAR}."
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logs."),
) -> None:
    """List uploaded dSYM files."""
    logger = create_logger(debug)

    def action() -> bool:
        metadata = list_dsyms(realm, token)
        typer.echo(json.dumps(metadata, indent=2, sort_keys=True))
        return True

    _run_command(logger, action)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
