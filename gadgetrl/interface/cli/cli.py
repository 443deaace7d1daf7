import click
import logging
from pathlib import Path
from pydantic import BaseModel

from gadgetrl.application.config_loader import ConfigLoadError, load_config
from gadgetrl.application.config_models import ResolverConfig
from gadgetrl.application.freshness_cache import batch_key
from gadgetrl.domain.constants import DEFAULT_SNAPSHOT_PATH
from gadgetrl.domain.models.request_context import RequestContext, UserRef
from gadgetrl.interface.cli.output_models import (
    ContentOutput,
    FreshnessOutput,
    InfoOutput,
    ListOutput,
    PagesOutput,
    StampSummary,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _json_emit(model: BaseModel) -> None:
    # Single-line JSON, omit None fields (e.g., ContentOutput.revision_id when missing).
    click.echo(model.model_dump_json(exclude_none=True), nl=True)


def _get_json_mode(ctx: click.Context) -> bool:
    obj = ctx.obj or {}
    return bool(obj.get("json", False))


def _fail(ctx: click.Context, output: BaseModel, e: Exception) -> None:
    """Report a command failure as JSON (exit 1) or a ClickException."""
    if _get_json_mode(ctx):
        _json_emit(output)
        raise click.exceptions.Exit(1)
    raise click.ClickException(str(e)) from e


def _load_backends(ctx: click.Context):
    from gadgetrl.application.storage import build_backends, load_snapshot

    obj = ctx.obj or {}
    cfg = load_config(project_root=Path.cwd(), user_home=Path.home())
    config = ResolverConfig.from_dict(cfg)

    # CLI --snapshot overrides config; config overrides default
    snapshot_path = obj.get("snapshot") or config.snapshot or DEFAULT_SNAPSHOT_PATH
    backends = build_backends(load_snapshot(Path(snapshot_path)))
    return backends, config


def _build_module(ctx: click.Context, bundle_id: str):
    from gadgetrl.application.gadget_module import GadgetModule
    from gadgetrl.domain.events import ModuleEventEmitter, StderrEventObserver

    backends, config = _load_backends(ctx)

    emitter = ModuleEventEmitter()
    if (ctx.obj or {}).get("events"):
        emitter.subscribe(StderrEventObserver())

    return GadgetModule(
        bundle_id,
        repository=backends.repository,
        page_store=backends.page_store,
        review_service=backends.review_service,
        config=config,
        emitter=emitter,
    )


def _request_context(user_id: int | None, anonymous: bool) -> RequestContext:
    """No user flags means a maintenance run with no user at all."""
    if anonymous:
        return RequestContext(user=UserRef.anonymous())
    if user_id is not None:
        return RequestContext(user=UserRef(user_id=user_id, logged_in=True))
    return RequestContext()


def _user_options(func):
    func = click.option("--anonymous", is_flag=True, help="Resolve as a logged-out visitor.")(func)
    func = click.option("--user-id", "user_id", type=int, required=False, help="Resolve as this logged-in user.")(func)
    return func


@click.group(help="Inspect gadget modules against a site snapshot.")
@click.option("--json", "json_output", is_flag=True, help="Emit machine-readable JSON on stdout.")
@click.option(
    "--snapshot",
    "snapshot",
    required=False,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Site snapshot YAML (overrides config).",
)
@click.option("--events", is_flag=True, help="Print resolution events to stderr.")
@click.option(
    "--log-level",
    "log_level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level (overrides config).",
)
@click.pass_context
def cli(ctx: click.Context, json_output: bool, snapshot: Path | None, events: bool, log_level: str | None) -> None:
    ctx.ensure_object(dict)
    ctx.obj["json"] = bool(json_output)
    ctx.obj["snapshot"] = snapshot
    ctx.obj["events"] = bool(events)

    if log_level is None:
        try:
            cfg = load_config(project_root=Path.cwd(), user_home=Path.home())
        except ConfigLoadError as e:
            raise click.ClickException(str(e)) from e
        log_level = str(cfg.get("log_level", "WARNING"))
        if log_level.upper() not in LOG_LEVELS:
            raise click.ClickException(f"Invalid log_level in config: {log_level} (expected one of {', '.join(LOG_LEVELS)})")
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


@cli.command("list")
@click.pass_context
def list_cmd(ctx: click.Context) -> None:
    try:
        backends, _ = _load_backends(ctx)
        bundle_ids = backends.repository.list_ids()

        if _get_json_mode(ctx):
            _json_emit(ListOutput(exit_code=0, bundles=bundle_ids))
            raise click.exceptions.Exit(0)

        for bundle_id in bundle_ids:
            click.echo(bundle_id)
    except click.exceptions.Exit:
        raise
    except Exception as e:
        _fail(ctx, ListOutput(exit_code=1, error=str(e)), e)


@cli.command("pages")
@click.argument("bundle_id", type=str)
@click.pass_context
def pages_cmd(ctx: click.Context, bundle_id: str) -> None:
    try:
        module = _build_module(ctx, bundle_id)
        pages = {name: options["type"] for name, options in module.get_pages().items()}

        if _get_json_mode(ctx):
            _json_emit(PagesOutput(exit_code=0, bundle_id=bundle_id, pages=pages))
            raise click.exceptions.Exit(0)

        for name, page_type in pages.items():
            click.echo(f"{page_type}\t{name}")
    except click.exceptions.Exit:
        raise
    except Exception as e:
        _fail(ctx, PagesOutput(exit_code=1, bundle_id=bundle_id, error=str(e)), e)


@cli.command("info")
@click.argument("bundle_id", type=str)
@_user_options
@click.pass_context
def info_cmd(ctx: click.Context, bundle_id: str, user_id: int | None, anonymous: bool) -> None:
    try:
        module = _build_module(ctx, bundle_id)
        context = _request_context(user_id, anonymous)

        output = InfoOutput(
            exit_code=0,
            bundle_id=bundle_id,
            placeholder=module.is_placeholder,
            type=module.get_type().value,
            group=module.get_group(context),
            mode=module.get_gating_mode(context).value,
            dependencies=module.get_dependencies(),
            messages=module.get_messages(),
            targets=module.get_targets(),
        )

        if _get_json_mode(ctx):
            _json_emit(output)
            raise click.exceptions.Exit(0)

        click.echo(f"type={output.type}")
        click.echo(f"group={output.group}")
        click.echo(f"mode={output.mode}")
        click.echo(f"dependencies={','.join(output.dependencies)}")
        click.echo(f"messages={','.join(output.messages)}")
        click.echo(f"targets={','.join(output.targets)}")
        if output.placeholder:
            click.echo("placeholder=true")
    except click.exceptions.Exit:
        raise
    except Exception as e:
        _fail(ctx, InfoOutput(exit_code=1, bundle_id=bundle_id, error=str(e)), e)


@cli.command("content")
@click.argument("bundle_id", type=str)
@click.argument("page", type=str)
@_user_options
@click.option("--max-redirects", "max_redirects", type=click.IntRange(min=0), required=False)
@click.pass_context
def content_cmd(
    ctx: click.Context,
    bundle_id: str,
    page: str,
    user_id: int | None,
    anonymous: bool,
    max_redirects: int | None,
) -> None:
    try:
        module = _build_module(ctx, bundle_id)
        context = _request_context(user_id, anonymous)
        mode = module.get_gating_mode(context)
        content = module.get_content_for(page, context, max_redirects=max_redirects)

        if _get_json_mode(ctx):
            _json_emit(
                ContentOutput(
                    exit_code=0,
                    bundle_id=bundle_id,
                    page=page,
                    mode=mode.value,
                    revision_id=content.revision_id if content else None,
                    text=content.text if content else "",
                )
            )
            raise click.exceptions.Exit(0)

        # Missing content renders as empty, not as an error.
        click.echo(content.text if content else "", nl=False)
    except click.exceptions.Exit:
        raise
    except Exception as e:
        _fail(ctx, ContentOutput(exit_code=1, bundle_id=bundle_id, page=page, error=str(e)), e)


@cli.command("freshness")
@click.argument("bundle_id", type=str)
@_user_options
@click.pass_context
def freshness_cmd(ctx: click.Context, bundle_id: str, user_id: int | None, anonymous: bool) -> None:
    try:
        module = _build_module(ctx, bundle_id)
        context = _request_context(user_id, anonymous)
        mode = module.get_gating_mode(context)
        info = module.get_freshness_info(context)
        pages = list(module.get_pages())

        stamps = {
            name: StampSummary(
                page_id=stamp.page_id,
                revision_id=stamp.revision_id,
                length=stamp.length,
                touched=stamp.touched.isoformat() if stamp.touched else None,
            )
            for name, stamp in info.items()
        }
        missing = [name for name in pages if name not in info]

        if _get_json_mode(ctx):
            _json_emit(
                FreshnessOutput(
                    exit_code=0,
                    bundle_id=bundle_id,
                    mode=mode.value,
                    batch_key=batch_key(pages),
                    stamps=stamps,
                    missing=missing,
                )
            )
            raise click.exceptions.Exit(0)

        click.echo(f"mode={mode.value}")
        for name in pages:
            stamp = stamps.get(name)
            click.echo(f"{name}\t{stamp.revision_id if stamp else '-'}")
    except click.exceptions.Exit:
        raise
    except Exception as e:
        _fail(ctx, FreshnessOutput(exit_code=1, bundle_id=bundle_id, error=str(e)), e)


if __name__ == "__main__":  # pragma: no cover
    cli()
