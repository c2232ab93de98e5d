"""Main CLI entrypoint for Streamwright."""

import json
import logging
import sys
from typing import Any, Dict, List

import click

from .broker import StreamBroker
from .buildlog import BuildLog
from .config import load_definition, load_settings
from .errors import DefinitionError, StreamNotFoundError
from .models import ReconcileResult, StreamStatus, SweepResult
from .provider import KinesisProvider
from .tags import ownership_tags, parse_user_tags


@click.group()
@click.option('--region', default=None, help='AWS region (defaults to STREAMWRIGHT_REGION/AWS_REGION)')
@click.option('--json', 'output_json', is_flag=True, help='Output machine-readable JSON')
@click.option('--verbose', is_flag=True, help='Enable debug logging')
@click.pass_context
def main(ctx, region, output_json, verbose):
    """Streamwright - reconcile Kinesis streams for a deployment."""
    ctx.ensure_object(dict)

    logging.basicConfig(
        format='[%(levelname)s] %(asctime)-15s %(name)s %(message)s',
        level=logging.DEBUG if verbose else logging.INFO,
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)

    try:
        settings = load_settings()
    except ValueError as e:
        raise click.UsageError(str(e))

    if region:
        settings.region = region

    ctx.obj['settings'] = settings
    ctx.obj['json'] = output_json


def _json_output(data: Dict[str, Any]) -> None:
    """Output data as JSON."""
    click.echo(json.dumps(data, indent=None))


def _human_output(message: str) -> None:
    """Output human-readable message."""
    if not click.get_current_context().obj.get('json', False):
        click.echo(message)


def _load(ctx, definition_path: str):
    try:
        return load_definition(definition_path)
    except DefinitionError as e:
        if ctx.obj['json']:
            _json_output({'error': str(e)})
        else:
            _human_output(f"❌ {e}")
        sys.exit(2)


def _make_broker(ctx, definition) -> StreamBroker:
    settings = ctx.obj['settings']
    tags = ownership_tags(settings.tag_keys, definition.cluster, definition.app_name)
    build_log = BuildLog()
    ctx.obj['build_log'] = build_log
    return StreamBroker(
        provider=KinesisProvider(region=settings.region),
        build_log=build_log,
        tags=tags,
        settings=settings
    )


def _report(ctx, results: List[ReconcileResult], sweep: SweepResult = None) -> None:
    """Print results and exit 0 only if everything succeeded."""
    ok = all(r.succeeded for r in results) and (sweep is None or sweep.succeeded)

    if ctx.obj['json']:
        data: Dict[str, Any] = {
            'streams': [r.to_dict() for r in results],
            'log': ctx.obj['build_log'].entries,
        }
        if sweep is not None:
            data['sweep'] = sweep.to_dict()
        _json_output(data)
    else:
        for r in results:
            icon = "✅" if r.succeeded else "❌"
            _human_output(f"{icon} {r.spec.name}: {r.outcome.value}")
        if sweep is not None:
            _human_output(f"🧹 Deleted: {', '.join(sweep.deleted) or 'none'}")
            if sweep.failed:
                _human_output(f"❌ Failed to delete: {', '.join(sweep.failed)}")
            if sweep.error:
                _human_output(f"❌ Sweep failed: {sweep.error}")

    sys.exit(0 if ok else 1)


@main.command()
@click.argument('definition', type=click.Path())
@click.pass_context
def apply(ctx, definition):
    """Reconcile every declared stream, then delete undeclared owned streams."""
    deployment = _load(ctx, definition)
    broker = _make_broker(ctx, deployment)
    specs = deployment.stream_specs()

    results = broker.reconcile_all(specs)
    sweep_result = broker.sweep(specs)
    _report(ctx, results, sweep_result)


@main.command()
@click.argument('definition', type=click.Path())
@click.pass_context
def reconcile(ctx, definition):
    """Reconcile every declared stream."""
    deployment = _load(ctx, definition)
    broker = _make_broker(ctx, deployment)
    _report(ctx, broker.reconcile_all(deployment.stream_specs()))


@main.command()
@click.argument('definition', type=click.Path())
@click.option('--owner', help='Ownership tag key=value (defaults to the application tag)')
@click.pass_context
def sweep(ctx, definition, owner):
    """Delete owned streams the definition no longer declares."""
    deployment = _load(ctx, definition)
    owner_tag = None
    if owner:
        try:
            parsed = parse_user_tags([owner])
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint='--owner')
        owner_tag = next(iter(parsed.items()))

    broker = _make_broker(ctx, deployment)
    _report(ctx, [], broker.sweep(deployment.stream_specs(), owner_tag))


@main.command()
@click.argument('stream_name')
@click.pass_context
def status(ctx, stream_name):
    """Show the live status of one stream."""
    provider = KinesisProvider(region=ctx.obj['settings'].region)
    try:
        stream_status = provider.describe_status(stream_name)
    except StreamNotFoundError:
        stream_status = StreamStatus.NOT_FOUND
    except Exception as e:
        error_msg = f"Status check failed: {str(e)}"
        if ctx.obj['json']:
            _json_output({'error': error_msg})
        else:
            _human_output(f"❌ {error_msg}")
        sys.exit(1)

    if ctx.obj['json']:
        _json_output({'stream': stream_name, 'status': stream_status.value})
    else:
        _human_output(f"{stream_name}: {stream_status.value}")


@main.command()
@click.argument('definition', type=click.Path())
@click.pass_context
def tags(ctx, definition):
    """Show the ownership tags a definition stamps on new streams."""
    deployment = _load(ctx, definition)
    settings = ctx.obj['settings']
    tag_map = ownership_tags(settings.tag_keys, deployment.cluster, deployment.app_name).as_dict()

    if ctx.obj['json']:
        _json_output(tag_map)
    else:
        for key, value in tag_map.items():
            _human_output(f"{key}={value}")


if __name__ == '__main__':
    main()
