"""
Command-Line Interface for zkv-router

Converts Succinct prover-network proof requests into zkVerify proof files
and submits them to the zkVerify verification pallet.
"""

import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import click
from dotenv import find_dotenv, load_dotenv

from zkv_router.config import MNEMONIC_ENV, PROVE_MODES, RouterConfig
from zkv_router.exceptions import ZkvRouterError
from zkv_router.explorer.renderer import StaticRenderer
from zkv_router.log import configure_logging
from zkv_router.router import DEFAULT_DETAILS_OUTPUT, DEFAULT_OUTPUT, ProofRouter
from zkv_router.version import __version__

ENV_PREFIX = "ZKV_"
SECRET_VARS = frozenset({MNEMONIC_ENV, "ZKV_PRIVATE_KEY"})


@contextmanager
def _report_errors():
    try:
        yield
    except ZkvRouterError as exc:
        click.echo(click.style(f"✗ {exc.stage} failed: {exc}", fg="red"), err=True)
        sys.exit(1)


def _build_router(config: RouterConfig, html: Optional[str] = None) -> ProofRouter:
    renderer = None
    if html is not None:
        renderer = StaticRenderer(Path(html).read_text(encoding="utf-8"))
    return ProofRouter(config, renderer=renderer)


@click.group()
@click.version_option(version=__version__)
@click.option(
    '--api-base',
    type=str,
    default=None,
    help='Override explorer base URL (default: https://explorer.succinct.xyz)'
)
@click.option(
    '--ws-url',
    type=str,
    default=None,
    help='WebSocket URL of the Substrate node'
)
@click.option(
    '--prove-mode',
    type=click.Choice(sorted(PROVE_MODES)),
    default=None,
    help='Proof conversion backend (default: external)'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging'
)
@click.pass_context
def main(ctx, api_base, ws_url, prove_mode, verbose):
    """
    zkv-router - convert Succinct proof requests to zkVerify format

    The signing mnemonic is read from ZKV_MNEMONIC (a .env file in the
    working directory is loaded first). It is only needed for submit/remark.
    """
    load_dotenv(find_dotenv(usecwd=True))
    configure_logging(verbose)
    with _report_errors():
        ctx.obj = RouterConfig.from_env(
            api_base=api_base, ws_url=ws_url, prove_mode=prove_mode
        )


@main.command()
@click.argument('request_id')
@click.option(
    '--output',
    type=click.Path(dir_okay=False),
    default=DEFAULT_OUTPUT,
    show_default=True,
    help='Path where to save the proof JSON file'
)
@click.option(
    '--get-proof',
    is_flag=True,
    help='Also save detailed proof information'
)
@click.option(
    '--details-output',
    type=click.Path(dir_okay=False),
    default=DEFAULT_DETAILS_OUTPUT,
    show_default=True,
    help='Where --get-proof writes its details'
)
@click.option(
    '--html',
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help='Use a saved page instead of rendering the request page'
)
@click.pass_obj
def convert(config, request_id, output, get_proof, details_output, html):
    """
    Convert a proof request into a zkVerify proof file.

    Examples:

        zkv-router convert 0x921d...4c78 --output proofs/proof_0.json

        zkv-router --prove-mode placeholder convert 0x921d...4c78 --get-proof
    """
    with _report_errors():
        router = _build_router(config, html)
        path = router.convert(
            request_id, output, details_output if get_proof else None
        )
    click.echo(click.style(f"✓ Proof converted successfully: {path}", fg="green"))


@main.command()
@click.option(
    '--proof',
    'proof_path',
    type=click.Path(dir_okay=False),
    default=DEFAULT_OUTPUT,
    show_default=True,
    help='Proof JSON file to submit'
)
@click.pass_obj
def submit(config, proof_path):
    """Submit a proof file to the zkVerify verification pallet."""
    with _report_errors():
        tx_hash = _build_router(config).submit(proof_path)
    click.echo(click.style(f"✓ Proof submitted! Transaction hash: {tx_hash}", fg="green"))


@main.command()
@click.option(
    '--proof',
    'proof_path',
    type=click.Path(dir_okay=False),
    default=DEFAULT_OUTPUT,
    show_default=True,
    help='File whose raw bytes are sent as the remark'
)
@click.pass_obj
def remark(config, proof_path):
    """Send a proof file as a system.remark transaction."""
    with _report_errors():
        tx_hash = _build_router(config).remark(proof_path)
    click.echo(click.style(f"✓ Remark sent! Transaction hash: {tx_hash}", fg="green"))


@main.command(name="list-pallets")
@click.pass_obj
def list_pallets(config):
    """Show what is known about the chain's pallets."""
    click.echo(_build_router(config).list_pallets())


@main.command()
@click.argument('request_ids', nargs=-1)
@click.option(
    '--from-file',
    type=click.File('r'),
    default=None,
    help='Read request ids from a file, one per line'
)
@click.option(
    '--output-dir',
    type=click.Path(file_okay=False),
    default='proofs',
    show_default=True,
    help='Directory for proof_<n>.json files'
)
@click.option(
    '--submit',
    'do_submit',
    is_flag=True,
    help='Submit each proof after converting it'
)
@click.pass_obj
def batch(config, request_ids, from_file, output_dir, do_submit):
    """
    Convert several proof requests one after another.

    A failed request does not stop the batch; the exit status is non-zero
    if any request failed.
    """
    ids = list(request_ids)
    if from_file is not None:
        ids.extend(
            line.strip() for line in from_file
            if line.strip() and not line.lstrip().startswith('#')
        )
    if not ids:
        raise click.UsageError("no request ids given")

    with _report_errors():
        if do_submit:
            config.require_mnemonic()
        results = _build_router(config).batch(ids, output_dir, submit=do_submit)

    click.echo("\n" + "=" * 70)
    for item in results:
        if item.ok:
            suffix = f" tx={item.tx_hash}" if item.tx_hash else ""
            click.echo(click.style(f"✓ {item.request_id} -> {item.proof_path}{suffix}", fg="green"))
        else:
            click.echo(click.style(f"✗ {item.request_id}: {item.error}", fg="red"))
    failed = sum(1 for item in results if not item.ok)
    click.echo(f"Processed {len(results)} requests, {failed} failed")
    if failed:
        sys.exit(1)


@main.command()
@click.option('--request-id', type=str, default=None, help='Succinct proof request id')
@click.option(
    '--output',
    type=click.Path(dir_okay=False),
    default=DEFAULT_OUTPUT,
    show_default=True,
    help='Path where to save the JSON file'
)
@click.option('--get-proof', is_flag=True, help='Also save detailed proof information')
@click.option('--send-remark', is_flag=True, help='Send the proof as a system.remark transaction')
@click.option('--submit', 'do_submit', is_flag=True, help='Submit the proof to zkVerify')
@click.option('--list-pallets', 'do_list', is_flag=True, help='List available pallets')
@click.pass_obj
def run(config, request_id, output, get_proof, send_remark, do_submit, do_list):
    """
    Convert and/or send in one go.

    Conversion runs first when --request-id is given; remark and submit then
    share one chain connection.
    """
    with _report_errors():
        router = _build_router(config)
        if request_id:
            path = router.convert(
                request_id, output, DEFAULT_DETAILS_OUTPUT if get_proof else None
            )
            click.echo(click.style(f"✓ Proof converted successfully: {path}", fg="green"))
        else:
            click.echo("No request id provided, skipping proof conversion")

        if send_remark or do_submit:
            with router.open_submitter() as session:
                if send_remark:
                    tx_hash = router.remark(output, submitter=session)
                    click.echo(click.style(f"✓ Remark sent! Transaction hash: {tx_hash}", fg="green"))
                if do_submit:
                    tx_hash = router.submit(output, submitter=session)
                    click.echo(click.style(f"✓ Proof submitted! Transaction hash: {tx_hash}", fg="green"))

        if do_list:
            click.echo(router.list_pallets())


@main.command(name="env-check")
def env_check():
    """Report which ZKV_* environment variables are set."""
    found = sorted(name for name in os.environ if name.startswith(ENV_PREFIX))
    if MNEMONIC_ENV in found:
        click.echo(click.style(f"✓ {MNEMONIC_ENV} found", fg="green"))
    else:
        click.echo(click.style(f"✗ {MNEMONIC_ENV} not found", fg="yellow"))
    click.echo("\nAll ZKV_ environment variables:")
    for name in found:
        value = "****" if name in SECRET_VARS else os.environ[name]
        click.echo(f"  {name}: {value}")


if __name__ == '__main__':
    main()
