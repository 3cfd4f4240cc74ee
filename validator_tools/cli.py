"""CLI entry point for validator-tools."""

import asyncio
import json
import logging
import sys
from typing import NoReturn

import click

from .beacon import BeaconClient
from .config import (
    DEFAULT_ITERATIONS,
    DEFAULT_PROGRESS_INTERVAL,
    DEFAULT_SIGNER_BINARY,
    GeneratorConfig,
    default_workers,
)
from .deposit import DepositCriteria, expected_pubkeys, load_deposit_data
from .deposit import validate as validate_deposits
from .deposit import verify as verify_deposits
from .exceptions import ValidatorToolsError
from .exits import extract, load_exits, validate_count, validate_indices
from .exits import verify as verify_exits
from .generator import EthdoSigner, VoluntaryExitGenerator
from .keystore import DEFAULT_KEYSTORE_PREFIX, find_keystores
from .metrics import set_tool_info, start_metrics_server
from .spec.constants import DEFAULT_DEPOSIT_AMOUNT
from .version import get_commit, get_platform, get_version

logger = logging.getLogger(__name__)

FINALIZED_INDEX_HINT = (
    "You can use a command like this to check the current highest finalized validator index: \n\n"
    "curl -H \"Content-Type: application/json\" http://localhost:5052/eth/v1/beacon/states/finalized/validators"
    " | jq -r '[.data[].index | tonumber] | max' \n"
)


def setup_logging(level: str) -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    if level.upper() != "DEBUG":
        logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


def _split_pubkeys(values: tuple[str, ...]) -> list[str]:
    """Accept both repeated options and comma-separated lists."""
    return [p.strip() for value in values for p in value.split(",") if p.strip()]


def _fail(action: str, err: Exception) -> NoReturn:
    logger.error(f"Failed to {action}: {err}")
    sys.exit(1)


@click.group()
@click.version_option(package_name="validator-tools")
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
    envvar="VALIDATOR_TOOLS_LOG_LEVEL",
)
def cli(log_level: str):
    """Validator tools - verify and generate deposit and exit messages."""
    setup_logging(log_level)


@cli.group()
def verify():
    """Verify deposit data or voluntary exits."""
    pass


@cli.group()
def generate():
    """Generate signed validator messages."""
    pass


@cli.group(name="extract")
def extract_group():
    """Extract the exits matching live validator indices."""
    pass


@verify.command("deposit_data")
@click.option(
    "--deposit-data",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Path to deposit data JSON file",
    envvar="VALIDATOR_TOOLS_DEPOSIT_DATA",
)
@click.option(
    "--network",
    default="",
    help="Expected network (e.g. mainnet, holesky)",
    envvar="VALIDATOR_TOOLS_NETWORK",
)
@click.option(
    "--amount",
    default=DEFAULT_DEPOSIT_AMOUNT,
    type=click.IntRange(min=0),
    help="Expected deposit amount in Gwei",
    envvar="VALIDATOR_TOOLS_AMOUNT",
)
@click.option(
    "--withdrawal-credentials",
    default="",
    help="Expected withdrawal credentials (hex)",
    envvar="VALIDATOR_TOOLS_WITHDRAWAL_CREDENTIALS",
)
@click.option(
    "--count",
    default=0,
    type=click.IntRange(min=0),
    help="Expected number of deposits (0 to skip the check)",
    envvar="VALIDATOR_TOOLS_COUNT",
)
def verify_deposit_data(deposit_data: str, network: str, amount: int, withdrawal_credentials: str, count: int):
    """Verify and validate a deposit data file."""
    try:
        criteria = DepositCriteria.from_options(network, amount, withdrawal_credentials, count)
        records = load_deposit_data(deposit_data)
        validate_deposits(records, criteria)
        verify_deposits(records)
    except (ValidatorToolsError, OSError) as e:
        _fail("verify deposit data", e)

    logger.info(f"Successfully verified deposit data (deposit_count={len(records)})")
    click.echo(json.dumps(expected_pubkeys(records)))


@verify.command("voluntary_exits")
@click.option(
    "--input",
    "input_dir",
    type=click.Path(exists=True, file_okay=False),
    required=True,
    help="Path to directory containing exit files",
    envvar="VALIDATOR_TOOLS_INPUT",
)
@click.option(
    "--network",
    required=True,
    help="Network (mainnet, holesky, hoodi) or path to a network config yaml",
    envvar="VALIDATOR_TOOLS_NETWORK",
)
@click.option(
    "--withdrawal-credentials",
    required=True,
    help="Withdrawal credentials (hex)",
    envvar="VALIDATOR_TOOLS_WITHDRAWAL_CREDENTIALS",
)
@click.option(
    "--count",
    default=0,
    type=click.IntRange(min=0),
    help="Number of exits that should have been generated per pubkey",
    envvar="VALIDATOR_TOOLS_COUNT",
)
@click.option(
    "--pubkeys",
    multiple=True,
    help="Expected validator pubkeys (comma-separated, can be repeated)",
    envvar="VALIDATOR_TOOLS_PUBKEYS",
)
@click.option(
    "--skip-index-mismatch-check",
    is_flag=True,
    default=False,
    help="Skip the check that all pubkeys cover the same index range",
)
@click.option(
    "--skip-check-message",
    is_flag=True,
    default=False,
    help="Skip the hint about checking the live validator index",
)
def verify_voluntary_exits(
    input_dir: str,
    network: str,
    withdrawal_credentials: str,
    count: int,
    pubkeys: tuple[str, ...],
    skip_index_mismatch_check: bool,
    skip_check_message: bool,
):
    """Verify a directory of signed voluntary exits."""
    try:
        exits = load_exits(input_dir, network, withdrawal_credentials, _split_pubkeys(pubkeys))
        validate_count(exits, count)
        if not skip_index_mismatch_check:
            validate_indices(exits)
        response = verify_exits(exits)
    except (ValidatorToolsError, OSError) as e:
        _fail("verify exits", e)

    if not skip_check_message:
        logger.info(
            f"Please check that the latest live validator index sits between these values "
            f"(first_validator_index={response.first_index}, "
            f"last_validator_index={response.last_index}, network={network})."
        )
        logger.info(FINALIZED_INDEX_HINT)

    click.echo(f"Successfully verified {len(exits)} sets of validator exits")


@generate.command("voluntary_exits")
@click.option(
    "--output",
    type=click.Path(file_okay=False),
    required=True,
    help="Path to directory where result files will be written",
    envvar="VALIDATOR_TOOLS_OUTPUT",
)
@click.option(
    "--input",
    "input_dir",
    type=click.Path(exists=True, file_okay=False),
    required=True,
    help="Path to directory containing keystore files",
    envvar="VALIDATOR_TOOLS_INPUT",
)
@click.option(
    "--prefix",
    default=DEFAULT_KEYSTORE_PREFIX,
    help="Prefix for input files to match",
    envvar="VALIDATOR_TOOLS_PREFIX",
)
@click.option(
    "--withdrawal-credentials",
    required=True,
    help="Withdrawal credentials (hex)",
    envvar="VALIDATOR_TOOLS_WITHDRAWAL_CREDENTIALS",
)
@click.option(
    "--passphrase",
    required=True,
    help="Passphrase for your keystore(s)",
    envvar="VALIDATOR_TOOLS_PASSPHRASE",
)
@click.option(
    "--beacon",
    required=True,
    help="Beacon node endpoint URL (e.g. http://localhost:5052)",
    envvar="VALIDATOR_TOOLS_BEACON",
)
@click.option(
    "--count",
    default=DEFAULT_ITERATIONS,
    type=click.IntRange(min=1),
    help="Number of validator indices to sign an exit for, per keystore",
    envvar="VALIDATOR_TOOLS_COUNT",
)
@click.option(
    "--index-start",
    default=-1,
    type=int,
    help="Starting validator index (queries the beacon node when negative)",
    envvar="VALIDATOR_TOOLS_INDEX_START",
)
@click.option(
    "--index-offset",
    default=0,
    type=int,
    help="Offset to add to the starting validator index",
    envvar="VALIDATOR_TOOLS_INDEX_OFFSET",
)
@click.option(
    "--workers",
    default=default_workers,
    type=int,
    help="Number of parallel workers (default: number of CPU cores)",
    envvar="VALIDATOR_TOOLS_WORKERS",
)
@click.option(
    "--domain-bls-to-execution-change",
    default="",
    help="BLS to execution change domain, for beacon nodes that do not serve it via /eth/v1/config/spec",
    envvar="VALIDATOR_TOOLS_DOMAIN_BLS_TO_EXECUTION_CHANGE",
)
@click.option(
    "--signer-binary",
    default=DEFAULT_SIGNER_BINARY,
    help="ethdo binary to sign with",
    envvar="VALIDATOR_TOOLS_SIGNER_BINARY",
)
@click.option(
    "--progress-interval",
    default=DEFAULT_PROGRESS_INTERVAL,
    type=float,
    help="Seconds between progress log lines",
    envvar="VALIDATOR_TOOLS_PROGRESS_INTERVAL",
)
@click.option(
    "--check-passphrase",
    is_flag=True,
    default=False,
    help="Decrypt every keystore before signing to catch a wrong passphrase early",
    envvar="VALIDATOR_TOOLS_CHECK_PASSPHRASE",
)
@click.option(
    "--metrics-port",
    default=0,
    type=int,
    help="Port for the Prometheus metrics server (0 disables it)",
    envvar="VALIDATOR_TOOLS_METRICS_PORT",
)
def generate_voluntary_exits(
    output: str,
    input_dir: str,
    prefix: str,
    withdrawal_credentials: str,
    passphrase: str,
    beacon: str,
    count: int,
    index_start: int,
    index_offset: int,
    workers: int,
    domain_bls_to_execution_change: str,
    signer_binary: str,
    progress_interval: float,
    check_passphrase: bool,
    metrics_port: int,
):
    """Generate voluntary exit messages for every keystore with ethdo.

    Each worker runs ethdo offline in its own temporary directory.
    """
    config = GeneratorConfig(
        output_dir=output,
        withdrawal_credentials=withdrawal_credentials,
        passphrase=passphrase,
        beacon_url=beacon,
        keystore_dir=input_dir,
        keystore_prefix=prefix,
        iterations=count,
        index_start=index_start,
        index_offset=index_offset,
        workers=workers,
        progress_interval=progress_interval,
        signer_binary=signer_binary,
        domain_bls_to_execution_change=domain_bls_to_execution_change,
        check_passphrase=check_passphrase,
        metrics_port=metrics_port,
    )

    try:
        config.validate()
        signer = EthdoSigner(config.signer_binary, config.passphrase)
        signer.check_available()

        logger.info(f"Reading keystore files from directory: {input_dir} (prefix {prefix})")
        keystores = find_keystores(input_dir, prefix)

        if config.metrics_port:
            set_tool_info(get_version(), get_commit())
            start_metrics_server(config.metrics_port)

        total = asyncio.run(_generate(config, signer, keystores))
    except (ValidatorToolsError, OSError) as e:
        _fail("generate voluntary exits", e)

    click.echo(f"Generated {total} voluntary exits for {len(keystores)} keystores")


async def _generate(config: GeneratorConfig, signer: EthdoSigner, keystores: list) -> int:
    async with BeaconClient(config.beacon_url) as client:
        generator = VoluntaryExitGenerator(config, client, signer)
        return await generator.run(keystores)


@extract_group.command("voluntary_exits")
@click.option(
    "--input",
    "input_dir",
    type=click.Path(exists=True, file_okay=False),
    required=True,
    help="Path to directory containing exit files",
    envvar="VALIDATOR_TOOLS_INPUT",
)
@click.option(
    "--output",
    type=click.Path(file_okay=False),
    required=True,
    help="Path to directory to save extracted exit files",
    envvar="VALIDATOR_TOOLS_OUTPUT",
)
@click.option(
    "--network",
    required=True,
    help="Network (mainnet, holesky, hoodi) or path to a network config yaml",
    envvar="VALIDATOR_TOOLS_NETWORK",
)
@click.option(
    "--withdrawal-credentials",
    required=True,
    help="Withdrawal credentials (hex)",
    envvar="VALIDATOR_TOOLS_WITHDRAWAL_CREDENTIALS",
)
@click.option(
    "--pubkeys",
    multiple=True,
    required=True,
    help="Expected validator pubkeys (comma-separated, can be repeated)",
    envvar="VALIDATOR_TOOLS_PUBKEYS",
)
@click.option(
    "--beacon",
    required=True,
    help="Beacon node endpoint URL (e.g. http://localhost:5052)",
    envvar="VALIDATOR_TOOLS_BEACON",
)
def extract_voluntary_exits(
    input_dir: str,
    output: str,
    network: str,
    withdrawal_credentials: str,
    pubkeys: tuple[str, ...],
    beacon: str,
):
    """Copy the exit matching each validator's live index into OUTPUT."""
    expected = _split_pubkeys(pubkeys)
    try:
        exits = load_exits(input_dir, network, withdrawal_credentials, expected)
        asyncio.run(_extract(exits, beacon, output))

        found = load_exits(output, network, withdrawal_credentials, expected)
        validate_count(found, 1)
        verify_exits(found)
    except (ValidatorToolsError, OSError) as e:
        _fail("extract exits", e)

    click.echo(f"Successfully extracted {len(exits)} sets of validator exits")


async def _extract(exits, beacon_url: str, output: str) -> None:
    async with BeaconClient(beacon_url) as client:
        await extract(exits, client, output)


@cli.command()
def version():
    """Print version, commit and platform."""
    click.echo(f"Version: {get_version()}")
    click.echo(f"Commit: {get_commit() or 'none'}")
    click.echo(f"OS/Arch: {get_platform()}")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
