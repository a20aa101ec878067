import functools
import json
import sys
import traceback
from pathlib import Path
from typing import Optional

import click
import structlog

from zcb_player import __version__, tasks
from zcb_player.chain.client import ChainClient
from zcb_player.chain.deployer import deploy_artifact
from zcb_player.constants import (
    DEFAULT_CHAIN,
    DEFAULT_CONTRACT_TYPE,
    DEPLOY_GAS_LIMIT,
    ENV_ARTIFACTS_DIR,
    ENV_CHAIN,
    ENV_CONTRACT_TYPE,
    ENV_PRIVATE_KEY,
    ContractType,
)
from zcb_player.exceptions import ScenarioAssertionError, ScenarioError
from zcb_player.runner import ScenarioRunner
from zcb_player.tasks.base import collect_tasks
from zcb_player.utils.artifacts import load_artifact
from zcb_player.utils.logs import (
    configure_logging,
    configure_logging_for_subcommand,
    construct_log_file_name,
)

log = structlog.get_logger(__name__)

DEFAULT_LOG_DIR = Path.home().joinpath(".zcb-player")


def chain_options(func):
    """Decorator for adding '--chain' and '--artifacts-dir' to subcommands."""

    @click.option(
        "--chain",
        envvar=ENV_CHAIN,
        default=None,
        help=f"'{DEFAULT_CHAIN}' for an in-process chain, or the URL of a JSON-RPC node.",
    )
    @click.option(
        "--artifacts-dir",
        envvar=ENV_ARTIFACTS_DIR,
        default=None,
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        help="Root directory of the compiled contract artifacts.",
    )
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)

    return wrapper


@click.group(invoke_without_command=True, context_settings={"max_content_width": 120})
@click.version_option(__version__)
@click.pass_context
def main(ctx):
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command(name="run")
@click.argument("scenario-file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@chain_options
@click.option(
    "--log-file",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help=f"Debug log file. [default: a new file in {DEFAULT_LOG_DIR}]",
)
def run(scenario_file: Path, chain: Optional[str], artifacts_dir: Optional[Path], log_file):
    """Execute a scenario as defined in scenario definition file.

    Exits with the following status codes:

    \b
        Exit code 1x
        There was a problem loading the scenario, its artifacts or connecting
        to the chain.

    \b
        Exit code 2x
        A transaction, deployment or call failed unexpectedly, or the scenario
        definition is invalid.

    \b
        Exit code 3x
        An assertion on the contracts' behaviour failed.
    """
    scenario_file = scenario_file.absolute()
    log_file_name = str(log_file) if log_file else construct_log_file_name(
        "run", DEFAULT_LOG_DIR, scenario_file
    )
    configure_logging_for_subcommand(log_file_name)
    log.info("ZCB Scenario Player version:", version_info=__version__)

    # Dynamically import valid Task classes from zcb_player.tasks package.
    collect_tasks(tasks)

    overrides = {
        "chain": chain,
        "artifacts_dir": str(artifacts_dir.absolute()) if artifacts_dir else None,
    }
    try:
        runner = ScenarioRunner(scenario_file, overrides=overrides)
        runner.run_scenario()
    except ScenarioAssertionError as ex:
        log.error("Run finished", result="assertion errors", message=str(ex))
        click.secho(f"Assertion mismatch in {scenario_file.name}: {ex}", fg="red")
        sys.exit(getattr(ex, "exit_code", 30))
    except ScenarioError as ex:
        log.error("Run finished", result="scenario error", message=str(ex))
        click.secho(f"Invalid scenario {scenario_file.name}: {ex}", fg="red")
        sys.exit(getattr(ex, "exit_code", 20))
    except Exception as ex:
        log.exception("Exception while running scenario")
        click.secho(f"Error running scenario {scenario_file.name}:", fg="red")
        click.echo(traceback.format_exc())
        sys.exit(getattr(ex, "exit_code", 10))

    log.info("Run finished", result="success")
    click.secho(f"Scenario successful {scenario_file.name}", fg="green")
    click.echo(str(runner.root_task))


@main.command(name="deploy")
@click.option(
    "--contract-type",
    envvar=ENV_CONTRACT_TYPE,
    default=DEFAULT_CONTRACT_TYPE.name,
    show_default=True,
    help="One of: " + ", ".join(contract_type.name for contract_type in ContractType),
)
@chain_options
@click.option(
    "--private-key",
    envvar=ENV_PRIVATE_KEY,
    default=None,
    help="Key of the deploying account. Required for chains other than the in-process one.",
)
@click.option("--gas-limit", default=DEPLOY_GAS_LIMIT, show_default=True, type=int)
def deploy(contract_type: str, chain, artifacts_dir, private_key, gas_limit):
    """Deploy a single contract and print its address.

    The first account of the chain deploys the contract, without
    constructor arguments.
    """
    configure_logging({"": "WARNING", "zcb_player": "INFO"})
    try:
        client = ChainClient.from_url(
            chain or DEFAULT_CHAIN, private_keys=[private_key] if private_key else ()
        )
        artifact = load_artifact(contract_type, artifacts_dir)
        owner = client.initial_accounts()[0]
        deployed = deploy_artifact(client, owner, artifact, gas_limit=gas_limit)
    except ScenarioError as ex:
        click.secho(f"Error deploying contract: {ex}", fg="red")
        sys.exit(ex.exit_code)
    except Exception as ex:
        click.secho(f"Error deploying contract: {ex}", fg="red")
        sys.exit(getattr(ex, "exit_code", 10))

    click.echo(
        json.dumps({"contractAddress": deployed.contract_address, "issuer": deployed.issuer})
    )


if __name__ == "__main__":
    main()
