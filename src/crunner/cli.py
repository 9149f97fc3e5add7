"""
crunner CLI

Runner/executor of a target smart contract on EVM-based chains, driven
entirely from the command line. No verified source is needed: supply the
function name (or full signature) and its parameters.

Modes:
  getter        --fn-ret-type TYPE            read-only eth_call, decoded
  setter        --ensure-setter               signed transaction, prints tx hash
  dry run       --ensure-setter --dry-run-estimate-gas --estimate-gas-from-addr ADDR
                                              prints gas units, gas price, total fee
  rpc-eth       --rpc-eth -f balance          native balance in wei and in tokens
"""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path
from typing import Callable, Optional, Union

import click

from . import __version__
from .chain.abi import combine_abi, load_abi_file
from .chain.rpc import JsonRpcClient
from .chains import CHAINS, resolve_chain
from .codec import ReturnType
from .config import LOG_LEVEL_VAR, RPC_URL_VAR, load_env_file, rpc_timeout
from .dispatch import DispatchResult, Dispatcher, ensure_contract
from .errors import CrunnerError
from .logging_setup import DEFAULT_LEVEL, configure_logging
from .output import render
from .request import CallMode, build_request, resolve_mode
from .wallet.eth import LocalSigner

logger = logging.getLogger(__name__)


# ============ Command ============


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="crunner")
@click.option(
    "--address", "-a", "contract_address", required=True,
    help="Target contract address to interact with",
)
@click.option(
    "--chain", "-c", required=True,
    type=click.Choice(sorted(CHAINS), case_sensitive=False),
    help="Which chain to work with",
)
@click.option(
    "--fn-name", "-f", required=True,
    help="Function name or signature, e.g. 'allowance' or 'allowance(address,address)'. "
    "With --rpc-eth, the RPC-ETH method name.",
)
@click.option(
    "--fn-ret-type", "-r", default=None,
    type=click.Choice([m.value for m in ReturnType], case_sensitive=False),
    help="Function's returning type; required for getter calls",
)
@click.option(
    "--params", "-p", multiple=True,
    help="Parameter to pass to the function; repeat or list the rest as arguments. "
    "A negative value (signed int) needs its own -p, e.g. -p -5",
)
@click.argument("extra_params", nargs=-1)
@click.option("--rpc-eth", is_flag=True, help="Query the basic RPC-ETH surface instead of a contract")
@click.option("--ensure-setter", is_flag=True, help="Confirm that the function is a (fee-incurring) setter")
@click.option(
    "--dry-run-estimate-gas", is_flag=True,
    help="Estimate gas for a setter without broadcasting; needs --ensure-setter",
)
@click.option("--estimate-gas-from-addr", default=None, help="Sender address used for the gas estimate")
@click.option("--gas-limit", type=click.IntRange(min=1), default=None, help="Gas limit for setter calls (default: estimated)")
@click.option(
    "--abi-filepath", default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="ABI JSON file to combine with the default one",
)
@click.option("--rpc-url", envvar=RPC_URL_VAR, default=None, help="Override the chain's RPC endpoint")
@click.option("--check-contract", is_flag=True, help="Fail if the target address holds no contract code")
@click.option("--log-level", envvar=LOG_LEVEL_VAR, default=DEFAULT_LEVEL, show_default=True, help="Logging level (to stderr)")
def cli(
    contract_address: str,
    chain: str,
    fn_name: str,
    fn_ret_type: Optional[str],
    params: tuple[str, ...],
    extra_params: tuple[str, ...],
    rpc_eth: bool,
    ensure_setter: bool,
    dry_run_estimate_gas: bool,
    estimate_gas_from_addr: Optional[str],
    gas_limit: Optional[int],
    abi_filepath: Optional[Path],
    rpc_url: Optional[str],
    check_contract: bool,
    log_level: str,
) -> None:
    """Runner/Executor of target smart contract on EVM-based chain at command line."""
    configure_logging(log_level)
    start = time.perf_counter()

    try:
        result = _execute(
            contract_address=contract_address,
            chain=chain,
            fn_name=fn_name,
            fn_ret_type=fn_ret_type,
            params=(*params, *extra_params),
            rpc_eth=rpc_eth,
            ensure_setter=ensure_setter,
            dry_run_estimate_gas=dry_run_estimate_gas,
            estimate_gas_from_addr=estimate_gas_from_addr,
            gas_limit=gas_limit,
            abi_filepath=abi_filepath,
            rpc_url=rpc_url,
            check_contract=check_contract,
        )
    except CrunnerError as exc:
        click.secho(f"Error: {exc}", fg="red", err=True)
        sys.exit(exc.exit_code)

    click.echo(render(result))
    logger.debug("elapsed = %.2f secs", time.perf_counter() - start)


def _execute(
    *,
    contract_address: str,
    chain: str,
    fn_name: str,
    fn_ret_type: Optional[str],
    params: tuple[str, ...],
    rpc_eth: bool,
    ensure_setter: bool,
    dry_run_estimate_gas: bool,
    estimate_gas_from_addr: Optional[str],
    gas_limit: Optional[int],
    abi_filepath: Optional[Path],
    rpc_url: Optional[str],
    check_contract: bool,
) -> DispatchResult:
    mode = resolve_mode(
        ensure_setter=ensure_setter,
        dry_run_estimate_gas=dry_run_estimate_gas,
        rpc_eth=rpc_eth,
    )

    signer: Optional[LocalSigner] = None
    sender: Union[str, Callable[[], str], None] = estimate_gas_from_addr
    if mode is CallMode.SET:
        try:
            signer = LocalSigner.from_env()
        except ValueError as exc:
            logger.debug("no setter key: %s", exc)
        sender = (lambda: signer.address) if signer else None

    abi = combine_abi(load_abi_file(abi_filepath) if abi_filepath else None)
    request = build_request(
        contract_address=contract_address,
        fn_name=fn_name,
        mode=mode,
        params=params,
        return_type=fn_ret_type,
        sender=sender,
        gas_limit=gas_limit,
        abi=abi,
    )

    endpoint = resolve_chain(chain, rpc_url)
    with JsonRpcClient(endpoint.rpc_url, timeout=rpc_timeout()) as client:
        if check_contract and mode is not CallMode.RPC_ETH:
            ensure_contract(client, request.contract)
        dispatcher = Dispatcher(client, endpoint.chain_id, signer=signer)
        return dispatcher.dispatch(request)


# ============ Entry Points ============


def main() -> None:
    """crunner CLI entry point."""
    load_env_file()
    cli()


if __name__ == "__main__":
    main()
