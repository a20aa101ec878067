from typing import Any, Sequence

import structlog
from eth_typing import HexStr
from eth_utils import encode_hex, remove_0x_prefix

from zcb_player.chain.client import ChainClient
from zcb_player.chain.types import Account, DeployedContract, TransactionRequest
from zcb_player.constants import DEPLOY_GAS_LIMIT
from zcb_player.exceptions import DeploymentFailed
from zcb_player.utils.abi import ABI, ContractInterface
from zcb_player.utils.artifacts import ContractArtifact

log = structlog.get_logger(__name__)


def build_deployment_data(abi: ABI, bytecode: str, constructor_args: Sequence[Any] = ()) -> HexStr:
    """Return the init code: the contract's bytecode followed by its encoded constructor args."""
    encoded_args = ContractInterface(abi).encode_constructor(constructor_args)
    return HexStr("0x" + remove_0x_prefix(HexStr(bytecode)) + encoded_args.hex())


def deploy(
    client: ChainClient,
    account: Account,
    abi: ABI,
    bytecode: str,
    constructor_args: Sequence[Any] = (),
    gas_limit: int = DEPLOY_GAS_LIMIT,
) -> DeployedContract:
    """Deploy a contract and wait until its creation is mined.

    The transaction is sent with a fixed gas ceiling and the ledger's current
    gas price. There are no retries.

    :raises DeploymentFailed:
        if the gas price lookup, submission or confirmation fails, or the
        receipt carries no contract address.
    """
    try:
        data = build_deployment_data(abi, bytecode, constructor_args)
        gas_price = client.gas_price()
        log.debug("Deploying contract", sender=account.address, gas_price=gas_price)

        request = TransactionRequest(
            sender=account.address,
            data=data,
            gas=gas_limit,
            gas_price=gas_price,
            nonce=client.get_nonce(account.address),
            chain_id=client.chain_id,
        )
        result = client.send_signed(client.sign_transaction(account, request))
    except Exception as e:
        log.error("Error deploying contract", sender=account.address, error=str(e))
        raise DeploymentFailed(f"Deployment from {account.address} failed: {e}") from e

    if result.contract_address is None:
        log.error("Deployment receipt has no contract address", receipt=result)
        raise DeploymentFailed(
            f"Transaction {encode_hex(result.transaction_hash)} did not create a contract"
        )

    log.info("Contract deployed", address=result.contract_address, block=result.block_number)
    return DeployedContract(
        contract_address=result.contract_address,
        issuer=account.address,
        abi=abi,
        transaction_hash=result.transaction_hash,
        block_number=result.block_number,
    )


def deploy_artifact(
    client: ChainClient,
    account: Account,
    artifact: ContractArtifact,
    constructor_args: Sequence[Any] = (),
    gas_limit: int = DEPLOY_GAS_LIMIT,
) -> DeployedContract:
    log.info("Deploying artifact", contract_type=artifact.contract_type.name)
    return deploy(client, account, artifact.abi, artifact.bytecode, constructor_args, gas_limit)
