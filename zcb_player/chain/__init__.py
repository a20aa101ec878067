from zcb_player.chain.client import ChainClient
from zcb_player.chain.deployer import deploy, deploy_artifact
from zcb_player.chain.events import LogDecoder
from zcb_player.chain.transactions import TransactionSubmitter
from zcb_player.chain.types import (
    Account,
    BlockInfo,
    DeployedContract,
    LogEntry,
    TransactionRequest,
    TransactionResult,
    TransactionStatus,
)

__all__ = [
    "Account",
    "BlockInfo",
    "ChainClient",
    "DeployedContract",
    "LogDecoder",
    "LogEntry",
    "TransactionRequest",
    "TransactionResult",
    "TransactionStatus",
    "TransactionSubmitter",
    "deploy",
    "deploy_artifact",
]
