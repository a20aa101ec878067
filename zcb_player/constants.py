from enum import Enum
from pathlib import Path
from typing import Dict, NamedTuple


class ContractType(Enum):
    ZCB_ISSUER = "zcb-issuer"
    ZCB = "zcb"
    USDT = "usdt"
    USDC = "usdc"


class ArtifactPaths(NamedTuple):
    bin: Path
    abi: Path


#: Location of the compiled contract artifacts, relative to the artifacts root.
ARTIFACT_PATHS: Dict[ContractType, ArtifactPaths] = {
    ContractType.ZCB_ISSUER: ArtifactPaths(
        bin=Path(
            "zcb-v2/artefacts/zcb-issuer/bin/"
            "contracts_zcb-v2_ZeroCouponBondsIssuerV1_AmetFinance_sol_"
            "Zero_Coupon_Bond_Issuer_V1.bin"
        ),
        abi=Path(
            "zcb-v2/artefacts/zcb-issuer/abi/"
            "contracts_zcb-v2_ZeroCouponBondsIssuerV1_AmetFinance_sol_"
            "Zero_Coupon_Bond_Issuer_V1.abi"
        ),
    ),
    ContractType.ZCB: ArtifactPaths(
        bin=Path(
            "zcb-v2/artefacts/zcb/bin/"
            "contracts_zcb-v2_ZeroCouponBondsV1_AmetFinance_sol_ZeroCouponBondsV1_AmetFinance.bin"
        ),
        abi=Path(
            "zcb-v2/artefacts/zcb/abi/"
            "contracts_zcb-v2_ZeroCouponBondsV1_AmetFinance_sol_ZeroCouponBondsV1_AmetFinance.abi"
        ),
    ),
    ContractType.USDT: ArtifactPaths(
        bin=Path("tokens/artefacts/USDT/bin/contracts_tokens_USDT_sol_USDT.bin"),
        abi=Path("tokens/artefacts/USDT/abi/contracts_tokens_USDT_sol_USDT.abi"),
    ),
    ContractType.USDC: ArtifactPaths(
        bin=Path("tokens/artefacts/USDC/bin/contracts_tokens_USDC_sol_USDC.bin"),
        abi=Path("tokens/artefacts/USDC/abi/contracts_tokens_USDC_sol_USDC.abi"),
    ),
}

DEFAULT_ARTIFACTS_DIR = Path("contracts")
DEFAULT_CHAIN = "tester"
DEFAULT_CONTRACT_TYPE = ContractType.ZCB_ISSUER

#: Environment variables read by the CLI.
ENV_ARTIFACTS_DIR = "ZCB_ARTIFACTS_DIR"
ENV_CHAIN = "ZCB_CHAIN"
ENV_CONTRACT_TYPE = "ZCB_CONTRACT_TYPE"
ENV_PRIVATE_KEY = "ZCB_PRIVATE_KEY"

#: Gas ceiling for contract creation. A safety cap, not a cost estimate.
DEPLOY_GAS_LIMIT = 30_000_000

#: Event decoded from transactions sent to the issuer contract.
ISSUER_CREATE_EVENT = "Create"
DEFAULT_DECODED_EVENTS = (ISSUER_CREATE_EVENT,)

#: Name under which the issuer contract is known in a scenario.
ISSUER_CONTRACT_NAME = "issuer"

#: Prefix marking a reference to a deployed contract or stored value in task arguments.
REFERENCE_PREFIX = "$"
ACCOUNTS_REFERENCE = "accounts"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
