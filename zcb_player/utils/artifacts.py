import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog
from eth_typing import HexStr

from zcb_player.constants import (
    ARTIFACT_PATHS,
    DEFAULT_ARTIFACTS_DIR,
    ENV_ARTIFACTS_DIR,
    ArtifactPaths,
    ContractType,
)
from zcb_player.exceptions.config import ArtifactNotFound, MalformedArtifact

log = structlog.get_logger(__name__)

ABI = List[Dict[str, Any]]


@dataclass(frozen=True)
class ContractArtifact:
    contract_type: ContractType
    bytecode: HexStr
    abi: ABI


def resolve_contract_type(contract_type: Union[ContractType, str]) -> ContractType:
    """Return the :class:`ContractType` for the given member, name or value.

    Both ``"ZCB_ISSUER"`` and ``"zcb-issuer"`` resolve to :attr:`ContractType.ZCB_ISSUER`.

    :raises ArtifactNotFound: if the identifier is not part of the known contract types.
    """
    if isinstance(contract_type, ContractType):
        return contract_type
    if isinstance(contract_type, str):
        try:
            return ContractType[contract_type.upper()]
        except KeyError:
            pass
        try:
            return ContractType(contract_type.lower())
        except ValueError:
            pass
    raise ArtifactNotFound(f"Unknown contract type: {contract_type!r}")


def default_artifacts_dir() -> Path:
    return Path(os.environ.get(ENV_ARTIFACTS_DIR, DEFAULT_ARTIFACTS_DIR))


def artifact_paths(
    contract_type: Union[ContractType, str], artifacts_dir: Optional[Path] = None
) -> ArtifactPaths:
    """Return the absolute `.bin` and `.abi` paths for the given contract type."""
    paths = ARTIFACT_PATHS[resolve_contract_type(contract_type)]
    root = Path(artifacts_dir) if artifacts_dir is not None else default_artifacts_dir()
    return ArtifactPaths(bin=root.joinpath(paths.bin), abi=root.joinpath(paths.abi))


def load_artifact(
    contract_type: Union[ContractType, str], artifacts_dir: Optional[Path] = None
) -> ContractArtifact:
    """Load the compiled bytecode and ABI of a contract from disk.

    The `.bin` file holds the hex encoded bytecode without a ``0x`` prefix,
    the `.abi` file the JSON interface description of the same build.

    :raises ArtifactNotFound:
        if the contract type is unknown.

    :raises MalformedArtifact:
        if the ABI file's contents cannot be loaded using the :mod:`json`
        module, or do not describe a list of ABI entries.

    Errors reading either file (:exc:`FileNotFoundError` et al.) are not handled.
    """
    resolved = resolve_contract_type(contract_type)
    paths = artifact_paths(resolved, artifacts_dir)

    bytecode = paths.bin.read_text().strip()
    if bytecode.startswith("0x"):
        bytecode = bytecode[2:]

    try:
        abi = json.loads(paths.abi.read_text())
    except json.JSONDecodeError as e:
        raise MalformedArtifact(f"ABI file {paths.abi} is corrupted!") from e

    if not isinstance(abi, list):
        raise MalformedArtifact(f"ABI file {paths.abi} does not contain a list of ABI entries!")

    log.debug("Loaded contract artifact", contract_type=resolved.name, abi_path=str(paths.abi))
    return ContractArtifact(contract_type=resolved, bytecode=HexStr("0x" + bytecode), abi=abi)
