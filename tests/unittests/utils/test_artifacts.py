import pytest

from zcb_player.constants import ARTIFACT_PATHS, ENV_ARTIFACTS_DIR, ContractType
from zcb_player.exceptions import ArtifactNotFound, ConfigurationError, MalformedArtifact
from zcb_player.utils.artifacts import (
    artifact_paths,
    default_artifacts_dir,
    load_artifact,
    resolve_contract_type,
)


class TestResolveContractType:
    @pytest.mark.parametrize(
        "identifier, expected",
        argvalues=[
            (ContractType.ZCB_ISSUER, ContractType.ZCB_ISSUER),
            ("ZCB_ISSUER", ContractType.ZCB_ISSUER),
            ("zcb_issuer", ContractType.ZCB_ISSUER),
            ("zcb-issuer", ContractType.ZCB_ISSUER),
            ("USDT", ContractType.USDT),
            ("usdc", ContractType.USDC),
            ("zcb", ContractType.ZCB),
        ],
    )
    def test_accepts_members_names_and_values(self, identifier, expected):
        assert resolve_contract_type(identifier) is expected

    @pytest.mark.parametrize("identifier", ["DAI", "", None, 1])
    def test_unknown_identifiers_raise_artifact_not_found(self, identifier):
        with pytest.raises(ArtifactNotFound):
            resolve_contract_type(identifier)

    def test_artifact_not_found_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            resolve_contract_type("DAI")


def test_artifact_paths_are_resolved_against_the_given_root(tmp_path):
    paths = artifact_paths("USDT", tmp_path)
    assert paths.bin == tmp_path.joinpath(ARTIFACT_PATHS[ContractType.USDT].bin)
    assert paths.abi == tmp_path.joinpath(ARTIFACT_PATHS[ContractType.USDT].abi)


@pytest.mark.parametrize("contract_type", list(ContractType))
def test_every_contract_type_has_artifact_paths(contract_type, tmp_path):
    paths = artifact_paths(contract_type, tmp_path)
    assert paths.bin.suffix == ".bin"
    assert paths.abi.suffix == ".abi"


def test_artifact_paths_of_unknown_types_raise(tmp_path):
    with pytest.raises(ArtifactNotFound):
        artifact_paths("DAI", tmp_path)


def test_default_artifacts_dir_is_read_from_the_environment(monkeypatch, tmp_path):
    monkeypatch.setenv(ENV_ARTIFACTS_DIR, str(tmp_path))
    assert default_artifacts_dir() == tmp_path
    assert str(artifact_paths(ContractType.USDC).bin).startswith(str(tmp_path))


class TestLoadArtifact:
    def test_loads_bytecode_and_abi(self, artifacts_dir, issuer_abi):
        artifact = load_artifact(ContractType.ZCB_ISSUER, artifacts_dir)
        assert artifact.contract_type is ContractType.ZCB_ISSUER
        assert artifact.abi == issuer_abi
        assert artifact.bytecode.startswith("0x6080")

    def test_bytecode_is_prefixed_exactly_once(self, artifacts_dir):
        bin_path = artifact_paths(ContractType.USDT, artifacts_dir).bin
        bin_path.write_text("0x6080")
        assert load_artifact("USDT", artifacts_dir).bytecode == "0x6080"

    def test_trailing_whitespace_is_stripped(self, artifacts_dir):
        bin_path = artifact_paths(ContractType.USDT, artifacts_dir).bin
        bin_path.write_text("  6080\n\n")
        assert load_artifact("USDT", artifacts_dir).bytecode == "0x6080"

    def test_artifacts_are_loaded_fresh_on_every_call(self, artifacts_dir):
        first = load_artifact("USDC", artifacts_dir)
        artifact_paths("USDC", artifacts_dir).abi.write_text("[]")
        second = load_artifact("USDC", artifacts_dir)
        assert first.abi != second.abi
        assert second.abi == []

    def test_corrupted_abi_raises_malformed_artifact(self, artifacts_dir):
        artifact_paths("ZCB", artifacts_dir).abi.write_text("{not json")
        with pytest.raises(MalformedArtifact):
            load_artifact("ZCB", artifacts_dir)

    def test_abi_that_is_not_a_list_raises_malformed_artifact(self, artifacts_dir):
        artifact_paths("ZCB", artifacts_dir).abi.write_text('{"type": "function"}')
        with pytest.raises(MalformedArtifact):
            load_artifact("ZCB", artifacts_dir)

    def test_missing_files_are_not_handled(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_artifact(ContractType.ZCB_ISSUER, tmp_path)

    def test_unknown_contract_type_raises_before_touching_the_disk(self, tmp_path):
        with pytest.raises(ArtifactNotFound):
            load_artifact("DAI", tmp_path)
