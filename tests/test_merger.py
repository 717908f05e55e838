"""Tests for merging chain reads with directory data."""

from custos.core.types import AgentOnChainRecord
from custos.directory.fallback import EMPTY_FALLBACK, FALLBACK_DIRECTORY
from custos.directory.merger import merge_agent_record
from custos.directory.types import DirectoryEntry

H1 = "0x" + "11" * 32
H2 = "0x" + "22" * 32


def _chain(**overrides) -> AgentOnChainRecord:
    values = dict(
        agent_id=3,
        wallet="0x6758360d6182d5e78b86c59d7b6bdbfa4093a539",
        role_level=2,
        role="VALIDATOR",
        cycle_count=42,
        chain_head=H1,
        active=True,
    )
    values.update(overrides)
    return AgentOnChainRecord(**values)


def _entry(**overrides) -> DirectoryEntry:
    values = dict(handle="auctobot", agent_id=3, wallet="0xABCDEF0000000000000000000000000000000001")
    values.update(overrides)
    return DirectoryEntry(**values)


class TestChainHead:

    def test_direct_read_wins(self):
        profile = merge_agent_record(3, _chain(chain_head=H1), _entry(), chain_head=H2)
        assert profile.chain_head == H2

    def test_struct_head_when_direct_missing(self):
        profile = merge_agent_record(3, _chain(chain_head=H1), _entry(), chain_head=None)
        assert profile.chain_head == H1

    def test_direct_read_without_struct(self):
        profile = merge_agent_record(3, None, _entry(), chain_head=H2)
        assert profile.chain_head == H2

    def test_absent_everywhere(self):
        assert merge_agent_record(3, None, _entry()).chain_head is None


class TestWallet:

    def test_chain_wallet_preferred(self):
        profile = merge_agent_record(3, _chain(), _entry())
        assert profile.wallet == "0x6758360d6182d5e78b86c59d7b6bdbfa4093a539"

    def test_directory_wallet_when_chain_missing(self):
        profile = merge_agent_record(3, None, _entry())
        assert profile.wallet == "0xabcdef0000000000000000000000000000000001"

    def test_fallback_wallet_when_entry_has_none(self):
        profile = merge_agent_record(3, None, _entry(wallet=None), fallback=FALLBACK_DIRECTORY)
        assert profile.wallet == "0x6758360d6182d5e78b86c59d7b6bdbfa4093a539"

    def test_empty_when_unknown(self):
        assert merge_agent_record(77, None, None, fallback=FALLBACK_DIRECTORY).wallet == ""


class TestDefaults:

    def test_neutral_values_without_chain(self):
        profile = merge_agent_record(3, None, _entry())

        assert profile.role == "INSCRIBER"
        assert profile.role_level == 0
        assert profile.cycle_count == 0
        assert profile.active is False
        assert profile.on_chain is False

    def test_chain_values_carried(self):
        profile = merge_agent_record(3, _chain(active=False, cycle_count=0), _entry())

        assert profile.role == "VALIDATOR"
        assert profile.role_level == 2
        assert profile.active is False
        assert profile.cycle_count == 0
        assert profile.on_chain is True

    def test_agent_id_is_requested_id(self):
        assert merge_agent_record(9, None, None).agent_id == 9


class TestMetadata:

    def test_entry_fields(self):
        entry = _entry(purpose="Trades", token_symbol="ABC", token_address="0xtoken")
        profile = merge_agent_record(3, _chain(), entry, fallback=FALLBACK_DIRECTORY)

        assert profile.handle == "auctobot"
        assert profile.purpose == "Trades"
        assert profile.token_symbol == "ABC"
        assert profile.token_address == "0xtoken"

    def test_fallback_fills_missing_fields(self):
        profile = merge_agent_record(1, None, None, fallback=FALLBACK_DIRECTORY)

        assert profile.handle == "custos"
        assert profile.token_symbol == "CUSTOS"
        assert profile.token_address == "0xF3e20293514d775a3149C304820d9E6a6FA29b07"
        assert profile.purpose.startswith("Coordinating intelligence")

    def test_empty_fallback(self):
        profile = merge_agent_record(1, None, None, fallback=EMPTY_FALLBACK)
        assert profile.handle is None
        assert profile.token_symbol is None

    def test_inputs_not_modified(self):
        chain = _chain()
        entry = _entry(purpose=None)
        merge_agent_record(3, chain, entry, chain_head=H2, fallback=FALLBACK_DIRECTORY)

        assert chain.chain_head == H1
        assert entry.purpose is None
        assert entry.wallet == "0xABCDEF0000000000000000000000000000000001"

    def test_to_dict_keys(self):
        data = merge_agent_record(3, _chain(), _entry()).to_dict()
        assert data["agentId"] == 3
        assert data["cycleCount"] == 42
        assert data["chainHead"] == H1
        assert "on_chain" not in data

    def test_links(self):
        profile = merge_agent_record(3, _chain(), _entry())
        assert profile.profile_url == "https://agents.claws.tech/auctobot"
        assert profile.explorer_url == (
            "https://basescan.org/address/0x6758360d6182d5e78b86c59d7b6bdbfa4093a539"
        )

    def test_links_absent(self):
        profile = merge_agent_record(77, None, None)
        assert profile.profile_url is None
        assert profile.explorer_url is None
