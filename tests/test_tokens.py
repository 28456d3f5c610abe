"""
Tests for ERC20 and ERC721 token helpers.
"""

from decimal import Decimal
from unittest.mock import patch

import pytest
from eth_utils import to_checksum_address

from conftest import (
    PRIVATE_KEY,
    RECIPIENT,
    SPENDER,
    TOKEN_MAINNET,
    TOKEN_SEPOLIA,
    FakeBackend,
    abi_output,
    make_receipt,
)
from hope_ethereum import (
    ERC20,
    ERC721,
    ZERO_ADDRESS,
    EthereumClient,
    EthereumContract,
    FunctionMessage,
    InconclusiveResultError,
    InvalidAddressError,
    Network,
    ResultState,
    ValidationError,
    get_network_config,
)
from hope_ethereum.signing import sign_transaction


# =============================================================================
# EthereumContract
# =============================================================================


class TestContractAddress:
    """Tests for per-network contract addresses."""

    def test_mainnet_and_sepolia(self) -> None:
        contract = EthereumContract(TOKEN_MAINNET, TOKEN_SEPOLIA)

        assert contract.contract_address(get_network_config(Network.MAINNET)) == TOKEN_MAINNET
        assert contract.contract_address(get_network_config(Network.SEPOLIA)) == TOKEN_SEPOLIA

    def test_missing_address(self) -> None:
        contract = EthereumContract(TOKEN_MAINNET)

        with pytest.raises(ValidationError, match="No sepolia address"):
            contract.contract_address(get_network_config(Network.SEPOLIA))

    def test_invalid_address(self) -> None:
        with pytest.raises(InvalidAddressError):
            EthereumContract("0xabc")


# =============================================================================
# ERC20
# =============================================================================


@pytest.fixture
def dai(client: EthereumClient) -> ERC20:
    return ERC20(client, TOKEN_MAINNET, TOKEN_SEPOLIA)


class TestERC20Queries:
    """Tests for ERC20 reads."""

    @pytest.mark.asyncio
    async def test_load_details(self, dai: ERC20, backend: FakeBackend) -> None:
        backend.respond("name()", abi_output(["string"], ["Dai Stablecoin"]))
        backend.respond("symbol()", abi_output(["string"], ["DAI"]))
        backend.respond("decimals()", abi_output(["uint8"], [18]))

        token = await dai.load_details().wait(timeout=1)

        assert token is dai
        assert (dai.name, dai.symbol, dai.decimals) == ("Dai Stablecoin", "DAI", 18)
        assert {c["to"] for c in backend.calls} == {TOKEN_SEPOLIA}

    @pytest.mark.asyncio
    async def test_load_details_failure(self, dai: ERC20, backend: FakeBackend) -> None:
        backend.respond("name()", abi_output(["string"], ["Dai Stablecoin"]))

        with pytest.raises(InconclusiveResultError):
            await dai.load_details().wait(timeout=1)

    @pytest.mark.asyncio
    async def test_balance_of_queries_decimals_first(self, dai: ERC20, backend: FakeBackend) -> None:
        backend.respond("decimals()", abi_output(["uint8"], [6]))
        backend.respond("balanceOf(address)", abi_output(["uint256"], [12_500_000]))

        balance = await dai.query_balance_of(RECIPIENT).wait(timeout=1)

        assert balance == Decimal("12.5")
        assert dai.decimals == 6
        assert len(backend.calls) == 2

    @pytest.mark.asyncio
    async def test_zero_balance_is_valid(self, client: EthereumClient, backend: FakeBackend) -> None:
        token = ERC20(client, TOKEN_MAINNET, TOKEN_SEPOLIA, decimals=18)
        backend.respond("balanceOf(address)", abi_output(["uint256"], [0]))

        assert await token.query_balance_of(RECIPIENT).wait(timeout=1) == Decimal(0)
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_balance_of_empty_response(self, dai: ERC20, backend: FakeBackend) -> None:
        """A contract without the function is an error, not a zero balance."""
        backend.respond("decimals()", abi_output(["uint8"], [18]))

        with pytest.raises(InconclusiveResultError):
            await dai.query_balance_of(RECIPIENT).wait(timeout=1)

    @pytest.mark.asyncio
    async def test_total_supply_and_allowance(self, dai: ERC20, backend: FakeBackend) -> None:
        backend.respond("totalSupply()", abi_output(["uint256"], [10**24]))
        backend.respond("allowance(address,address)", abi_output(["uint256"], [0]))

        assert await dai.query_total_supply().wait(timeout=1) == 10**24
        assert await dai.query_allowance(RECIPIENT, SPENDER).wait(timeout=1) == 0

    def test_missing_network_address(self, client: EthereumClient, backend: FakeBackend) -> None:
        token = ERC20(client, TOKEN_MAINNET)

        op = token.query_symbol()

        assert op.state == ResultState.FAILED
        assert isinstance(op.error, ValidationError)
        assert backend.calls == []

    def test_invalid_owner(self, dai: ERC20, backend: FakeBackend) -> None:
        op = dai.query_balance_of("0x1")

        assert isinstance(op.error, InvalidAddressError)


class TestERC20Transactions:
    """Tests for ERC20 writes."""

    @pytest.mark.asyncio
    async def test_transfer(self, client: EthereumClient, backend: FakeBackend) -> None:
        token = ERC20(client, TOKEN_MAINNET, TOKEN_SEPOLIA, decimals=18)
        backend.receipts = [make_receipt()]

        with patch("hope_ethereum.client.sign_transaction", wraps=sign_transaction) as signer:
            tracker = await token.transfer(PRIVATE_KEY, RECIPIENT, "1.5")
            await tracker.wait(timeout=1)

        expected = FunctionMessage(
            "transfer", ("address", "uint256"), (RECIPIENT, 1_500_000_000_000_000_000)
        ).encode()
        assert signer.call_args.args[2] == TOKEN_SEPOLIA
        assert signer.call_args.args[7] == expected

    @pytest.mark.asyncio
    async def test_approve_loads_decimals(self, dai: ERC20, backend: FakeBackend) -> None:
        backend.respond("decimals()", abi_output(["uint8"], [6]))
        backend.receipts = [make_receipt()]

        tracker = await dai.approve(PRIVATE_KEY, SPENDER, 2)
        await tracker.wait(timeout=1)

        approve = FunctionMessage("approve", ("address", "uint256"), (SPENDER, 2_000_000)).encode()
        assert backend.estimates[0]["data"] == approve

    @pytest.mark.asyncio
    async def test_transfer_from(self, client: EthereumClient, backend: FakeBackend) -> None:
        token = ERC20(client, TOKEN_MAINNET, TOKEN_SEPOLIA, decimals=0)
        backend.receipts = [make_receipt()]

        tracker = await token.transfer_from(PRIVATE_KEY, SPENDER, RECIPIENT, 3)
        await tracker.wait(timeout=1)

        data = backend.estimates[0]["data"]
        assert data == FunctionMessage(
            "transferFrom", ("address", "address", "uint256"), (SPENDER, RECIPIENT, 3)
        ).encode()

    @pytest.mark.asyncio
    async def test_decimals_failure_fails_tracker(self, dai: ERC20, backend: FakeBackend) -> None:
        tracker = await dai.transfer(PRIVATE_KEY, RECIPIENT, "1")

        assert isinstance(tracker.error, InconclusiveResultError)
        assert backend.sent == []

    @pytest.mark.asyncio
    async def test_invalid_recipient(self, dai: ERC20, backend: FakeBackend) -> None:
        tracker = await dai.transfer(PRIVATE_KEY, "nobody", "1")

        assert isinstance(tracker.error, InvalidAddressError)
        assert backend.calls == []


# =============================================================================
# ERC721
# =============================================================================


@pytest.fixture
def kitties(client: EthereumClient) -> ERC721:
    return ERC721(client, TOKEN_MAINNET, TOKEN_SEPOLIA)


class TestERC721:
    """Tests for ERC721 reads and writes."""

    def test_has_no_decimals(self, kitties: ERC721) -> None:
        assert kitties.decimals == 0

    @pytest.mark.asyncio
    async def test_owner_of(self, kitties: ERC721, backend: FakeBackend) -> None:
        backend.respond("ownerOf(uint256)", abi_output(["address"], [RECIPIENT]))

        owner = await kitties.query_owner_of(7).wait(timeout=1)

        assert owner == to_checksum_address(RECIPIENT)

    @pytest.mark.asyncio
    async def test_zero_owner_is_inconclusive(self, kitties: ERC721, backend: FakeBackend) -> None:
        backend.respond("ownerOf(uint256)", abi_output(["address"], [ZERO_ADDRESS]))

        with pytest.raises(InconclusiveResultError):
            await kitties.query_owner_of(7).wait(timeout=1)

    @pytest.mark.asyncio
    async def test_no_approved_address_is_valid(self, kitties: ERC721, backend: FakeBackend) -> None:
        backend.respond("getApproved(uint256)", abi_output(["address"], [ZERO_ADDRESS]))

        assert await kitties.query_get_approved(7).wait(timeout=1) == ZERO_ADDRESS

    @pytest.mark.asyncio
    async def test_reads(self, kitties: ERC721, backend: FakeBackend) -> None:
        backend.respond("balanceOf(address)", abi_output(["uint256"], [0]))
        backend.respond("tokenURI(uint256)", abi_output(["string"], ["ipfs://kitty/7"]))
        backend.respond("isApprovedForAll(address,address)", abi_output(["bool"], [False]))

        assert await kitties.query_balance_of(RECIPIENT).wait(timeout=1) == 0
        assert await kitties.query_token_uri(7).wait(timeout=1) == "ipfs://kitty/7"
        assert await kitties.query_is_approved_for_all(RECIPIENT, SPENDER).wait(timeout=1) is False

    @pytest.mark.asyncio
    async def test_safe_transfer_from(self, kitties: ERC721, backend: FakeBackend) -> None:
        backend.receipts = [make_receipt()]

        tracker = await kitties.safe_transfer_from(PRIVATE_KEY, SPENDER, RECIPIENT, 7)
        outcome = await tracker.wait(timeout=1)

        assert outcome.succeeded is True
        assert backend.estimates[0]["data"] == FunctionMessage(
            "safeTransferFrom", ("address", "address", "uint256"), (SPENDER, RECIPIENT, 7)
        ).encode()

    @pytest.mark.asyncio
    async def test_approve_and_set_approval_for_all(self, kitties: ERC721, backend: FakeBackend) -> None:
        backend.receipts = [make_receipt(), make_receipt()]

        approve = await kitties.approve(PRIVATE_KEY, SPENDER, 7)
        await approve.wait(timeout=1)
        approval = await kitties.set_approval_for_all(PRIVATE_KEY, SPENDER, True)
        await approval.wait(timeout=1)

        assert len(backend.sent) == 2

    @pytest.mark.asyncio
    async def test_invalid_operator(self, kitties: ERC721, backend: FakeBackend) -> None:
        tracker = await kitties.set_approval_for_all(PRIVATE_KEY, "0xzz", True)

        assert isinstance(tracker.error, InvalidAddressError)
        assert backend.estimates == []


class TestERC721Enumeration:
    """Tests for the enumerable extension and transfer data."""

    @pytest.mark.asyncio
    async def test_total_supply(self, kitties: ERC721, backend: FakeBackend) -> None:
        backend.respond("totalSupply()", abi_output(["uint256"], [0]))

        assert await kitties.query_total_supply().wait(timeout=1) == 0

    @pytest.mark.asyncio
    async def test_token_by_index(self, kitties: ERC721, backend: FakeBackend) -> None:
        """Token ID 0 is a legitimate answer."""
        backend.respond("tokenByIndex(uint256)", abi_output(["uint256"], [0]))

        assert await kitties.query_token_by_index(0).wait(timeout=1) == 0
        assert backend.calls[0]["data"] == FunctionMessage("tokenByIndex", ("uint256",), (0,)).encode()

    @pytest.mark.asyncio
    async def test_token_of_owner_by_index(self, kitties: ERC721, backend: FakeBackend) -> None:
        backend.respond("tokenOfOwnerByIndex(address,uint256)", abi_output(["uint256"], [42]))

        assert await kitties.query_token_of_owner_by_index(RECIPIENT, 1).wait(timeout=1) == 42

    def test_token_of_owner_by_index_invalid_owner(self, kitties: ERC721, backend: FakeBackend) -> None:
        op = kitties.query_token_of_owner_by_index("0x1", 0)

        assert isinstance(op.error, InvalidAddressError)
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_safe_transfer_from_with_data(self, kitties: ERC721, backend: FakeBackend) -> None:
        backend.receipts = [make_receipt()]

        tracker = await kitties.safe_transfer_from(PRIVATE_KEY, SPENDER, RECIPIENT, 7, data=b"\x01\x02")
        await tracker.wait(timeout=1)

        assert backend.estimates[0]["data"] == FunctionMessage(
            "safeTransferFrom",
            ("address", "address", "uint256", "bytes"),
            (SPENDER, RECIPIENT, 7, b"\x01\x02"),
        ).encode()


class TestERC20Amounts:
    """Tests for amounts that cannot be converted."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["ten", float("inf")])
    async def test_bad_amount_fails_tracker(
        self, client: EthereumClient, backend: FakeBackend, amount: object
    ) -> None:
        token = ERC20(client, TOKEN_MAINNET, TOKEN_SEPOLIA, decimals=18)

        for tracker in (
            await token.transfer(PRIVATE_KEY, RECIPIENT, amount),
            await token.approve(PRIVATE_KEY, SPENDER, amount),
            await token.transfer_from(PRIVATE_KEY, SPENDER, RECIPIENT, amount),
        ):
            assert isinstance(tracker.error, ValidationError)

        assert backend.estimates == []
        assert backend.sent == []
