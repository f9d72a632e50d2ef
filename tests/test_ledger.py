"""
Unit tests for the toy ledger.

Tests:
- Sale creation and validation
- Block creation and linkage
- Proof of Work
- Chain validation
- Sales queries and summaries
- Seller id derivation
"""

import hashlib
import pytest

from cocoachain.errors import ChainValidationError, ProofOfWorkError, ValidationError
from cocoachain.ledger.blockchain import (
    Blockchain, Sale, block_data_json, average_price_per_kg,
    GENESIS_NONCE, GENESIS_PREV_HASH, GENESIS_HASH, DEFAULT_PREFIX
)
from cocoachain.ledger.sellers import generate_seller_id, is_wallet_address
from cocoachain.ledger.summary import summarize_sales, seller_stats, top_sellers
from cocoachain.backends.base import SaleRecord

HARDHAT_ACCOUNT = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


def _mined_chain(*sales):
    """Ledger with the given (seller, buyer, kg, price) sales mined into one block."""
    bc = Blockchain()
    for seller_id, buyer, kg, price in sales:
        bc.add_sale_to_pending(bc.create_sale(seller_id, buyer, kg, price))
    bc.mine()
    return bc


class TestGenesis:
    """Tests for ledger construction."""

    def test_genesis_block_created(self):
        """Ledger should start with the genesis block."""
        bc = Blockchain()
        assert bc.length == 1
        genesis = bc.chain[0]
        assert genesis.index == 0
        assert genesis.nonce == GENESIS_NONCE
        assert genesis.previous_block_hash == GENESIS_PREV_HASH
        assert genesis.hash == GENESIS_HASH
        assert genesis.sales == ()

    def test_node_url(self):
        bc = Blockchain("http://node-2:3002")
        assert bc.current_node_url == "http://node-2:3002"
        assert bc.network_nodes == []

    def test_block_immutable(self):
        """Blocks should be frozen."""
        bc = Blockchain()
        with pytest.raises(Exception):  # FrozenInstanceError
            bc.last_block.nonce = 1


class TestSales:
    """Tests for sale creation and the pending pool."""

    def test_create_sale(self):
        bc = Blockchain()
        sale = bc.create_sale("SEL1", "Alice", 100, 50)
        assert sale.seller_id == "SEL1"
        assert sale.buyer_name == "Alice"
        assert sale.revenue == 5000
        assert sale.timestamp > 0

    @pytest.mark.parametrize("args", [
        ("", "Alice", 10, 5),
        ("SEL1", "", 10, 5),
        ("SEL1", "Alice", 0, 5),
        ("SEL1", "Alice", -3, 5),
        ("SEL1", "Alice", 10, 0),
        ("SEL1", "Alice", 10, -1),
        ("SEL1", "Alice", "10", 5),
    ])
    def test_invalid_sale_rejected(self, args):
        """Missing names or non-positive amounts should be rejected."""
        bc = Blockchain()
        with pytest.raises(ValidationError):
            bc.create_sale(*args)

    def test_add_sale_returns_next_block_index(self):
        bc = Blockchain()
        index = bc.add_sale_to_pending(bc.create_sale("SEL1", "Alice", 1, 1))
        assert index == 1
        assert len(bc.pending_sales) == 1

    def test_empty_sale_rejected(self):
        bc = Blockchain()
        with pytest.raises(ValidationError):
            bc.add_sale_to_pending(None)

    def test_create_new_block_takes_pending(self):
        """A new block holds every pending sale and clears the pool."""
        bc = Blockchain()
        bc.add_sale_to_pending(bc.create_sale("SEL1", "Alice", 1, 1))
        bc.add_sale_to_pending(bc.create_sale("SEL1", "Bob", 2, 1))

        block = bc.create_new_block(7, bc.last_block.hash, "abc")

        assert block.index == 1
        assert len(block.sales) == 2
        assert bc.pending_sales == []
        assert bc.get_last_block() is block


class TestProofOfWork:
    """Tests for hashing and proof of work."""

    def test_block_data_json_is_compact(self):
        assert block_data_json({'a': 1, 'b': [1, 2]}) == '{"a":1,"b":[1,2]}'

    def test_block_data_json_whole_floats(self):
        """Whole-number floats are written without a fraction, decimals keep theirs."""
        assert block_data_json({'quantityKg': 100.0, 'price': 2.5}) == '{"quantityKg":100,"price":2.5}'
        assert block_data_json([-0.0, 3.0]) == '[0,3]'

    def test_float_and_int_sales_hash_alike(self):
        """A sale of 100.0 kg hashes the same as one of 100 kg."""
        bc = Blockchain()
        as_float = {'sales': [Sale("SEL1", "Alice", 100.0, 50.0, 1)], 'index': 1}
        as_int = {'sales': [Sale("SEL1", "Alice", 100, 50, 1)], 'index': 1}
        assert bc.hash_block('0', as_float, 7) == bc.hash_block('0', as_int, 7)

    def test_hash_block_matches_sha256(self):
        bc = Blockchain()
        data = {'sales': [], 'index': 1}
        expected = hashlib.sha256(
            ('0' + '42' + '{"sales":[],"index":1}').encode()
        ).hexdigest()
        assert bc.hash_block('0', data, 42) == expected

    def test_hash_block_deterministic(self):
        """Same inputs should give the same hash."""
        bc = Blockchain()
        data = {'sales': [{'sellerId': 'SEL1', 'quantityKg': 5}], 'index': 1}
        assert bc.hash_block('abc', data, 9) == bc.hash_block('abc', data, 9)
        assert bc.hash_block('abc', data, 9) != bc.hash_block('abc', data, 10)

    def test_proof_of_work_finds_prefix(self):
        bc = Blockchain()
        data = {'sales': [], 'index': 1}
        nonce = bc.proof_of_work('0', data)
        assert bc.hash_block('0', data, nonce).startswith(DEFAULT_PREFIX)

    def test_proof_of_work_is_smallest_nonce(self):
        """No smaller nonce should satisfy the prefix."""
        bc = Blockchain()
        data = {'sales': [], 'index': 1}
        nonce = bc.proof_of_work('0', data)
        for smaller in range(nonce):
            assert not bc.hash_block('0', data, smaller).startswith(DEFAULT_PREFIX)

    def test_proof_of_work_bounded(self):
        """An unreachable prefix should fail after max_nonce attempts."""
        bc = Blockchain(difficulty_prefix='0' * 64)
        with pytest.raises(ProofOfWorkError):
            bc.proof_of_work('0', {'index': 1}, max_nonce=50)


class TestMining:
    """Tests for mining and chain validation."""

    def test_mine_block(self):
        bc = Blockchain()
        bc.add_sale_to_pending(bc.create_sale("SEL1", "Alice", 10, 2))

        block = bc.mine()

        assert block.index == 1
        assert block.previous_block_hash == GENESIS_HASH
        assert block.hash.startswith(DEFAULT_PREFIX)
        assert bc.pending_sales == []

    def test_blocks_linked(self):
        """Blocks should be linked via previous_block_hash."""
        bc = Blockchain()
        bc.add_sale_to_pending(bc.create_sale("SEL1", "Alice", 1, 1))
        block1 = bc.mine()
        bc.add_sale_to_pending(bc.create_sale("SEL1", "Bob", 1, 1))
        block2 = bc.mine()

        assert block2.previous_block_hash == block1.hash

    def test_mine_empty_pool_rejected(self):
        bc = Blockchain()
        with pytest.raises(ValidationError):
            bc.mine()

    def test_validate_chain(self):
        """Mined chain should pass validation."""
        bc = Blockchain()
        for i in range(3):
            bc.add_sale_to_pending(bc.create_sale("SEL1", f"Buyer {i}", i + 1, 2))
            bc.mine()
        assert bc.validate_chain() is True

    def test_wrong_link_rejected(self):
        bc = Blockchain()
        bc.add_sale_to_pending(bc.create_sale("SEL1", "Alice", 1, 1))
        bc.mine()
        bc.create_new_block(0, "not-the-last-hash", "00ff")

        with pytest.raises(ChainValidationError):
            bc.validate_chain()

    def test_wrong_hash_rejected(self):
        """A block whose hash was not produced by proof of work is invalid."""
        bc = Blockchain()
        bc.add_sale_to_pending(bc.create_sale("SEL1", "Alice", 1, 1))
        bc.create_new_block(0, bc.last_block.hash, "00" + "f" * 62)

        with pytest.raises(ChainValidationError):
            bc.validate_chain()

    def test_to_dict(self):
        bc = _mined_chain(("SEL1", "Alice", 3, 4))
        data = bc.to_dict()
        assert len(data['chain']) == 2
        assert data['chain'][1]['sales'][0]['quantityKg'] == 3
        assert data['chain'][1]['previousBlockHash'] == GENESIS_HASH
        assert data['pendingSales'] == []


class TestQueries:
    """Tests for sale queries and the ledger summary."""

    def test_get_all_sales_only_mined(self):
        bc = _mined_chain(("SEL1", "Alice", 3, 4))
        bc.add_sale_to_pending(bc.create_sale("SEL1", "Bob", 1, 1))
        assert len(bc.get_all_sales()) == 1

    def test_get_seller_sales(self):
        bc = _mined_chain(
            ("SEL1", "Alice", 3, 4),
            ("SEL2", "Bob", 1, 1),
            ("SEL1", "Carol", 2, 2),
        )
        sales = bc.get_seller_sales("SEL1")
        assert [s.buyer_name for s in sales] == ["Alice", "Carol"]

    def test_sales_summary(self):
        bc = _mined_chain(
            ("SEL1", "Alice", 10, 2),
            ("SEL1", "Bob", 5, 4),
            ("SEL2", "Carol", 3, 10),
        )
        summary = bc.sales_summary()

        assert summary['summaryPerSeller']['SEL1'] == {'sales': 2, 'quantity': 15, 'revenue': 40}
        assert summary['summaryPerSeller']['SEL2'] == {'sales': 1, 'quantity': 3, 'revenue': 30}
        assert summary['totalCocoa'] == 18
        assert summary['totalRevenue'] == 70
        assert summary['averagePricePerKg'] == "3.89"

    def test_empty_summary(self):
        summary = Blockchain().sales_summary()
        assert summary['totalCocoa'] == 0
        assert summary['averagePricePerKg'] == 0

    def test_average_price(self):
        assert average_price_per_kg(100, 40) == "2.50"
        assert average_price_per_kg(0, 0) == 0


def _record(seller_id, kg, price, sale_id="0"):
    return SaleRecord(sale_id, seller_id, "Buyer", kg, price, 1700000000000)


class TestSummarizeSales:
    """Tests for the REST summary aggregation."""

    def test_totals_equal_sum_of_sellers(self):
        sales = [_record("A", 10, 2), _record("B", 3, 10), _record("A", 5, 4), _record("C", 1, 1)]
        body = summarize_sales(sales, sellers_count=3)
        stats = seller_stats(sales)

        assert body['summary']['totalSales'] == 4
        assert body['summary']['totalSellers'] == 3
        assert body['summary']['totalCocoaSold'] == sum(s['quantity'] for s in stats.values())
        assert body['summary']['totalRevenue'] == sum(s['revenue'] for s in stats.values())
        assert body['summary']['totalCocoaSold'] == 19
        assert body['summary']['totalRevenue'] == 71

    def test_top_sellers_ordered_by_revenue(self):
        sales = [_record("A", 10, 2), _record("B", 3, 10), _record("C", 1, 100)]
        top = summarize_sales(sales, 3)['topSellers']
        assert [t['sellerId'] for t in top] == ["C", "B", "A"]
        assert top[0] == {'sellerId': "C", 'sales': 1, 'quantity': 1, 'revenue': 100}

    def test_top_sellers_limited(self):
        stats = seller_stats([_record(f"S{i}", 1, i + 1) for i in range(8)])
        assert len(top_sellers(stats)) == 5
        assert len(top_sellers(stats, limit=2)) == 2

    def test_no_sales(self):
        body = summarize_sales([], 0)
        assert body['summary']['averagePricePerKg'] == 0
        assert body['topSellers'] == []


class TestSellerId:
    """Tests for seller id derivation."""

    def test_known_address(self):
        """Each of the first 7 bytes contributes byte % 16."""
        assert generate_seller_id(HARDHAT_ACCOUNT) == "SEL3f65ad8"

    def test_case_insensitive(self):
        assert generate_seller_id(HARDHAT_ACCOUNT.lower()) == generate_seller_id(HARDHAT_ACCOUNT)

    def test_without_prefix(self):
        assert generate_seller_id(HARDHAT_ACCOUNT[2:]) == "SEL3f65ad8"

    def test_length(self):
        assert len(generate_seller_id("0x" + "ab" * 20)) == 10

    @pytest.mark.parametrize("address", ["", "0x1234", "0x" + "zz" * 20, None])
    def test_invalid_address(self, address):
        assert not is_wallet_address(address)
        with pytest.raises(ValidationError):
            generate_seller_id(address)
