"""Tests for the partitioned TransactionStore."""

import io
import os

import pytest
from structlog.testing import capture_logs

from ledger.config import TransactionFileFormat
from ledger.models.transaction import (
    DateFormatError,
    Transaction,
    TransactionCategory,
    TransactionType,
)
from ledger.services.storage import FileAccessError, TransactionStore


SCENARIO = "bob,0,15/03/2024,0,Bonus,500.0\ncarol,1,01/01/2024,3,Lunch,-12.5"


def expense(date, category=TransactionCategory.FOOD, description="", amount=-1.0, username="bob"):
    return Transaction(
        username=username,
        type=TransactionType.EXPENSE,
        date=date,
        category=category,
        description=description,
        amount=amount,
    )


@pytest.fixture
def store():
    return TransactionStore(active_user="bob")


class TestLoad:
    """Tests for parsing and partitioning."""

    def test_scenario_partitions_by_user(self, store):
        """Test records are split between mine and others by username."""
        loaded = store.read_records(io.StringIO(SCENARIO))

        assert loaded == 1
        assert list(store) == [Transaction(
            username="bob",
            type=TransactionType.INCOME,
            date="15/03/2024",
            category=TransactionCategory.SALARY,
            description="Bonus",
            amount=500.0,
        )]
        assert list(store.others()) == [Transaction(
            username="carol",
            type=TransactionType.EXPENSE,
            date="01/01/2024",
            category=TransactionCategory.FOOD,
            description="Lunch",
            amount=-12.5,
        )]

    def test_partition_invariant(self, store):
        """Test every mine record is bob's and no others record is."""
        text = "\n".join([
            "bob,0,01/01/2024,0,a,1",
            "carol,1,02/01/2024,3,b,-2",
            "bob,1,03/01/2024,4,c,-3",
            "dave,0,04/01/2024,1,d,4",
            "bobby,0,05/01/2024,1,e,5",
        ])
        store.read_records(text.splitlines())

        assert all(t.username == "bob" for t in store)
        assert all(t.username != "bob" for t in store.others())
        assert len(store) + store.others_count == 5
        assert len(store) == 2

    def test_short_line_is_skipped(self, store):
        """Test a line with only 3 of 6 fields is dropped without error."""
        text = "bob,0,15/03/2024,0,Bonus,500.0\nbob,0,15/03/2024\n"
        loaded = store.read_records(io.StringIO(text))

        assert loaded == 1
        assert len(store) == 1
        assert store.skipped == 1

    @pytest.mark.parametrize("line", [
        "",
        "bob,x,15/03/2024,0,Bonus,500",
        "bob,0,15/03/2024,y,Bonus,500",
        "bob,0,15/03/2024,0,Bonus,lots",
        "bob,2,15/03/2024,0,Bonus,500",
        "bob,0,15/03/2024,9,Bonus,500",
    ])
    def test_malformed_lines_are_skipped(self, store, line):
        """Test non-numeric and out-of-range fields are skipped."""
        assert store.read_records([line]) == 0
        assert store.others_count == 0
        assert store.skipped == 1

    def test_skips_are_logged_and_counted(self, store):
        """Test the load summary reports skipped lines."""
        with capture_logs() as logs:
            store.read_records(["bob,0", "bob,0,15/03/2024,0,Bonus,500"])

        summary = [entry for entry in logs if entry["event"] == "transactions_loaded"]
        assert summary[0]["skipped"] == 1
        assert summary[0]["mine"] == 1

    def test_windows_line_endings(self, store):
        """Test CRLF terminators are stripped from the amount field."""
        store.read_records(io.StringIO("bob,0,15/03/2024,0,Bonus,500.0\r\n"))
        assert store.get(0).amount == 500.0

    def test_reload_replaces_contents(self, store):
        """Test loading twice does not duplicate records."""
        store.read_records(io.StringIO(SCENARIO))
        store.read_records(io.StringIO(SCENARIO))
        assert len(store) == 1
        assert store.others_count == 1

    def test_empty_source(self, store):
        """Test loading nothing gives an empty store."""
        assert store.read_records([]) == 0
        assert len(store) == 0

    def test_set_active_user_changes_partition(self):
        """Test the partition key is taken at load time."""
        store = TransactionStore()
        store.set_active_user("carol")
        assert store.active_user == "carol"
        store.read_records(io.StringIO(SCENARIO))
        assert [t.username for t in store] == ["carol"]

    def test_missing_file_raises_file_access_error(self, store, tmp_path):
        """Test an unreadable file surfaces as FileAccessError/IOError."""
        with pytest.raises(FileAccessError):
            store.load(tmp_path / "missing.csv")
        with pytest.raises(IOError):
            store.load(tmp_path / "missing.csv")

    def test_invalid_utf8_line_is_skipped(self, store, tmp_path):
        """Test a line with non-UTF-8 bytes is dropped, not raised."""
        path = tmp_path / "transactions.csv"
        path.write_bytes(
            b"bob,0,15/03/2024,0,Bonus,500.0\n"
            b"bob,1,01/01/2024,3,Caf\xe9,-1.0\n"
            b"carol,1,02/01/2024,3,Lunch,-12.5\n"
        )

        assert store.load(path) == 1
        assert store.skipped == 1
        assert store.others_count == 1
        assert [t.description for t in store] == ["Bonus"]

    def test_file_with_invalid_utf8_saves_as_utf8(self, store, tmp_path):
        """Test a store loaded from a damaged file writes clean UTF-8."""
        path = tmp_path / "transactions.csv"
        path.write_bytes(b"bob,1,01/01/2024,3,Caf\xe9,-1.0\nbob,0,15/03/2024,0,Bonus,500.0\n")
        store.load(path)
        store.save(path)

        assert path.read_bytes().decode("utf-8") == "bob,0,15/03/2024,0,Bonus,500.0\n"


class TestSave:
    """Tests for writing the transaction file."""

    def test_round_trip(self, store, tmp_path):
        """Test save then load reproduces mine in the same order."""
        records = [
            expense("03/01/2024", description="Coffee", amount=-3.75),
            Transaction(
                username="bob",
                type=TransactionType.INCOME,
                date="28/02/2024",
                category=TransactionCategory.GIFT,
                description="Birthday",
                amount=0.1 + 0.2,
            ),
            expense("01/01/2024", TransactionCategory.COMMUNICATION, "Phone bill", -1234567.891),
        ]
        for record in records:
            store.add(record)
        path = tmp_path / "transactions.csv"
        store.save(path)

        reloaded = TransactionStore(active_user="bob")
        assert reloaded.load(path) == 3
        assert list(reloaded) == records

    def test_mine_written_before_others(self, store, tmp_path):
        """Test the merged file lists mine first, then others."""
        store.read_records(io.StringIO("carol,1,01/01/2024,3,Lunch,-12.5\n"))
        store.add(expense("02/02/2024", description="Dinner", amount=-20.0))
        path = tmp_path / "transactions.csv"
        store.save(path)

        assert path.read_text(encoding="utf-8").splitlines() == [
            "bob,1,02/02/2024,3,Dinner,-20.0",
            "carol,1,01/01/2024,3,Lunch,-12.5",
        ]

    def test_others_preserved_verbatim(self, tmp_path):
        """Test other users' records survive a save untouched."""
        path = tmp_path / "transactions.csv"
        path.write_text(SCENARIO + "\n", encoding="utf-8")

        store = TransactionStore(active_user="bob")
        store.load(path)
        store.delete(0)
        store.save(path)

        carol = TransactionStore(active_user="carol")
        assert carol.load(path) == 1
        assert carol.get(0).description == "Lunch"

    def test_save_to_missing_directory_raises(self, store, tmp_path):
        """Test an unwritable destination raises FileAccessError."""
        with pytest.raises(FileAccessError):
            store.save(tmp_path / "nope" / "transactions.csv")

    def test_atomic_save_leaves_no_temp_files(self, store, tmp_path):
        """Test only the target file remains after an atomic save."""
        store.add(expense("01/01/2024"))
        store.save(tmp_path / "transactions.csv")
        assert os.listdir(tmp_path) == ["transactions.csv"]

    def test_direct_save(self, tmp_path):
        """Test saving without the temp-file step."""
        store = TransactionStore(active_user="bob", atomic_writes=False)
        store.add(expense("01/01/2024", description="x", amount=-1.0))
        path = tmp_path / "transactions.csv"
        assert store.save(path) == 1
        assert path.read_text(encoding="utf-8") == "bob,1,01/01/2024,3,x,-1.0\n"

    def test_single_user_format(self, tmp_path):
        """Test the legacy layout without a username column."""
        path = tmp_path / "transactions.csv"
        path.write_text("0,15/03/2024,0,Bonus,500.0\nbob,0,15/03/2024,0,Bonus,500.0\n", encoding="utf-8")

        store = TransactionStore(file_format=TransactionFileFormat.SINGLE_USER)
        assert store.load(path) == 1
        assert store.skipped == 1
        assert store.get(0).username == ""
        store.save(path)
        assert path.read_text(encoding="utf-8").splitlines()[0] == "0,15/03/2024,0,Bonus,500.0"


class TestEditing:
    """Tests for add/modify/delete over mine."""

    def test_add_appends(self, store):
        """Test add appends to the end."""
        store.add(expense("01/01/2024", description="first"))
        store.add(expense("02/01/2024", description="second"))
        assert [t.description for t in store] == ["first", "second"]

    def test_modify_replaces(self, store):
        """Test modify swaps in a new record."""
        store.add(expense("01/01/2024", description="old"))
        store.modify(0, expense("01/01/2024", description="new"))
        assert store.get(0).description == "new"
        assert len(store) == 1

    def test_delete_removes(self, store):
        """Test delete removes and returns the record."""
        store.add(expense("01/01/2024", description="a"))
        store.add(expense("02/01/2024", description="b"))
        removed = store.delete(0)
        assert removed.description == "a"
        assert [t.description for t in store] == ["b"]

    @pytest.mark.parametrize("size", [0, 1, 2])
    def test_bad_indexes_raise(self, store, size):
        """Test get/modify/delete reject -1 and size."""
        for i in range(size):
            store.add(expense("01/01/2024", description=str(i)))
        for index in (-1, size):
            with pytest.raises(IndexError):
                store.get(index)
            with pytest.raises(IndexError):
                store.modify(index, expense("01/01/2024"))
            with pytest.raises(IndexError):
                store.delete(index)
        assert len(store) == size

    def test_edits_do_not_touch_others(self, store):
        """Test indexes only address mine."""
        store.read_records(io.StringIO(SCENARIO))
        store.delete(0)
        assert len(store) == 0
        assert store.others_count == 1
        with pytest.raises(IndexError):
            store.delete(0)


class TestSearch:
    """Tests for keyword search."""

    def test_search_by_category_is_case_insensitive(self, store):
        """Test search('food') matches only Food records."""
        store.add(expense("01/01/2024", TransactionCategory.FOOD, "Lunch"))
        store.add(expense("02/01/2024", TransactionCategory.CLOTHES, "Food court shirt"))
        store.add(expense("03/01/2024", TransactionCategory.FOOD, "Dinner"))

        results = list(store.search("FOOD"))
        assert [(pos, t.description) for pos, t in results] == [(1, "Lunch"), (2, "Dinner")]
        assert all("food" in t.category.display_name.lower() for _, t in results)

    def test_search_by_date_text(self, store):
        """Test partial dates match."""
        store.add(expense("01/01/2024"))
        store.add(expense("15/03/2023"))
        store.add(expense("20/03/2024"))

        results = list(store.search("/03/"))
        assert [t.date for _, t in results] == ["15/03/2023", "20/03/2024"]
        assert [pos for pos, _ in results] == [1, 2]

    def test_positions_are_among_matches(self, store):
        """Test positions count matches, not list indexes."""
        store.add(expense("01/01/2024", TransactionCategory.CLOTHES))
        store.add(expense("02/01/2024", TransactionCategory.FOOD))
        assert [pos for pos, _ in store.search("food")] == [1]

    def test_search_empty_store(self, store):
        """Test searching an empty store yields nothing."""
        assert list(store.search("food")) == []

    def test_search_is_one_shot(self, store):
        """Test the result is a consumable iterator."""
        store.add(expense("01/01/2024"))
        results = store.search("food")
        assert len(list(results)) == 1
        assert list(results) == []

    def test_search_ignores_others(self, store):
        """Test other users' records are never searched."""
        store.read_records(io.StringIO(SCENARIO))
        assert list(store.search("lunch")) == []
        assert list(store.search("food")) == []


class TestSort:
    """Tests for sorting by date, newest first."""

    def test_sort_descending(self, store):
        """Test adjacent records are in non-increasing date order."""
        for date in ["15/03/2024", "01/01/2023", "31/12/2023", "02/01/2024", "15/03/2023"]:
            store.add(expense(date))
        store.sort_by_date_descending()

        keys = [t.date_key() for t in store]
        assert all(a >= b for a, b in zip(keys, keys[1:]))
        assert [t.date for t in store] == [
            "15/03/2024", "02/01/2024", "31/12/2023", "15/03/2023", "01/01/2023",
        ]

    def test_equal_dates_keep_insertion_order(self, store):
        """Test A inserted before B stays before B on the same date."""
        store.add(expense("01/01/2024", description="A"))
        store.add(expense("01/01/2024", description="B"))
        store.sort_by_date_descending()
        assert [t.description for t in store] == ["A", "B"]

    def test_equal_dates_behind_a_newer_record(self, store):
        """Test duplicates stay ordered when a later date moves ahead of them."""
        store.add(expense("01/01/2024", description="A"))
        store.add(expense("01/01/2024", description="B"))
        store.add(expense("05/05/2024", description="C"))
        store.add(expense("01/01/2024", description="D"))
        store.sort_by_date_descending()
        assert [t.description for t in store] == ["C", "A", "B", "D"]

    def test_sort_only_touches_mine(self, store):
        """Test others keep their order."""
        store.read_records([
            "carol,1,01/01/2020,3,x,-1",
            "carol,1,01/01/2024,3,y,-1",
            "bob,1,01/01/2020,3,a,-1",
            "bob,1,01/01/2024,3,b,-1",
        ])
        store.sort_by_date_descending()
        assert [t.description for t in store] == ["b", "a"]
        assert [t.description for t in store.others()] == ["x", "y"]

    def test_malformed_date_fails_without_reordering(self, store):
        """Test a bad date raises DateFormatError and nothing moves."""
        store.add(expense("01/01/2023", description="a"))
        store.add(expense("2024-01-01", description="b"))
        store.add(expense("01/01/2024", description="c"))

        with pytest.raises(DateFormatError):
            store.sort_by_date_descending()
        assert [t.description for t in store] == ["a", "b", "c"]


class TestListing:
    """Tests for listing and balance."""

    def test_listing_positions(self, store):
        """Test listing yields 1-based positions in order."""
        store.add(expense("01/01/2024", description="a"))
        store.add(expense("02/01/2024", description="b"))
        assert [(pos, t.description) for pos, t in store.listing()] == [(1, "a"), (2, "b")]

    def test_balance(self, store):
        """Test the balance sums mine only."""
        store.read_records(io.StringIO(SCENARIO))
        store.add(expense("01/01/2024", amount=-100.0))
        assert store.balance() == pytest.approx(400.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
