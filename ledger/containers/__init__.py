"""Collection types shared by the stores."""

from ledger.containers.ordered_list import OrderedRecordList

__all__ = ["OrderedRecordList"]
