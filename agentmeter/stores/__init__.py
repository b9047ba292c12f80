"""Persistence for agentmeter history data."""

from .history import HistoryStore, HistoryTransaction, history_from_dict, history_to_dict

__all__ = ["HistoryStore", "HistoryTransaction", "history_from_dict", "history_to_dict"]
