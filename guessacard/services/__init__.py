"""
GuessACard services.

Dataset loading, guess session commands and the synergy explorer.
"""

from guessacard.services.dataset_loader import (
    DatasetFragment,
    DatasetLoader,
    LoadSequencer,
    load_sequencer,
    merge_fragments,
    parse_dataset,
    resolve_fragments,
)
from guessacard.services.guess_session import (
    HistoryRow,
    PickerView,
    SessionView,
    add_guess,
    remove_guess,
    render_session,
    replace_cards,
    reset_guesses,
    select_level,
    select_race,
    set_sort_order,
)
from guessacard.services.synergy_explorer import (
    ExplorerDataset,
    ExplorerView,
    explain_card,
    explore,
    load_explorer_dataset,
)

__all__ = [
    "DatasetFragment",
    "DatasetLoader",
    "ExplorerDataset",
    "ExplorerView",
    "HistoryRow",
    "LoadSequencer",
    "PickerView",
    "SessionView",
    "add_guess",
    "explain_card",
    "explore",
    "load_explorer_dataset",
    "load_sequencer",
    "merge_fragments",
    "parse_dataset",
    "remove_guess",
    "render_session",
    "replace_cards",
    "reset_guesses",
    "resolve_fragments",
    "select_level",
    "select_race",
    "set_sort_order",
]
