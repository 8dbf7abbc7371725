"""
Shared FastAPI dependencies.
"""

from guessacard.services.dataset_loader import DatasetLoader, LoadSequencer, load_sequencer


def get_dataset_loader() -> DatasetLoader:
    """Dataset loader for the configured data source."""
    return DatasetLoader()


def get_load_sequencer() -> LoadSequencer:
    return load_sequencer
