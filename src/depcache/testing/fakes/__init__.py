"""Testing fakes – in-process doubles for the store."""
from depcache.testing.fakes.redis import FAKE_URL, fake_dial_options, fake_server

__all__ = ["FAKE_URL", "fake_dial_options", "fake_server"]
