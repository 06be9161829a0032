"""Testing support – fakes, fixtures and generators.

Import in your ``conftest.py``::

    pytest_plugins = ["depcache.testing.fixtures"]
"""

from depcache.testing.fakes import FAKE_URL, fake_dial_options, fake_server

__all__ = ["FAKE_URL", "fake_dial_options", "fake_server"]
