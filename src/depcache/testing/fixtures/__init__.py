"""Testing fixtures – pytest plugin.

Add to ``conftest.py``::

    pytest_plugins = ["depcache.testing.fixtures"]
"""
from depcache.testing.fixtures.redis import fake_dial_options, fake_redis_server

__all__ = ["fake_dial_options", "fake_redis_server"]
