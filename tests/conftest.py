pytest_plugins = ["depcache.testing.fixtures"]
