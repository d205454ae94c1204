import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def clear_cache_between_tests():
    """Clear cache before each test so API throttle counters start at zero."""
    cache.clear()
    yield
    cache.clear()
