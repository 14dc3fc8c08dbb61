import pytest

from pyaescbc import ENGINES, available_engines


@pytest.fixture(params=sorted(ENGINES))
def engine(request):
    """Name of each cipher engine usable on this machine."""
    if request.param not in available_engines():
        pytest.skip(f"{request.param} engine is not available")
    return request.param
