import pytest
from sprinkle.javascript import clear_function_cache


@pytest.fixture(autouse=True)
def _clear_function_cache():  # pyright: ignore[reportUnusedFunction]
	clear_function_cache()
	yield
	clear_function_cache()
