import os
import random
import sys

import pytest

# Ensure repo-local imports (e.g., `import opponent`) resolve without installing.
root_dir = os.path.abspath(os.path.dirname(__file__))
if root_dir not in sys.path:
    sys.path.insert(0, root_dir)


class ZeroRandom(random.Random):
    """Random source whose jitter draws are always zero."""

    def random(self) -> float:
        return 0.0


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "-S",
        "--slow",
        action="store_true",
        default=False,
        dest="run_slow",
        help="Run tests marked with @pytest.mark.slow (full self-play games)",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    if not config.getoption("run_slow"):
        skip_slow = pytest.mark.skip(reason="use -S/--slow to enable full self-play games")
        for item in items:
            if "slow" in item.keywords:
                item.add_marker(skip_slow)


@pytest.fixture
def zero_rng() -> ZeroRandom:
    return ZeroRandom(0)
