import jax
import pytest
from absl import logging

# Tables and arithmetic in double precision, as in RRTMG
jax.config.update('jax_enable_x64', True)


@pytest.fixture
def debug_logging():
    verbosity = logging.get_verbosity()
    logging.set_verbosity(logging.DEBUG)
    yield
    logging.set_verbosity(verbosity)
