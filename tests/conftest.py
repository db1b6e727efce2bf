"""Common test fixtures for wavescope tests."""

import pytest

from wavescope.waveform_controller import WaveformController
from .test_utils import get_test_input_path, make_waveform, TestFiles


@pytest.fixture
def simple_vcd():
    """Path to the small clk/reset/data dump."""
    return get_test_input_path(TestFiles.SIMPLE_VCD)


@pytest.fixture
def features_vcd():
    """Path to the dump exercising scopes, aliases, x/z and reals."""
    return get_test_input_path(TestFiles.FEATURES_VCD)


@pytest.fixture
def controller(simple_vcd):
    """Controller with simple.vcd loaded."""
    ctrl = WaveformController()
    ctrl.load_file(simple_vcd)
    return ctrl


@pytest.fixture
def nav_controller():
    """Controller over a synthetic 1000-unit trace."""
    ctrl = WaveformController()
    ctrl.set_waveform(make_waveform(1000), "synthetic.vcd")
    return ctrl
