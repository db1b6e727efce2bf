"""Common test utilities for wavescope tests."""

from pathlib import Path

from wavescope.data_model import Binary, Bus, Value, WaveformData


def get_repo_root() -> Path:
    """Get the repository root directory.

    This file is in tests/, so its parent is the repo root.
    """
    return Path(__file__).parent.parent.resolve()


def get_test_inputs_dir() -> Path:
    return get_repo_root() / "test_inputs"


def get_test_input_path(filename: str) -> Path:
    """Get the absolute path to a file in test_inputs/.

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    file_path = get_test_inputs_dir() / filename
    if not file_path.exists():
        available = sorted(f.name for f in get_test_inputs_dir().glob("*") if f.is_file())
        raise FileNotFoundError(
            f"Test input file not found: {file_path}\n"
            f"Available files: {', '.join(available)}"
        )
    return file_path


class TestFiles:
    """Constants for the VCD files in test_inputs/."""
    __test__ = False

    # clk/reset/8-bit data, the smallest complete dump
    SIMPLE_VCD = "simple.vcd"
    # Nested scopes, aliased id, x/z bits, real values, multi-line header blocks
    FEATURES_VCD = "features.vcd"

    @classmethod
    def get_path(cls, filename: str) -> Path:
        return get_test_input_path(filename)


def make_waveform(max_time: int) -> WaveformData:
    """Synthetic waveform: a clock toggling every 10 units and a bus changing once."""
    clk = [(t, Binary(Value.V1 if (t // 10) % 2 else Value.V0)) for t in range(0, max_time + 1, 10)]
    bus = [(0, Bus("00")), (max_time // 2, Bus("FF"))]
    return WaveformData(
        signals=["top.clk", "top.bus"],
        values={"top.clk": clk, "top.bus": bus},
        max_time=max_time,
        widths={"top.clk": 1, "top.bus": 8},
    )
