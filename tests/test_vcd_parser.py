"""Tests for the VCD parser.

Covers the header grammar (scopes, vars, multi-line blocks), body value
changes in all three encodings, lenient skipping of malformed lines, alias
fan-out and the hex canonicalization post-pass.
"""

import pytest

from wavescope.data_model import Binary, Bus, Timescale, TimeUnit, Value
from wavescope.vcd_parser import VCDParser, binary_to_hex, parse_vcd_file, parse_vcd_text


def test_simple_file_signal_order_and_max_time(simple_vcd):
    data = parse_vcd_file(simple_vcd)

    assert data.signals == ["test.clk", "test.reset", "test.data"]
    assert data.max_time == 20
    assert data.widths == {"test.clk": 1, "test.reset": 1, "test.data": 8}


def test_simple_file_change_logs(simple_vcd):
    data = parse_vcd_file(simple_vcd)

    assert data.values["test.clk"] == [
        (0, Binary(Value.V0)),
        (10, Binary(Value.V1)),
        (20, Binary(Value.V0)),
    ]
    assert data.values["test.reset"] == [(0, Binary(Value.V1)), (20, Binary(Value.V0))]
    assert data.values["test.data"] == [
        (0, Bus("00")),
        (5, Bus("0F")),
        (10, Bus("F0")),
        (15, Bus("55")),
        (20, Bus("AA")),
    ]


def test_header_metadata(simple_vcd, features_vcd):
    simple = parse_vcd_file(simple_vcd)
    assert simple.timescale == Timescale(1, TimeUnit.PICOSECONDS)
    assert simple.metadata["date"] == "November 11, 2023"
    assert simple.metadata["version"] == "Test VCD 1.0"

    # Multi-line blocks, whitespace collapsed
    features = parse_vcd_file(features_vcd)
    assert features.timescale == Timescale(10, TimeUnit.NANOSECONDS)
    assert str(features.timescale) == "10ns"
    assert features.metadata["date"] == "Mon Oct 6 10:00:00 2025"
    assert features.metadata["version"] == "Icarus Verilog"


def test_nested_scopes_and_aliases(features_vcd):
    data = parse_vcd_file(features_vcd)

    assert data.signals == [
        "top.clk", "top.nibble", "top.core.addr",
        "top.core.core_clk", "top.core.temp", "top.core.en",
    ]
    # Both names share id '!' and receive identical changes
    assert data.values["top.clk"] == data.values["top.core.core_clk"]
    assert [t for t, _ in data.values["top.clk"]] == [0, 10, 20, 30, 40]


def test_changes_before_enddefinitions_are_ignored(features_vcd):
    data = parse_vcd_file(features_vcd)
    # "#3 1!" appears in the header and must not create a change at time 3
    assert all(t != 3 for t, _ in data.values["top.clk"])
    assert data.max_time == 40


def test_undefined_bits_stay_raw(features_vcd):
    data = parse_vcd_file(features_vcd)

    assert data.values["top.nibble"] == [
        (0, Bus("x")),
        (10, Bus("1x0z")),
        (20, Bus("3")),
        (30, Bus("3")),
    ]
    assert data.values["top.core.addr"] == [(0, Bus("0000")), (10, Bus("ABCD"))]
    assert data.values["top.core.en"] == [
        (0, Binary(Value.VZ)),
        (20, Binary(Value.V1)),
        (40, Binary(Value.VX)),
    ]


def test_real_values_are_opaque_labels(features_vcd):
    data = parse_vcd_file(features_vcd)
    assert data.values["top.core.temp"] == [(0, Bus("r0.5")), (20, Bus("r1.25e-3"))]
    assert data.values["top.core.temp"][0][1].is_real


def test_malformed_and_unknown_lines_are_skipped(features_vcd):
    parser = VCDParser(features_vcd)
    parser.parse()
    # "this line is garbage" and "b1 ?" (unknown id)
    assert parser.skipped_lines == 2


def test_body_comment_block_is_not_parsed_as_changes(features_vcd):
    data = parse_vcd_file(features_vcd)
    # "$comment inline note 1! $end" at #30 must not add a second change
    assert data.values["top.clk"].count((30, Binary(Value.V1))) == 1


def test_declared_signal_without_changes_has_empty_log():
    data = parse_vcd_text(
        "$scope module top $end\n"
        "$var wire 1 ! a $end\n"
        "$var wire 1 \" quiet $end\n"
        "$upscope $end\n"
        "$enddefinitions $end\n"
        "#0\n1!\n#7\n0!\n"
    )
    assert data.signals == ["top.a", "top.quiet"]
    assert data.values["top.quiet"] == []
    assert data.max_time == 7


def test_max_time_is_largest_timestamp_seen():
    data = parse_vcd_text(
        "$var wire 1 ! a $end\n$enddefinitions $end\n"
        "#0\n1!\n#50\n0!\n#100\n"
    )
    assert data.max_time == 100
    assert data.signals == ["a"]


def test_uppercase_and_lowercase_undefined_scalars():
    data = parse_vcd_text(
        "$var wire 1 ! a $end\n$enddefinitions $end\n"
        "#0\nX!\n#1\nz!\n#2\nZ!\n#3\nx!\n"
    )
    assert [v.value for _, v in data.values["a"]] == [Value.VX, Value.VZ, Value.VZ, Value.VX]


def test_indented_lines_are_accepted():
    text = """
    $scope module test $end
    $var wire 1 # clk $end
    $upscope $end
    $enddefinitions $end
    $dumpvars
    0#
    $end
    #10
    1#
    """
    data = parse_vcd_text(text)
    assert data.values["test.clk"] == [(0, Binary(Value.V0)), (10, Binary(Value.V1))]


def test_missing_file_raises_oserror(tmp_path):
    with pytest.raises(OSError):
        parse_vcd_file(tmp_path / "does_not_exist.vcd")


@pytest.mark.parametrize("bits, expected", [
    ("", ""),
    ("1", "1"),
    ("0000", "0"),
    ("00000", "00"),
    ("1111", "F"),
    ("10101010", "AA"),
    ("100000000", "100"),
])
def test_binary_to_hex(bits, expected):
    assert binary_to_hex(bits) == expected


def test_binary_to_hex_rejects_undefined_bits():
    with pytest.raises(ValueError):
        binary_to_hex("1x01")
