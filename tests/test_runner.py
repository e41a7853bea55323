import csv

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from channel import BSCChannel
from errors import InvalidLength, RetransmissionRequired
import decoder
from runner import (
    CSV_HEADER,
    SweepResult,
    count_bit_errors,
    plot_errors_vs_p,
    plot_time_vs_p,
    run_experiment_point,
    run_single,
    sweep_bsc,
    transmit_coded,
    transmit_image,
    write_results_csv,
)


def test_count_bit_errors():
    assert count_bit_errors("1010", "1001") == 2
    assert count_bit_errors("1010", "10") == 0
    assert count_bit_errors("", "") == 0


def test_transmit_coded_noiseless():
    bits = "1011" * 9
    result = transmit_coded(bits, BSCChannel(0.0))
    assert result.decoded == bits
    assert len(result.encoded) == 23 * 3
    assert result.retransmissions == 0


def test_transmit_coded_truncates_padding():
    result = transmit_coded("10110", BSCChannel(0.0))
    assert result.decoded == "10110"


def test_transmit_coded_corrects_forced_errors():
    result = transmit_coded("111100001111", BSCChannel(0.0, force_errors=[1, 12, 22]))
    assert result.decoded == "111100001111"


def test_transmit_coded_substitutes_zeros_on_failure(monkeypatch):
    def fail(self, y, block_index=None):
        raise RetransmissionRequired(block_index)

    monkeypatch.setattr(decoder.GolayDecoder, "decode_block", fail)
    result = transmit_coded("1" * 24, BSCChannel(0.0))
    assert result.decoded == "0" * 24
    assert result.retransmissions == 2


def test_run_single_prints(capsys):
    result = run_single(channel=BSCChannel(0.0, force_errors=[3]), message="110011001100")
    out = capsys.readouterr().out
    assert "Golay(23,12)" in out
    assert result.decoded == "110011001100"
    assert result.uncoded == "110111001100"
    assert result.error_vector == "0001" + "0" * 19
    assert "errors   : 0001" + "0" * 19 + " (weight 1)" in out
    assert "uncoded  : " in out


def test_error_vector_marks_flipped_positions():
    result = transmit_coded("000000000000", BSCChannel(0.0, force_errors=[0, 22]))
    assert result.error_vector == "1" + "0" * 21 + "1"
    assert result.uncoded is None


def test_transmit_image_writes_coded_and_uncoded(tmp_path, make_bmp):
    raw = make_bmp(bytes([0, 255, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10]))
    src = tmp_path / "in.bmp"
    src.write_bytes(raw)
    coded_path = tmp_path / "coded.bmp"
    uncoded_path = tmp_path / "uncoded.bmp"

    result = transmit_image(src, BSCChannel(0.0, force_errors=[0]), coded_path, uncoded_path)

    assert coded_path.read_bytes() == raw
    uncoded = uncoded_path.read_bytes()
    assert uncoded[:54] == raw[:54]
    assert uncoded[54] == 0x80
    assert uncoded[55:] == raw[55:]
    assert count_bit_errors(result.sent, result.uncoded) == 1


def test_experiment_point_noiseless():
    point = run_experiment_point(0.0, input_length=120, attempts=3, seed=5)
    assert point.avg_coded_errors == 0
    assert point.avg_uncoded_errors == 0
    assert point.retransmissions == 0
    assert point.avg_coded_time_ms >= 0


def test_experiment_point_coding_helps_at_low_noise():
    point = run_experiment_point(0.01, input_length=1200, attempts=5, seed=11)
    assert point.avg_coded_errors < point.avg_uncoded_errors


def test_experiment_point_rejects_zero_attempts():
    with pytest.raises(ValueError):
        run_experiment_point(0.1, input_length=12, attempts=0)


@pytest.mark.parametrize("length", [0, 13])
def test_experiment_point_rejects_bad_length(length):
    with pytest.raises(InvalidLength):
        run_experiment_point(0.1, input_length=length, attempts=1)


def test_sweep_in_process_and_plots():
    res = sweep_bsc([0.0, 0.02], input_length=120, attempts=2, seed=3, log_each_p=False, max_workers=1)
    assert res.param_values.tolist() == [0.0, 0.02]
    assert res.coded_errors[0] == 0
    assert res.retransmissions.shape == (2,)

    fig, ax = plot_errors_vs_p(res, title="errors")
    assert ax.get_title() == "errors"
    fig, ax = plot_time_vs_p(res)
    assert len(ax.get_lines()) == 2


def test_sweep_parallel_matches_sequential():
    kwargs = dict(p_values=[0.05, 0.1], input_length=120, attempts=2, seed=17, log_each_p=False)
    seq = sweep_bsc(max_workers=1, **kwargs)
    par = sweep_bsc(max_workers=2, **kwargs)
    assert np.array_equal(seq.coded_errors, par.coded_errors)
    assert np.array_equal(seq.uncoded_errors, par.uncoded_errors)


def test_write_results_csv(tmp_path):
    res = SweepResult(
        param_values=np.array([0.0, 0.005]),
        param_name="BSC Crossover Probability p",
        label="Golay(23,12)",
        coded_errors=np.array([0.0, 0.25]),
        uncoded_errors=np.array([0.0, 50.5]),
        coded_time_ms=np.array([12.25, 13.0]),
        uncoded_time_ms=np.array([0.5, 0.75]),
        retransmissions=np.array([0, 1]),
    )
    path = tmp_path / "golay_experiment_results.csv"
    write_results_csv(res, path)

    with open(path, newline="") as csvfile:
        rows = list(csv.reader(csvfile))
    assert rows[0] == CSV_HEADER
    assert rows[0] == ["p", "avgCodedErrors", "avgNonCodedErrors", "avgCodedTime", "avgNonCodedTime"]
    assert rows[1] == ["0.000", "0.00", "0.00", "12.25", "0.50"]
    assert rows[2] == ["0.005", "0.25", "50.50", "13.00", "0.75"]
