import csv
import logging
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from channel import BSCChannel, Channel
from codes import GOLAY
from conversions import read_image, write_image
from decoder import DECODER, GolayDecoder
from errors import InvalidLength, RetransmissionRequired
from framing import join_blocks, split_fixed
from gf2 import as_bits, to_bit_string, weight, xor_vectors

logger = logging.getLogger(__name__)


# ============================================================
# 1. Data structures
# ============================================================

@dataclass
class TransmissionResult:
    """Result of sending one message through the coded (and optionally uncoded) path."""
    sent: str
    encoded: str
    received: str
    decoded: str
    retransmissions: int
    uncoded: Optional[str] = None  # same message sent without coding

    @property
    def error_vector(self) -> str:
        """Positions the channel flipped in the encoded message."""
        return to_bit_string(xor_vectors(self.encoded, self.received))


@dataclass
class ExperimentPoint:
    """Averages over all attempts at a fixed crossover probability."""
    p: float
    attempts: int
    avg_coded_errors: float
    avg_uncoded_errors: float
    avg_coded_time_ms: float
    avg_uncoded_time_ms: float
    retransmissions: int


@dataclass
class SweepResult:
    """Experiment points for a sweep over the BSC crossover probability."""
    param_values: np.ndarray
    param_name: str
    label: str
    coded_errors: np.ndarray
    uncoded_errors: np.ndarray
    coded_time_ms: np.ndarray
    uncoded_time_ms: np.ndarray
    retransmissions: np.ndarray


# ============================================================
# 2. Single message
# ============================================================

def count_bit_errors(a: str, b: str) -> int:
    """Number of differing positions over the common prefix of a and b."""
    n = min(len(a), len(b))
    if n == 0:
        return 0
    return int(np.count_nonzero(as_bits(a[:n]) != as_bits(b[:n])))


def random_message(length: int, rng: np.random.Generator | None = None) -> str:
    rng = rng if rng is not None else np.random.default_rng()
    return to_bit_string(rng.integers(0, 2, size=length))


def transmit_coded(
        bits: str,
        channel: Channel,
        decoder: GolayDecoder = DECODER,
) -> TransmissionResult:
    """
    Encode -> transmit -> decode, one block at a time.

    A block that cannot be corrected is replaced by zero bits and counted as a
    retransmission. The decoded string is truncated to len(bits).
    """
    encoded = GOLAY.encode_bits(bits)
    received = channel.perturb(encoded)

    blocks = []
    retransmissions = 0
    for idx, block in enumerate(split_fixed(received, decoder.block_length)):
        try:
            data = decoder.decode_block(as_bits(block), idx)
        except RetransmissionRequired:
            logger.info("Block %d needs retransmission, substituting zeros", idx)
            retransmissions += 1
            data = np.zeros(decoder.code.k, dtype=int)
        blocks.append(to_bit_string(data))

    return TransmissionResult(
        sent=bits,
        encoded=encoded,
        received=received,
        decoded=join_blocks(blocks)[:len(bits)],
        retransmissions=retransmissions,
    )


def _format_bits_with_diff(ref: str, bits: str, enable_color: bool = True) -> str:
    """Render bits, highlighting positions that differ from ref in red (ANSI)."""
    tokens: list[str] = []
    for rb, vb in zip(ref, bits):
        if enable_color and rb != vb:
            tokens.append(f"\033[31m{vb}\033[0m")
        else:
            tokens.append(vb)
    return "".join(tokens)


def run_single(
        channel: Channel,
        message: Optional[str] = None,
        verbose: bool = True,
) -> TransmissionResult:
    """
    Send one message through the coded and uncoded paths and print every stage.

    Parameters
    ----------
    channel : Channel
        Channel instance, e.g. BSCChannel(p=0.05).
    message : str | None
        Data bits. If None, a random 12-bit message is drawn.
    verbose : bool
        If True, pretty-print data, codeword, channel output, error vector,
        decoded data and the uncoded channel output.
    """
    if message is None:
        message = random_message(GOLAY.k)

    result = transmit_coded(message, channel)
    result.uncoded = channel.perturb(message)

    if verbose:
        error_vector = result.error_vector
        print("\n" + "=" * 80)
        print(f">>> Single run: code={GOLAY.name}, channel={type(channel).__name__}")
        print("-" * 80)
        print(f"data     : {result.sent}")
        print(f"encoded  : {result.encoded}")
        print(f"received : {_format_bits_with_diff(result.encoded, result.received)}")
        print(f"errors   : {error_vector} (weight {weight(error_vector)})")
        print(f"decoded  : {_format_bits_with_diff(result.sent, result.decoded)}")
        print(f"block OK : {result.decoded == result.sent}")
        print(f"uncoded  : {_format_bits_with_diff(result.sent, result.uncoded)}")
        if result.retransmissions:
            print(f"retrans. : {result.retransmissions}")
        print("=" * 80)

    return result


def transmit_image(
        src: str | Path,
        channel: Channel,
        coded_path: str | Path,
        uncoded_path: str | Path,
) -> TransmissionResult:
    """
    Send the content of a BMP image through the channel twice, with and
    without coding, and write both reconstructed images.

    The image header is kept untouched; only the pixel data is transmitted.
    The uncoded content bits are stored in the result's `uncoded` field.
    """
    image = read_image(src)
    bits = image.binary_string

    coded = transmit_coded(bits, channel)
    uncoded = channel.perturb(bits)
    coded.uncoded = uncoded

    write_image(coded_path, replace(image, binary_string=coded.decoded))
    write_image(uncoded_path, replace(image, binary_string=uncoded))

    logger.info(
        "Image %s: %d bits, coded errors=%d, uncoded errors=%d",
        src, len(bits), count_bit_errors(bits, coded.decoded), count_bit_errors(bits, uncoded),
    )
    return coded


# ============================================================
# 3. Coded vs uncoded at a fixed p
# ============================================================

def run_experiment_point(
        p: float,
        input_length: int,
        attempts: int,
        seed: Optional[int] = None,
) -> ExperimentPoint:
    """
    Average bit errors and wall time of coded vs uncoded transmission.

    Every attempt draws a fresh random message of input_length bits.
    """
    if input_length <= 0 or input_length % GOLAY.k != 0:
        raise InvalidLength(f"Input length must be a positive multiple of {GOLAY.k}.")
    if attempts < 1:
        raise ValueError(f"At least one attempt is required, got {attempts}.")

    rng = np.random.default_rng(seed)
    channel = BSCChannel(p, seed=None if seed is None else seed + 1)

    coded_errors = uncoded_errors = 0
    coded_time = uncoded_time = 0.0
    retransmissions = 0

    for _ in range(attempts):
        message = random_message(input_length, rng)

        # Coded workflow
        start = time.perf_counter()
        result = transmit_coded(message, channel)
        coded_time += time.perf_counter() - start
        coded_errors += count_bit_errors(message, result.decoded)
        retransmissions += result.retransmissions

        # Non-coded workflow
        start = time.perf_counter()
        noisy = channel.perturb(message)
        uncoded_time += time.perf_counter() - start
        uncoded_errors += count_bit_errors(message, noisy)

    return ExperimentPoint(
        p=float(p),
        attempts=attempts,
        avg_coded_errors=coded_errors / attempts,
        avg_uncoded_errors=uncoded_errors / attempts,
        avg_coded_time_ms=1000.0 * coded_time / attempts,
        avg_uncoded_time_ms=1000.0 * uncoded_time / attempts,
        retransmissions=retransmissions,
    )


# ============================================================
# 4. Sweep p (PARALLELIZED)
# ============================================================

def _run_single_p_point(
        idx: int,
        p: float,
        input_length: int,
        attempts: int,
        base_seed: int | None,
):
    """Worker-process entry point for one crossover probability."""
    seed = (base_seed + 2 * idx) if base_seed is not None else None
    return idx, run_experiment_point(p, input_length, attempts, seed)


def sweep_bsc(
        p_values: Sequence[float],
        input_length: int,
        attempts: int,
        label: str = "Golay(23,12)",
        seed: int | None = None,
        log_each_p: bool = True,
        max_workers: int | None = None,
) -> SweepResult:
    """
    Run run_experiment_point for every p, in parallel worker processes.

    max_workers=1 evaluates the points in the calling process.
    """
    p_values = np.asarray(p_values, dtype=float)
    points: List[ExperimentPoint | None] = [None] * len(p_values)

    print(f"\n=== Starting BSC Sweep: {label} ({len(p_values)} points) ===")

    def _report(point: ExperimentPoint):
        if log_each_p:
            print(
                f"[{label}] p={point.p:.3f} | coded errors={point.avg_coded_errors:.2f} "
                f"| uncoded errors={point.avg_uncoded_errors:.2f} "
                f"| coded time={point.avg_coded_time_ms:.2f} ms "
                f"| uncoded time={point.avg_uncoded_time_ms:.2f} ms"
            )

    if max_workers == 1:
        for idx, p in enumerate(p_values):
            _, points[idx] = _run_single_p_point(idx, p, input_length, attempts, seed)
            _report(points[idx])
    else:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(_run_single_p_point, idx, p, input_length, attempts, seed)
                for idx, p in enumerate(p_values)
            ]
            for future in as_completed(futures):
                idx, point = future.result()
                points[idx] = point
                _report(point)

    return SweepResult(
        param_values=p_values,
        param_name="BSC Crossover Probability p",
        label=label,
        coded_errors=np.array([pt.avg_coded_errors for pt in points], dtype=float),
        uncoded_errors=np.array([pt.avg_uncoded_errors for pt in points], dtype=float),
        coded_time_ms=np.array([pt.avg_coded_time_ms for pt in points], dtype=float),
        uncoded_time_ms=np.array([pt.avg_uncoded_time_ms for pt in points], dtype=float),
        retransmissions=np.array([pt.retransmissions for pt in points], dtype=int),
    )


CSV_HEADER = ["p", "avgCodedErrors", "avgNonCodedErrors", "avgCodedTime", "avgNonCodedTime"]


def write_results_csv(result: SweepResult, path: str | Path) -> None:
    """Write one row per crossover probability; times are in milliseconds."""
    with open(path, mode="w", newline="") as csvfile:
        csv_writer = csv.writer(csvfile)
        csv_writer.writerow(CSV_HEADER)
        for i, p in enumerate(result.param_values):
            csv_writer.writerow([
                f"{p:.3f}",
                f"{result.coded_errors[i]:.2f}",
                f"{result.uncoded_errors[i]:.2f}",
                f"{result.coded_time_ms[i]:.2f}",
                f"{result.uncoded_time_ms[i]:.2f}",
            ])


# ============================================================
# 5. Plotting helpers
# ============================================================

def plot_errors_vs_p(result: SweepResult, title: Optional[str] = None):
    fig, ax = plt.subplots()
    ax.plot(result.param_values, result.coded_errors, marker="o", label=f"{result.label} (coded)")
    ax.plot(result.param_values, result.uncoded_errors, "--", color="0.5", label="uncoded (baseline)")
    ax.set_xlabel(result.param_name)
    ax.set_ylabel("Avg bit errors per message")
    ax.grid(True, which="both", linestyle=":")
    ax.legend()
    if title: ax.set_title(title)
    return fig, ax


def plot_time_vs_p(result: SweepResult, title: Optional[str] = None):
    fig, ax = plt.subplots()
    ax.plot(result.param_values, result.coded_time_ms, marker="s", label=f"{result.label} (coded)")
    ax.plot(result.param_values, result.uncoded_time_ms, "--", color="0.5", label="uncoded (baseline)")
    ax.set_xlabel(result.param_name)
    ax.set_ylabel("Avg time per message [ms]")
    ax.set_yscale("log")
    ax.grid(True, which="both", linestyle=":")
    ax.legend()
    if title: ax.set_title(title)
    return fig, ax
