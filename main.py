import logging
import sys
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from channel import BSCChannel
from codes import GOLAY
from conversions import bits_to_text, text_to_bits
from runner import (
    count_bit_errors,
    plot_errors_vs_p,
    plot_time_vs_p,
    run_single,
    sweep_bsc,
    transmit_coded,
    transmit_image,
    write_results_csv,
)


def single_for_all():
    # Random 12-bit message, one and three forced errors, then a noisy channel
    run_single(channel=BSCChannel(p=0.0, force_errors=[5]))
    run_single(channel=BSCChannel(p=0.0, force_errors=[0, 5, 11]))
    run_single(channel=BSCChannel(p=0.05))


def send_text(text: str, p: float = 0.02):
    channel = BSCChannel(p)
    bits = text_to_bits(text)
    result = transmit_coded(bits, channel)
    uncoded = channel.perturb(bits)
    print(f"\nsent     : {text}")
    print(f"coded    : {bits_to_text(result.decoded)}")
    print(f"uncoded  : {bits_to_text(uncoded)}")


def send_image(src: str, p: float = 0.02):
    path = Path(src)
    coded_path = path.with_name(f"{path.stem}_coded{path.suffix}")
    uncoded_path = path.with_name(f"{path.stem}_uncoded{path.suffix}")

    result = transmit_image(path, BSCChannel(p), coded_path, uncoded_path)
    print(f"\nimage    : {path} ({len(result.sent)} content bits, p={p})")
    print(f"coded    : {coded_path} | bit errors={count_bit_errors(result.sent, result.decoded)}")
    print(f"uncoded  : {uncoded_path} | bit errors={count_bit_errors(result.sent, result.uncoded)}")


def run_bsc_experiment():
    code = GOLAY

    p_values = np.arange(51) * 0.005  # 0, 0.005, ..., 0.25
    input_length = 10008  # must be a multiple of 12
    attempts = 50
    base_seed = 1337

    res = sweep_bsc(
        p_values=p_values,
        input_length=input_length,
        attempts=attempts,
        label=code.name,
        seed=base_seed,
        log_each_p=True,
    )

    write_results_csv(res, "golay_experiment_results.csv")
    print("Results saved to golay_experiment_results.csv")

    plot_errors_vs_p(res, title=f"{code.name}: bit errors vs p")
    plot_time_vs_p(res, title=f"{code.name}: time per message vs p")
    plt.show()


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    print("=== Golay (23,12) code over a Binary Symmetric Channel ===\n")

    single_for_all()

    send_text("Hello, Golay!")

    # python main.py picture.bmp
    if len(sys.argv) > 1:
        send_image(sys.argv[1])

    run_bsc_experiment()
