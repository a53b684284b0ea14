import argparse
import logging

from .optimization import optimize_svg_dir


def _round09(value):
    return False if value.lower() in ('0', 'false', 'off') else int(value)


def main():
    parser = argparse.ArgumentParser(description="Minify transform attributes of SVG files.")
    parser.add_argument('--input_dir', required=True, help="Directory containing original SVG files.")
    parser.add_argument('--output_dir', required=True, help="Directory to store optimized files.")
    parser.add_argument('--num_threads', type=int, default=4, help="Number of processes.")
    parser.add_argument('--float_precision', type=int, default=3, help="Decimal digits for most numbers.")
    parser.add_argument('--matrix_precision', type=int, default=None,
                        help="Decimal digits for matrix and scale entries (default: float_precision + 2).")
    parser.add_argument('--round09', type=_round09, default=6,
                        help="Snap runs of this many 0s or 9s (0 disables).")
    parser.add_argument('--round_to_zero', type=float, default=None,
                        help="Snap magnitudes below this threshold to 0.")
    parser.add_argument('--max_samples', type=int, default=None, help="Process at most this many random files.")
    parser.add_argument('--quiet', action='store_true', help="Only print the final summary.")
    parser.add_argument('--debug', action='store_true', help="Enable debug logging.")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s"
    )

    params = {
        "float_precision": args.float_precision,
        "matrix_precision": args.matrix_precision,
        "round09": args.round09,
        "round_to_zero": args.round_to_zero,
    }

    optimize_svg_dir(
        input_dir=args.input_dir,
        output_dir=args.output_dir,
        params=params,
        max_samples=args.max_samples,
        num_threads=args.num_threads,
        quiet=args.quiet,
    )


if __name__ == '__main__':
    main()
