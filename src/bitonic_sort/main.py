import argparse
import sys

import numpy as np

from .config import config_presets, create_device, make_config
from .errors import SortError
from .orchestrator import BitonicSorter


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="bitonic-sort")
    parser.add_argument("--preset", type=str, default="default", choices=sorted(config_presets))
    parser.add_argument("--device", type=str, default=None, choices=["simulator", "metal"])
    parser.add_argument("--group-size", type=int, default=None)
    parser.add_argument("--size", type=int, default=None)
    parser.add_argument("--low", type=int, default=None)
    parser.add_argument("--high", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--values", type=int, nargs="+", default=None)
    parser.add_argument("--strict", action="store_const", const=True, default=None)
    parser.add_argument("--plan", action="store_true")
    parser.add_argument("--verbose", "-v", action="count", default=0)
    return parser.parse_args(argv)


def random_values(cfg):
    rng = np.random.default_rng(cfg['seed'])
    return rng.integers(cfg['value_low'], cfg['value_high'], size=cfg['array_size'], endpoint=True, dtype=np.int32)


def main(argv=None):
    args = parse_args(argv)
    log_level = {0: None, 1: 'INFO'}.get(args.verbose, 'DEBUG')
    cfg = make_config(
        args.preset,
        device=args.device,
        group_size=args.group_size,
        array_size=args.size,
        value_low=args.low,
        value_high=args.high,
        seed=args.seed,
        strict_barriers=args.strict,
        log_level=log_level,
    )

    values = np.array(args.values, dtype=np.int64) if args.values else random_values(cfg)

    try:
        device = create_device(cfg)
        sorter = BitonicSorter(device, cfg['group_size'])
        if args.plan:
            for dispatch in sorter.plan(len(values)):
                print(dispatch)
            return 0
        print(f"before: {values.tolist()}")
        result = sorter.sort(values)
    except (SortError, ValueError) as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    print(f"after: {result.tolist()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
