"""
CLI entry: run a headless evolution and print a short report.
"""
import argparse
from typing import List, Optional

from evo_cars.config import EvolutionConfig, SelectionPolicy
from evo_cars.errors import ConfigError
from evo_cars.logger_setup import setup_logger
from evo_cars.runner import evolve


def parse_track(text: Optional[str]) -> Optional[List[float]]:
    if not text:
        return None
    return [float(a) for a in text.split(",") if a.strip()]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Evolve box cars on a random track.")
    p.add_argument("--generations", type=int, default=10)
    p.add_argument("--population", type=int, default=20)
    p.add_argument("--mutation-rate", type=float, default=0.2)
    p.add_argument("--mutation-effect", type=float, default=0.5)
    p.add_argument("--selection", choices=[s.value for s in SelectionPolicy], default="roulette")
    p.add_argument("--track-length", type=int, default=300)
    p.add_argument("--track", help="comma separated tile angles (radians) for a custom map")
    p.add_argument("--seed", type=int, default=7)
    p.add_argument("--log-level", default="INFO")
    p.add_argument("--log-dir", default=None)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(log_dir=args.log_dir, level=args.log_level)
    try:
        cfg = EvolutionConfig(
            population_size=args.population,
            mutation_rate=args.mutation_rate,
            mutation_effect=args.mutation_effect,
            selection=args.selection,
            track_length=args.track_length,
            seed=args.seed,
        )
    except ConfigError as e:
        print(f"invalid configuration: {e}")
        return 2
    history = evolve(generations=args.generations, cfg=cfg, custom_track=parse_track(args.track))
    for s in history:
        flag = " (uniform fallback)" if s.selection_fallback else ""
        print(f"gen {s.generation:>3}  best {s.best:7.2f}  mean {s.mean:7.2f}{flag}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
