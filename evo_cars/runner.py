"""
Runner: headless evolution loop.
This is the single entrypoint you can call from a script or notebook.
"""
from dataclasses import replace
from typing import List, Optional
from tqdm import trange

from .config import EvolutionConfig
from .engine import EvolutionEngine, GenerationStats
from .world import World, WorldConfig


def make_engine(cfg: EvolutionConfig, custom_track: Optional[List[float]] = None,
                fps: int = 60) -> EvolutionEngine:
    world = World(WorldConfig(fps=fps, track_length=cfg.track_length, seed=cfg.seed,
                              custom_track=custom_track))
    # a custom map decides its own length
    if world.track_length != cfg.track_length:
        cfg = replace(cfg, track_length=world.track_length)
    return EvolutionEngine(cfg, world, max_health=fps)


def evolve(generations: int = 10, cfg: Optional[EvolutionConfig] = None,
           custom_track: Optional[List[float]] = None,
           max_ticks_per_generation: Optional[int] = None) -> List[GenerationStats]:
    engine = make_engine(cfg or EvolutionConfig(), custom_track=custom_track)
    for _ in trange(generations, desc="evolve"):
        engine.run_generation(max_ticks=max_ticks_per_generation)
    return engine.history
