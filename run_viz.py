from evo_cars.config import EvolutionConfig
from evo_cars.logger_setup import setup_logger
from evo_cars.viewer import run_live

if __name__ == "__main__":
    # Watch one car at a time; generations breed automatically.
    setup_logger(level="INFO")
    run_live(EvolutionConfig(population_size=20, mutation_rate=0.2, mutation_effect=0.5), fps=60)
