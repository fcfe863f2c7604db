"""
Viewer: live matplotlib view of a running evolution.

- camera follows the car under test
- HUD: generation, car number, cars generated, fitness, best, health
- dashed line marks the end of the track

Controls:
  space = pause/resume  |  + / - = physics ticks per frame  |  R = restart run
"""
import time
from typing import List, Optional
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.collections import PolyCollection
from matplotlib.patches import Circle, Polygon

from .config import EvolutionConfig
from .runner import make_engine

VIEW_W = 18.0     # world units across the screen
VIEW_H = 8.0
MAX_SPEED = 64


def run_live(cfg: Optional[EvolutionConfig] = None, custom_track: Optional[List[float]] = None,
             fps: int = 60) -> None:
    cfg = cfg or EvolutionConfig()
    engine = make_engine(cfg, custom_track=custom_track, fps=fps)

    fig, ax = plt.subplots(figsize=(12, 5.5))
    try: fig.canvas.manager.set_window_title("Evo Cars - Live")
    except Exception: pass
    ax.set_aspect("equal")
    ax.set_facecolor("#1e1e1e")
    ax.set_xticks([]); ax.set_yticks([])

    ground = PolyCollection(engine.world.tiles, facecolors="#6d4c41", edgecolors="#8d6e63")
    ax.add_collection(ground)
    finish_x = float(engine.world.track_length)
    ax.axvline(finish_x, color="#ffab00", lw=1.5, ls="--")

    body = Polygon(np.zeros((3, 2)), closed=True, facecolor="#26c6da", edgecolor="white", lw=0.8)
    ax.add_patch(body)
    wheel_patches: List[Circle] = []
    hud = ax.text(0.01, 0.98, "", transform=ax.transAxes, color="white", fontsize=9,
                  va="top", family="monospace")

    paused = False
    speed = 1

    def on_key(ev):
        nonlocal paused, speed
        if ev.key == " ": paused = not paused
        elif ev.key in ("+", "="): speed = min(MAX_SPEED, speed * 2)
        elif ev.key in ("-", "_"): speed = max(1, speed // 2)
        elif ev.key in ("r", "R"): engine.reset()

    fig.canvas.mpl_connect("key_press_event", on_key)
    delay = 1.0 / max(1, fps)

    while plt.fignum_exists(fig.number):
        if not paused:
            for _ in range(speed):
                engine.tick()

        t = engine.telemetry()
        if t.chassis:
            body.set_xy(np.array(t.chassis))
            body.set_visible(True)
        else:
            body.set_visible(False)

        # wheel count changes from car to car
        while len(wheel_patches) < len(t.wheels):
            c = Circle((0, 0), 0.1, facecolor="#424242", edgecolor="white", lw=0.8)
            ax.add_patch(c); wheel_patches.append(c)
        for i, c in enumerate(wheel_patches):
            if i < len(t.wheels):
                x, y, r = t.wheels[i]
                c.center = (x, y); c.set_radius(r); c.set_visible(True)
            else:
                c.set_visible(False)

        cx, cy = t.position
        ax.set_xlim(cx - VIEW_W * 0.3, cx + VIEW_W * 0.7)
        ax.set_ylim(cy - VIEW_H * 0.5, cy + VIEW_H * 0.5)

        hud.set_text(
            f"Generation: {t.generation}\nCar number: {t.car_number}\n"
            f"Total cars generated: {t.cars_generated + 1}\n"
            f"Fitness Score: {t.fitness:.2f}  (best {t.best_fitness:.2f})\n"
            f"health {t.health} | x{speed}{' | paused' if paused else ''}"
        )

        plt.pause(0.001); time.sleep(delay)

    engine.reset()
    plt.close(fig)
