import numpy as np
import pygame

from .params import DEFAULT_PARAMETERS
from .runner import run_replicates
from .summary import summarize

# --- Rendering Constants ---
PLOT_PX   = 900        # plot canvas width/height
SIDEBAR_X = PLOT_PX    # sidebar starts here
SIDEBAR_W = 400
SCREEN_W  = PLOT_PX + SIDEBAR_W
SCREEN_H  = 900
MARGIN    = 40

N_REPLICATES = 30


def series_to_points(series, y_min, y_max, rect):
    """Map a 1-D series onto pixel coordinates inside rect (x, y, w, h).

    Index 0 sits on the left edge, the last index on the right edge; y_max is
    the top of the rect. Values are clipped to [y_min, y_max].
    """
    x0, y0, w, h = rect
    series = np.asarray(series, dtype=np.float64)
    n = series.size
    if n == 0:
        return []
    span = y_max - y_min if y_max > y_min else 1.0
    xs = x0 + np.arange(n) * (w / max(n - 1, 1))
    ys = y0 + h - (np.clip(series, y_min, y_max) - y_min) / span * h
    return [(int(x), int(y)) for x, y in zip(xs, ys)]


def panel_rects():
    """Three stacked panels: population, turbidity, trait mean."""
    inner_h = (SCREEN_H - 4 * MARGIN) // 3
    return [(MARGIN, MARGIN + i * (inner_h + MARGIN), PLOT_PX - 2 * MARGIN, inner_h)
            for i in range(3)]


def run_batch(params, seed):
    batch = run_replicates(N_REPLICATES, params, seed=seed)
    return batch, summarize(batch)


def main():
    pygame.init()
    screen = pygame.display.set_mode((SCREEN_W, SCREEN_H))
    pygame.display.set_caption("Macrophyte / Turbidity Individual-Based Model")
    font      = pygame.font.SysFont("Courier", 14, bold=True)
    font_sm   = pygame.font.SysFont("Courier", 12)
    clock     = pygame.time.Clock()

    params = DEFAULT_PARAMETERS
    seed   = 0
    batch, summary = run_batch(params, seed)
    log = [
        "System Initialized",
        f"{N_REPLICATES} replicates x {params.horizon} timesteps",
    ]
    cursor = 1
    paused = False

    while True:
        # ------------------------------------------------------------------ #
        #  Event handling                                                     #
        # ------------------------------------------------------------------ #
        changes = {}
        rerun   = False
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_q:
                    return
                if event.key == pygame.K_p:
                    paused = not paused
                    log.append(f"{'--- PAUSED ---' if paused else '--- RESUMED ---'}")
                if event.key == pygame.K_r:
                    seed += 1
                    rerun = True
                # --- Parameter Controls ---
                if event.key == pygame.K_t:
                    changes["T0"] = params.T0 + 0.5
                if event.key == pygame.K_g:
                    changes["T0"] = max(params.T0 - 0.5, 0.5)
                if event.key == pygame.K_i:
                    changes["initial_turbidity"] = params.initial_turbidity + 0.25
                if event.key == pygame.K_k:
                    changes["initial_turbidity"] = max(params.initial_turbidity - 0.25, 0.0)
                if event.key == pygame.K_n:
                    changes["n0"] = params.n0 + 5
                if event.key == pygame.K_b:
                    changes["n0"] = max(params.n0 - 5, 1)
                if event.key == pygame.K_m:
                    changes["mu"] = min(params.mu + 0.01, 1.0)
                if event.key == pygame.K_j:
                    changes["mu"] = max(params.mu - 0.01, 0.0)

        if changes or rerun:
            params = params.replace(**changes)
            batch, summary = run_batch(params, seed)
            cursor = 1
            for name, value in changes.items():
                log.append(f"Param: {name} -> {value:g}")
            log.append(f"Re-run (seed {seed})")

        if not paused and cursor < params.horizon:
            cursor += 1

        # ------------------------------------------------------------------ #
        #  Plot panels                                                        #
        # ------------------------------------------------------------------ #
        screen.fill((0, 0, 0))
        pop_rect, turb_rect, trait_rect = panel_rects()
        pop_max  = max(float(batch.population_size.max()), params.K) * 1.1
        turb_max = max(float(batch.turbidity.max()), params.T0) * 1.1

        for rect in (pop_rect, turb_rect, trait_rect):
            pygame.draw.rect(screen, (40, 40, 60), rect, 1)

        # Drawn width grows with the time cursor
        span_w = pop_rect[2] * (cursor - 1) / max(params.horizon - 1, 1)
        for row in batch.population_size:
            pts = series_to_points(row[:cursor], 0.0, pop_max,
                                   (pop_rect[0], pop_rect[1], span_w, pop_rect[3]))
            if len(pts) > 1:
                pygame.draw.lines(screen, (60, 140, 60), False, pts, 1)
        for row in batch.turbidity:
            pts = series_to_points(row[:cursor], 0.0, turb_max,
                                   (turb_rect[0], turb_rect[1], span_w, turb_rect[3]))
            if len(pts) > 1:
                pygame.draw.lines(screen, (120, 100, 50), False, pts, 1)

        mean_rect = (pop_rect[0], pop_rect[1], span_w, pop_rect[3])
        pts = series_to_points(summary["population_size_mean"][:cursor], 0.0, pop_max, mean_rect)
        if len(pts) > 1:
            pygame.draw.lines(screen, (100, 255, 100), False, pts, 3)

        trait_span = (trait_rect[0], trait_rect[1], span_w, trait_rect[3])
        pts = series_to_points(summary["trait_mean_mean"][:cursor], -2.0, 2.0, trait_span)
        if len(pts) > 1:
            pygame.draw.lines(screen, (100, 200, 255), False, pts, 2)

        for rect, label in ((pop_rect, "POPULATION"), (turb_rect, "TURBIDITY"), (trait_rect, "TRAIT MEAN")):
            screen.blit(font_sm.render(label, True, (200, 200, 200)), (rect[0], rect[1] - 16))

        # ------------------------------------------------------------------ #
        #  Sidebar Dashboard                                                  #
        # ------------------------------------------------------------------ #
        pygame.draw.rect(screen, (10, 10, 20), (SIDEBAR_X, 0, SIDEBAR_W, SCREEN_H))

        t = cursor - 1
        stats = [
            "=== LIVE STATUS ===",
            f"TIMESTEP    : {cursor}  {'[PAUSED]' if paused else ''}",
            f"MEAN POP    : {summary['population_size_mean'][t]:.1f}",
            f"MEAN TURB   : {summary['turbidity_mean'][t]:.3f}",
            f"MEAN TRAIT  : {summary['trait_mean_mean'][t]:+.3f}",
            f"EXTINCT     : {summary['extinct_fraction'][t] * 100:.0f}%",
            "",
            "=== PARAMETERS ===",
            f"T0 (bg turb): {params.T0:.2f}  [g/t]",
            f"T init      : {params.initial_turbidity:.2f}  [k/i]",
            f"n0          : {params.n0}  [b/n]",
            f"mu (death)  : {params.mu:.2f}  [j/m]",
            f"K           : {params.K:g}",
            f"r_M / r_T   : {params.r_M:g} / {params.r_T:g}",
            f"sigma       : {params.sigma:g}",
            f"SEED        : {seed}  [r]",
        ]

        y_cursor = 10
        for txt in stats:
            if txt.startswith("==="):
                color = (255, 220, 50)
            elif txt == "":
                y_cursor += 6
                continue
            elif "EXTINCT" in txt and summary["extinct_fraction"][t] > 0:
                color = (255, 80, 80)
            else:
                color = (220, 220, 220)
            screen.blit(font.render(txt, True, color), (SIDEBAR_X + 10, y_cursor))
            y_cursor += 22

        pygame.draw.line(screen, (60, 60, 80), (SIDEBAR_X + 5, y_cursor), (SCREEN_W - 5, y_cursor))
        y_cursor += 8

        screen.blit(font.render("=== EVENT LOG ===", True, (255, 220, 50)), (SIDEBAR_X + 10, y_cursor))
        y_cursor += 22
        for entry in log[-20:]:
            screen.blit(font_sm.render(entry[:48], True, (130, 255, 130)), (SIDEBAR_X + 10, y_cursor))
            y_cursor += 16

        pygame.display.flip()
        clock.tick(30)


if __name__ == "__main__":
    main()
