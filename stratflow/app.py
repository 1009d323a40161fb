"""
Application entry point: CLI parsing, dependency checks, Qt launch.

``--headless`` runs the engine for a fixed number of steps without Qt and
reports containment and interface diagnostics.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .palettes import DEFAULT_SCHEME
from .params import FluidParameters, PipeGeometry, SimulationConfig


def _check_deps(gui: bool) -> list:
    missing = []
    try:
        import numpy  # noqa: F401
    except ImportError:
        missing.append("numpy")
    if gui:
        try:
            import PyQt5  # noqa: F401
        except ImportError:
            missing.append("PyQt5")
    return missing


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="stratflow",
        description="Stratified pipe flow: two immiscible fluids as particle clouds.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  %(prog)s                                  # oil over water, side view\n"
            "  %(prog)s --upper-flow 2.5 --view section  # turbulent upper layer\n"
            "  %(prog)s --headless --steps 600 --seed 1  # run without a window\n"
            "  %(prog)s --list-schemes                   # show available colour schemes\n"
            "  %(prog)s -v                               # verbose logging\n"
        ),
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--particles", type=int, default=1000, help="Particles per layer (default 1000)")
    p.add_argument("--length", type=float, default=10.0, help="Pipe length (default 10)")
    p.add_argument("--radius", type=float, default=1.0, help="Pipe radius (default 1)")
    p.add_argument("--upper-flow", type=float, default=1.0, help="Upper fluid flow rate")
    p.add_argument("--upper-viscosity", type=float, default=1.0, help="Upper fluid viscosity")
    p.add_argument("--lower-flow", type=float, default=0.5, help="Lower fluid flow rate")
    p.add_argument("--lower-viscosity", type=float, default=2.0, help="Lower fluid viscosity")
    p.add_argument("--scheme", type=str, default=DEFAULT_SCHEME,
                   help=f"Colour scheme (default {DEFAULT_SCHEME})")
    p.add_argument("--view", choices=("side", "section"), default="side", help="Initial view")
    p.add_argument("--quality", type=int, default=50, help="Render quality %% (20–100, default 50)")
    p.add_argument("--seed", type=int, default=None, help="RNG seed for reproducible runs")
    p.add_argument("--headless", action="store_true", help="Run without a window and report")
    p.add_argument("--steps", type=int, default=600, help="Headless step count (default 600)")
    p.add_argument("--dt", type=float, default=1 / 60, help="Headless time step (default 1/60)")
    p.add_argument("--list-schemes", action="store_true", help="List colour schemes and exit")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p.parse_args(argv)


def _build_config(args: argparse.Namespace, scheme) -> SimulationConfig:
    return SimulationConfig(
        particle_count=args.particles,
        geometry=PipeGeometry(length=args.length, radius=args.radius),
        upper=FluidParameters(
            flow_rate=args.upper_flow, viscosity=args.upper_viscosity,
            density=0.9, color=scheme.upper,
        ),
        lower=FluidParameters(
            flow_rate=args.lower_flow, viscosity=args.lower_viscosity,
            density=1.0, color=scheme.lower,
        ),
    )


def run_headless(config: SimulationConfig, steps: int, dt: float, seed: Optional[int]) -> int:
    """Run *steps* frames and log diagnostics.  Returns a process exit code."""
    from .engine import StratifiedFlowEngine

    logger = logging.getLogger("stratflow")
    engine = StratifiedFlowEngine(config, seed=seed)
    report_every = max(1, steps // 5)
    for i in range(1, steps + 1):
        engine.step(dt)
        if i % report_every == 0 or i == steps:
            d = engine.diagnostics()
            logger.info(
                "step %d  t=%.2f  interface=%.3f  max r=%.3f  outside=%d",
                i, d.time, d.interface_velocity, d.max_radius, d.out_of_bounds,
            )

    d = engine.diagnostics()
    print(f"interface velocity : {d.interface_velocity:.4f}")
    print(f"ripple amplitude   : {d.wave_amplitude:.4f}")
    print(f"Reynolds (up/low)  : {d.reynolds_upper:.3f} / {d.reynolds_lower:.3f}")
    print(f"max radial distance: {d.max_radius:.4f}")
    print(f"particles outside  : {d.out_of_bounds}")
    if d.out_of_bounds:
        logger.error("%d particles escaped the pipe", d.out_of_bounds)
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    logger = logging.getLogger("stratflow")

    from .palettes import SCHEMES, get_scheme, list_schemes

    if args.list_schemes:
        print("Available colour schemes:")
        for key in list_schemes():
            s = SCHEMES[key]
            print(f"  {key:12s}  {s.name:14s}  upper=rgb{s.upper}  lower=rgb{s.lower}")
        sys.exit(0)

    missing = _check_deps(gui=not args.headless)
    if missing:
        print(f"ERROR: Missing packages: {', '.join(missing)}\n"
              f"Install: pip install {' '.join(missing)}", file=sys.stderr)
        sys.exit(1)

    if args.scheme not in SCHEMES:
        avail = ", ".join(list_schemes())
        print(f"ERROR: Unknown scheme '{args.scheme}'. Available: {avail}", file=sys.stderr)
        sys.exit(1)

    if not (20 <= args.quality <= 100):
        print("ERROR: --quality must be 20–100.", file=sys.stderr)
        sys.exit(1)

    if args.steps <= 0 or not args.dt > 0:
        print("ERROR: --steps and --dt must be positive.", file=sys.stderr)
        sys.exit(1)

    scheme = get_scheme(args.scheme)
    try:
        config = _build_config(args, scheme)
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    logger.info("Starting stratflow v%s", __version__)
    logger.info(
        "Pipe L=%g R=%g, %d particles/layer, upper %g/%g, lower %g/%g",
        config.geometry.length, config.geometry.radius, config.particle_count,
        config.upper.flow_rate, config.upper.viscosity,
        config.lower.flow_rate, config.lower.viscosity,
    )

    if args.headless:
        sys.exit(run_headless(config, args.steps, args.dt, args.seed))

    from PyQt5.QtWidgets import QApplication
    from .engine import StratifiedFlowEngine
    from .main_window import MainWindow

    app = QApplication(sys.argv)
    app.setStyle("Fusion")
    app.setApplicationName("Stratified Pipe Flow")
    app.setApplicationVersion(__version__)

    # Dark theme
    app.setStyleSheet("""
        QMainWindow, QWidget {
            background: #14171c;
            color: #c0c8d0;
        }
        QGroupBox {
            font-weight: bold;
            font-size: 12px;
            color: #8fb4d8;
            border: 1px solid #2a3340;
            border-radius: 6px;
            margin-top: 8px;
            padding-top: 14px;
        }
        QGroupBox::title {
            subcontrol-origin: margin;
            subcontrol-position: top left;
            padding: 2px 8px;
        }
        QPushButton {
            background: #1e252e;
            border: 1px solid #38434f;
            border-radius: 5px;
            padding: 5px 12px;
            font-size: 12px;
        }
        QPushButton:hover {
            background: #2a3340;
        }
        QPushButton:checked {
            background: #35516e;
            color: #e0ecf8;
        }
        QComboBox {
            background: #1e252e;
            border: 1px solid #38434f;
            border-radius: 4px;
            padding: 4px 8px;
        }
        QSlider::groove:horizontal {
            height: 4px;
            background: #2a3340;
            border-radius: 2px;
        }
        QSlider::handle:horizontal {
            background: #4a8ac8;
            width: 14px;
            height: 14px;
            margin: -5px 0;
            border-radius: 7px;
        }
        QLabel {
            font-size: 12px;
        }
        QStatusBar {
            color: #7e8a96;
            font-size: 11px;
        }
    """)

    engine = StratifiedFlowEngine(config, seed=args.seed)
    window = MainWindow(engine, scheme, view=args.view, render_scale=args.quality / 100)
    window.resize(1200, 520)
    window.show()

    sys.exit(app.exec_())
