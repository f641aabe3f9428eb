import argparse
import sys

from loguru import logger

from .exceptions import CFDError
from .log import configure_logging
from .settings import CaseConfig
from .solver import run_case


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pycfd",
        description="Lid-driven cavity solver (artificial compressibility, pseudo-time relaxation)")
    parser.add_argument("--config", metavar="FILE", help="JSON case file (mesh/fluid/solver sections)")
    parser.add_argument("--imax", type=int, help="Grid points in x (odd, default: 65)")
    parser.add_argument("--jmax", type=int, help="Grid points in y (odd, default: 65)")
    parser.add_argument("--re", type=float, help="Reynolds number (default: 100)")
    parser.add_argument("--cfl", type=float, help="CFL number (default: 0.9)")
    parser.add_argument("--toler", type=float, help="Convergence tolerance (default: 1e-10)")
    parser.add_argument("--nmax", type=int, help="Maximum iterations (default: 500000)")
    parser.add_argument("--iterout", type=int, help="Iterations between field/restart output (default: 5000)")
    parser.add_argument("--residual-out", type=int, help="Iterations between residual records (default: 10)")
    parser.add_argument("--scheme", choices=["jacobi", "sgs"], help="Relaxation scheme (default: jacobi)")
    parser.add_argument("--mms", action="store_true", help="Run the manufactured-solution verification case")
    parser.add_argument("--restart", action="store_true", help="Start from the restart file")
    parser.add_argument("--output-dir", metavar="DIR", help="Directory for all output files")
    parser.add_argument("--hdf5", action="store_true", help="Save the final field to HDF5")
    parser.add_argument("--plots", action="store_true", help="Save contour, centerline and residual plots")
    parser.add_argument("--log-file", metavar="FILE", help="Also write a DEBUG log to this file")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    return parser


def config_from_args(args: argparse.Namespace) -> CaseConfig:
    """JSON file first (if any), then command-line overrides"""
    config = CaseConfig.from_json(args.config) if args.config else CaseConfig()

    mesh = {k: v for k, v in (("imax", args.imax), ("jmax", args.jmax)) if v is not None}
    fluid = {"Re": args.re} if args.re is not None else {}
    solver = {k: v for k, v in (("cfl", args.cfl), ("toler", args.toler), ("nmax", args.nmax),
                                ("iterout", args.iterout), ("residual_out", args.residual_out))
              if v is not None}
    if args.scheme is not None:
        solver["sgs_flag"] = 1 if args.scheme == "sgs" else 0
    if args.mms:
        solver["mms_flag"] = 1
    if args.restart:
        solver["restart_flag"] = 1
    paths = {"output_dir": args.output_dir} if args.output_dir else {}

    return config.with_overrides(mesh=mesh, fluid=fluid, solver=solver, **paths)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=not args.quiet, logfile=args.log_file)

    try:
        config = config_from_args(args)
        _, result = run_case(config, hdf5=args.hdf5, plots=args.plots, verbose=not args.quiet)
    except CFDError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    logger.info(f"Final state: {result.state.value} after {result.iterations} iterations, "
                f"conv = {result.conv:e}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
