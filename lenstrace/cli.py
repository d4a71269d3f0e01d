"""
cli.py - Command line entry point

Usage:
    $ python -m lenstrace scene.yaml --seed 1 --samples 500 -v
"""
import argparse
import logging
import sys
from typing import List, Optional

from .config import MAX_BOUNCES, POINT_SAMPLES, MirrorPolicy, TraceConfig
from .exceptions import LensTraceError
from .io import load_ply, load_scene
from .logging_config import setup_logging
from .materials import Material
from .scene import Scene

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lenstrace",
        description="Trace lasers and point lights through a scene of lenses.",
    )
    parser.add_argument("scene", help="YAML scene description")
    parser.add_argument("--mesh", action="append", default=[], metavar="PLY",
                        help="extra solid obstacle mesh (may be repeated)")
    parser.add_argument("--seed", type=int, default=None, help="seed for point light sampling")
    parser.add_argument("--samples", type=int, default=POINT_SAMPLES,
                        help="rays sampled per point light (default: %(default)s)")
    parser.add_argument("--max-bounces", type=int, default=MAX_BOUNCES,
                        help="segment budget per ray (default: %(default)s)")
    parser.add_argument("--mirror", choices=[p.value for p in MirrorPolicy],
                        default=MirrorPolicy.TERMINATE.value, help="mirror response")
    parser.add_argument("--apply-scale", action="store_true",
                        help="apply entity scale to traced geometry")
    parser.add_argument("--log-file", default=None, help="also write the log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    try:
        config = TraceConfig(
            point_samples=args.samples,
            max_bounces=args.max_bounces,
            mirror_policy=MirrorPolicy(args.mirror),
            apply_scale=args.apply_scale,
            seed=args.seed,
        )
        description = load_scene(args.scene)
        scene = Scene.from_description(description, config)

        for path in args.mesh:
            model = scene.add_model(load_ply(path))
            scene.add_entity(model, (0.0, 0.0, 0.0), Material.solid())

        scene.build_kdtree()
        report = scene.trace()
    except (LensTraceError, ValueError, OSError) as e:
        logger.error("%s", e)
        return 1

    buffers = scene.render_buffers()
    print(f"{scene!r}")
    print(f"trace: {report}")
    print(f"render buffers: {len(buffers.vertices)} vertices")
    return 0


if __name__ == "__main__":
    sys.exit(main())
