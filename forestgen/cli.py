"""Click CLI commands for forestgen."""

import json
import logging

import click

from . import constants as C
from .forest import ForestComposer
from .glb import generate_glb
from .instancing import forest_to_dict
from .models import ExclusionZone, PathManager
from .placement import estimate_capacity

logger = logging.getLogger(__name__)


def _parse_zones(ctx, param, values):
    """Parse repeated X,Z,HALF_LENGTH,HALF_WIDTH options."""
    zones = []
    for value in values:
        parts = [p.strip() for p in value.split(',')]
        if len(parts) != 4:
            raise click.BadParameter(
                f"expected X,Z,HALF_LENGTH,HALF_WIDTH, got {value!r}")
        try:
            x, z, half_length, half_width = (float(p) for p in parts)
        except ValueError:
            raise click.BadParameter(f"non-numeric zone {value!r}")
        if half_length < 0 or half_width < 0:
            raise click.BadParameter(f"negative half extent in {value!r}")
        zones.append(ExclusionZone(x, z, half_length, half_width))
    return zones


def forest_options(func):
    """Shared composer parameters for every generating command."""
    options = [
        click.option('--seed', type=int, default=C.DEFAULT_SEED,
                     show_default=True, help='Seed for reproducible output'),
        click.option('--no-seed', is_flag=True,
                     help='Non-deterministic mode (ignores --seed)'),
        click.option('--count', '-n', type=int, default=C.DEFAULT_TREE_COUNT,
                     show_default=True, help='Number of trees requested'),
        click.option('--radius', '-r', type=float, default=C.DEFAULT_RADIUS,
                     show_default=True, help='Placement disc radius'),
        click.option('--min-distance', '-d', type=float,
                     default=C.DEFAULT_MIN_DISTANCE, show_default=True,
                     help='Minimum distance between trees'),
        click.option('--tree-scale', type=float, default=C.DEFAULT_TREE_SCALE,
                     show_default=True, help='Uniform scale of every tree'),
        click.option('--leaf-count', '-l', type=int,
                     default=C.DEFAULT_LEAF_COUNT, show_default=True,
                     help='Leaves per tree canopy'),
        click.option('--exclude', '-x', 'zones', multiple=True,
                     callback=_parse_zones,
                     help='Exclusion zone X,Z,HALF_LENGTH,HALF_WIDTH '
                          '(repeatable)'),
        click.option('--river', is_flag=True,
                     help='Add the default river exclusion zone'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _compose(seed, no_seed, count, radius, min_distance, tree_scale,
             leaf_count, zones, river):
    if radius <= 0:
        raise click.BadParameter("radius must be positive",
                                 param_hint='--radius')
    if river:
        zones = list(zones) + [ExclusionZone.coerce(C.RIVER_ZONE)]
    composer = ForestComposer()
    return composer.compose(
        count=count, radius=radius, min_distance=min_distance,
        tree_scale=tree_scale, leaf_count=leaf_count,
        exclusion_zones=zones, seed=None if no_seed else seed)


def _echo_summary(result):
    placement = result.placement
    click.echo(f"Requested {placement.requested} trees, placed "
               f"{len(result)} ({placement.attempts}/"
               f"{placement.max_attempts} attempts)")
    if placement.shortfall:
        click.echo(f"Warning: {placement.shortfall} trees could not be "
                   f"placed - area too dense for the attempt cap", err=True)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Debug logging')
def cli(verbose: bool):
    """forestgen CLI for procedural forest placement and canopies."""
    level = logging.DEBUG if verbose else getattr(logging, C.LOG_LEVEL,
                                                  logging.INFO)
    logging.basicConfig(level=level, format=C.LOG_FORMAT)


@cli.command()
@forest_options
@click.option('--output', '-o', default=None,
              help='Write the forest as JSON to this file')
def generate(output, **kwargs):
    """Generate a forest and print a placement summary."""
    result = _compose(**kwargs)
    _echo_summary(result)
    if output:
        path = PathManager.get_output_path(output)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w') as f:
                json.dump(forest_to_dict(result), f, indent=2)
        except OSError as e:
            logger.error(f"Error writing forest JSON: {e}")
            raise click.ClickException(str(e))
        logger.info(f"Forest JSON written: {path}")
        click.echo(f"Wrote {path}")


@cli.command('export-glb')
@forest_options
@click.option('--output', '-o', default='forest.glb',
              help='Output GLB file path')
@click.option('--no-ground', is_flag=True, help='Omit the ground disc')
def export_glb(output, no_ground, **kwargs):
    """Generate a forest and write a static GLB preview."""
    result = _compose(**kwargs)
    _echo_summary(result)
    try:
        path = generate_glb(result, output, include_ground=not no_ground)
    except Exception as e:
        logger.error(f"Error exporting GLB: {e}")
        raise click.ClickException(str(e))
    click.echo(f"Wrote {path}")


@cli.command()
@click.option('--radius', '-r', type=float, default=C.DEFAULT_RADIUS,
              show_default=True)
@click.option('--min-distance', '-d', type=float,
              default=C.DEFAULT_MIN_DISTANCE, show_default=True)
@click.option('--exclude', '-x', 'zones', multiple=True,
              callback=_parse_zones)
@click.option('--river', is_flag=True)
def capacity(radius, min_distance, zones, river):
    """Estimate how many trees fit an area (upper bound)."""
    if river:
        zones = list(zones) + [ExclusionZone.coerce(C.RIVER_ZONE)]
    click.echo(f"Estimated capacity: "
               f"{estimate_capacity(radius, min_distance, zones)} trees")


def main():
    cli()


if __name__ == '__main__':
    main()
