"""Click CLI for sciplot."""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps

import click
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from sciplot.config import BUNDLED_PALETTES, BUNDLED_THEMES, ConfigStore, initialize
from sciplot.errors import SciplotError
from sciplot.log import setup_logging
from sciplot.models import LabeledPalette
from sciplot.palettes import UNSEEN_COLOR, discrete_lookup, display_palette


def _reports_errors(func: Callable) -> Callable:
    """Turn library errors into a clean CLI error message and exit code 1."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SciplotError as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--palettes",
    "palette_path",
    envvar="SCIPLOT_PALETTES",
    default=str(BUNDLED_PALETTES),
    show_default="bundled palettes.yaml",
    help="Palette YAML file or URL.",
)
@click.option(
    "--themes",
    "theme_path",
    envvar="SCIPLOT_THEMES",
    default=str(BUNDLED_THEMES),
    show_default="bundled themes.yaml",
    help="Theme YAML file or URL.",
)
@click.option(
    "--token",
    envvar="GITHUB_PAT",
    help="GitHub token for private palette/theme files [env: GITHUB_PAT].",
)
@click.option(
    "--font-token",
    envvar="SCIPLOT_FONT_TOKEN",
    help="GitHub token for font files. 'none' disables reuse of --token.",
)
@click.option("--log-level", default=None, help="Log level (default: INFO).")
@click.pass_context
@_reports_errors
def main(ctx, palette_path, theme_path, token, font_token, log_level):
    """Project color palettes and plot themes for matplotlib."""
    setup_logging(log_level)
    ctx.obj = initialize(palette_path, theme_path, token, font_token)


@main.command("palettes")
@click.pass_obj
@_reports_errors
def list_palettes(store: ConfigStore):
    """List the loaded palettes."""
    for name, palette in store.get_palettes().items():
        kind = "discrete" if isinstance(palette, LabeledPalette) else "continuous"
        click.echo(f"{name}\t{kind}\t{len(palette.values())} colors")


@main.command("themes")
@click.pass_obj
@_reports_errors
def list_themes(store: ConfigStore):
    """List the loaded themes."""
    for name, spec in store.get_themes().items():
        click.echo(f"{name}\t{spec.base_theme}\t{spec.font_family}")


@main.command("show-palette")
@click.argument("name")
@click.option(
    "-o",
    "--output",
    default=None,
    help="Output image path.  [default: <NAME>.png]",
)
@click.option("--dpi", type=int, default=150, show_default=True, help="Image resolution.")
@click.pass_obj
@_reports_errors
def show_palette(store: ConfigStore, name, output, dpi):
    """Render a swatch image of palette NAME."""
    output = output or f"{name}.png"
    fig, _ax = display_palette(name, store)
    fig.savefig(output, dpi=dpi, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    click.echo(f"Saved: {output} ({dpi} dpi)")


@main.command("colors")
@click.argument("name")
@click.argument("levels", nargs=-1, required=True)
@click.option(
    "--unseen-color",
    default=UNSEEN_COLOR,
    show_default=True,
    help="Color for levels missing from the palette.",
)
@click.pass_obj
@_reports_errors
def colors(store: ConfigStore, name, levels, unseen_color):
    """Print the color of each LEVEL in discrete palette NAME."""
    lookup = discrete_lookup(name, unseen_color, store)
    for level, color in zip(levels, lookup(levels)):
        click.echo(f"{level}\t{color}")
