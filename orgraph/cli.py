"""CLI entrypoint for orgraph."""

import sys
from pathlib import Path

import click

from . import __version__
from .document.templates import TEMPLATE_IDS
from .lenses import LENS_ORDER
from .models import RELATIONSHIP_TYPES, ROLE_TIERS

DEFAULT_STATE_FILE = "orgraph.json"


@click.group()
@click.version_option(__version__, prog_name="orgraph")
@click.option(
    "--state",
    "-s",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Path to the state file (defaults to ./{DEFAULT_STATE_FILE})",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Config file (defaults to orgraph.toml / orgraph.yml found from the current directory up)",
)
@click.pass_context
def cli(ctx: click.Context, state: Path | None, config_path: Path | None) -> None:
    """orgraph - Organizational graph engine.

    Build, lay out and analyze multi-dimensional org charts, compare
    what-if scenarios and merge AI-extracted people into an existing chart.
    """
    from .config import DEFAULT_CONFIG, find_config, load_config

    ctx.ensure_object(dict)
    if config_path is None:
        config_path = find_config(Path.cwd())
    elif not config_path.is_file():
        raise click.BadParameter(f"File '{config_path}' does not exist.", param_hint="--config")

    config = DEFAULT_CONFIG
    if config_path is not None:
        try:
            config = load_config(config_path)
        except ValueError as exc:
            raise click.ClickException(str(exc))

    ctx.obj["state"] = (state or Path.cwd() / DEFAULT_STATE_FILE).resolve()
    ctx.obj["config"] = config


# -----------------------------------------------------------------------------
# Document lifecycle
# -----------------------------------------------------------------------------


@cli.command()
@click.option("--name", default="Untitled Organization", help="Organization name")
@click.option("--force", is_flag=True, help="Overwrite an existing state file")
@click.pass_context
def init(ctx: click.Context, name: str, force: bool) -> None:
    """Create a state file with an empty organization."""
    from .commands.document_cmd import run_init

    exit_code = run_init(ctx.obj["state"], ctx.obj["config"], name, force)
    sys.exit(exit_code)


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate(source: Path) -> None:
    """Check a document file for structural problems without importing it."""
    from .commands.document_cmd import run_validate

    exit_code = run_validate(source)
    sys.exit(exit_code)


@cli.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def import_(ctx: click.Context, source: Path) -> None:
    """Replace the live document with SOURCE (rejected as a whole if invalid)."""
    from .commands.document_cmd import run_import

    exit_code = run_import(ctx.obj["state"], ctx.obj["config"], source)
    sys.exit(exit_code)


@cli.command()
@click.argument("out", required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def export(ctx: click.Context, out: Path | None) -> None:
    """Write the live document as JSON to OUT (default: stdout)."""
    from .commands.document_cmd import run_export

    exit_code = run_export(ctx.obj["state"], ctx.obj["config"], out)
    sys.exit(exit_code)


@cli.command()
@click.option("--last", "last_n", type=int, default=None, help="Only show the last N entries")
@click.option("--json", "output_json", is_flag=True, help="Output entries as JSON")
@click.pass_context
def journal(ctx: click.Context, last_n: int | None, output_json: bool) -> None:
    """Show the log of operations applied to the state file."""
    from .commands.journal_cmd import run_journal

    exit_code = run_journal(ctx.obj["state"], last_n, output_json)
    sys.exit(exit_code)


# -----------------------------------------------------------------------------
# Editing
# -----------------------------------------------------------------------------


@cli.command("add-person")
@click.argument("name", required=False)
@click.option("--title", default=None, help="Job title")
@click.option("--brand", "brands", multiple=True, help="Brand assignment (repeatable; first is primary)")
@click.option("--channel", "channels", multiple=True, help="Channel assignment (repeatable; first is primary)")
@click.option("--department", "departments", multiple=True, help="Department (repeatable; first is primary)")
@click.option("--tag", "tags", multiple=True, help="Free-form tag (repeatable)")
@click.option("--location", default=None, help="Office location")
@click.option(
    "--tier",
    type=click.Choice(list(ROLE_TIERS)),
    default=None,
    help="Role tier (default: manager, or the template's tier)",
)
@click.option(
    "--template",
    type=click.Choice(TEMPLATE_IDS),
    default=None,
    help="Role template supplying default name, title and tier",
)
@click.option("--reports-to", default=None, metavar="NODE", help="Manager (id or name)")
@click.pass_context
def add_person(
    ctx: click.Context,
    name: str | None,
    title: str | None,
    brands: tuple[str, ...],
    channels: tuple[str, ...],
    departments: tuple[str, ...],
    tags: tuple[str, ...],
    location: str | None,
    tier: str | None,
    template: str | None,
    reports_to: str | None,
) -> None:
    """Add a person to the chart and print the new node id."""
    from .commands.edit_cmd import run_add_person

    exit_code = run_add_person(
        ctx.obj["state"],
        ctx.obj["config"],
        name,
        title=title,
        brands=brands,
        channels=channels,
        departments=departments,
        tags=tags,
        location=location,
        tier=tier,
        reports_to=reports_to,
        template=template,
    )
    sys.exit(exit_code)


@cli.command()
@click.argument("source")
@click.argument("target")
@click.option(
    "--type",
    "rel_type",
    type=click.Choice(list(RELATIONSHIP_TYPES)),
    default="manager",
    help="Relationship type (for manager, SOURCE manages TARGET)",
)
@click.option("--label", default=None, help="Edge label")
@click.pass_context
def connect(ctx: click.Context, source: str, target: str, rel_type: str, label: str | None) -> None:
    """Create a relationship from SOURCE to TARGET (ids or names)."""
    from .commands.edit_cmd import run_connect

    exit_code = run_connect(ctx.obj["state"], ctx.obj["config"], source, target, rel_type, label)
    sys.exit(exit_code)


@cli.command()
@click.argument("source")
@click.argument("target")
@click.option(
    "--type",
    "rel_type",
    type=click.Choice(list(RELATIONSHIP_TYPES)),
    default=None,
    help="Only remove relationships of this type",
)
@click.pass_context
def disconnect(ctx: click.Context, source: str, target: str, rel_type: str | None) -> None:
    """Remove relationships from SOURCE to TARGET."""
    from .commands.edit_cmd import run_disconnect

    exit_code = run_disconnect(ctx.obj["state"], ctx.obj["config"], source, target, rel_type)
    sys.exit(exit_code)


@cli.command()
@click.argument("node")
@click.pass_context
def remove(ctx: click.Context, node: str) -> None:
    """Delete NODE and every relationship touching it."""
    from .commands.edit_cmd import run_remove

    exit_code = run_remove(ctx.obj["state"], ctx.obj["config"], node)
    sys.exit(exit_code)


@cli.command()
@click.option("--lens", type=click.Choice(LENS_ORDER), default=None, help="Lens to lay out (default: active lens)")
@click.option(
    "--cleanup",
    type=click.Choice(["compact", "spacious"]),
    default=None,
    help="Tidy the current arrangement instead of a full hierarchy layout",
)
@click.pass_context
def layout(ctx: click.Context, lens: str | None, cleanup: str | None) -> None:
    """Recompute node positions. Locked nodes keep theirs."""
    from .commands.edit_cmd import run_layout

    exit_code = run_layout(ctx.obj["state"], ctx.obj["config"], lens, cleanup)
    sys.exit(exit_code)


# -----------------------------------------------------------------------------
# Analysis
# -----------------------------------------------------------------------------


@cli.command()
@click.argument("source")
@click.argument("target")
@click.option("--all", "all_paths", is_flag=True, help="List several paths, shortest first")
@click.option("--max-depth", type=int, default=None, help="Longest path to consider with --all")
@click.option("--json", "output_json", is_flag=True, help="Output paths as JSON")
@click.pass_context
def path(
    ctx: click.Context,
    source: str,
    target: str,
    all_paths: bool,
    max_depth: int | None,
    output_json: bool,
) -> None:
    """Show how SOURCE and TARGET are connected."""
    from .commands.analyze_cmd import run_path

    exit_code = run_path(ctx.obj["state"], ctx.obj["config"], source, target, all_paths, max_depth, output_json)
    sys.exit(exit_code)


@cli.command()
@click.argument("node")
@click.option("--depth", type=int, default=None, help="Hops to follow (default from config)")
@click.pass_context
def influence(ctx: click.Context, node: str, depth: int | None) -> None:
    """List everyone within reach of NODE."""
    from .commands.analyze_cmd import run_influence

    exit_code = run_influence(ctx.obj["state"], ctx.obj["config"], node, depth)
    sys.exit(exit_code)


@cli.command()
@click.argument("node", required=False)
@click.option("--json", "output_json", is_flag=True, help="Output metrics as JSON")
@click.pass_context
def span(ctx: click.Context, node: str | None, output_json: bool) -> None:
    """Span-of-control metrics for NODE or the whole organization."""
    from .commands.analyze_cmd import run_span

    exit_code = run_span(ctx.obj["state"], ctx.obj["config"], node, output_json)
    sys.exit(exit_code)


@cli.command()
@click.pass_context
def bridges(ctx: click.Context) -> None:
    """People whose removal would disconnect the organization."""
    from .commands.analyze_cmd import run_bridges

    exit_code = run_bridges(ctx.obj["state"], ctx.obj["config"])
    sys.exit(exit_code)


@cli.command()
@click.argument("node")
@click.option("--limit", type=int, default=None, help="Maximum suggestions")
@click.pass_context
def suggest(ctx: click.Context, node: str, limit: int | None) -> None:
    """Suggest new connections for NODE."""
    from .commands.analyze_cmd import run_suggest

    exit_code = run_suggest(ctx.obj["state"], ctx.obj["config"], node, limit)
    sys.exit(exit_code)


@cli.command()
@click.pass_context
def conflicts(ctx: click.Context) -> None:
    """Matrix assignment conflicts and reporting loops."""
    from .commands.analyze_cmd import run_conflicts

    exit_code = run_conflicts(ctx.obj["state"], ctx.obj["config"])
    sys.exit(exit_code)


# -----------------------------------------------------------------------------
# Scenarios
# -----------------------------------------------------------------------------


@cli.group()
def scenario() -> None:
    """What-if scenario commands."""
    pass


@scenario.command("create")
@click.argument("name")
@click.option("--description", default=None, help="Scenario description")
@click.option("--empty", is_flag=True, help="Start from an empty organization instead of the live one")
@click.pass_context
def scenario_create(ctx: click.Context, name: str, description: str | None, empty: bool) -> None:
    """Snapshot the live document as scenario NAME."""
    from .commands.scenario_cmd import run_scenario_create

    exit_code = run_scenario_create(ctx.obj["state"], ctx.obj["config"], name, description, empty)
    sys.exit(exit_code)


@scenario.command("list")
@click.pass_context
def scenario_list(ctx: click.Context) -> None:
    """List scenarios; the active one is starred."""
    from .commands.scenario_cmd import run_scenario_list

    exit_code = run_scenario_list(ctx.obj["state"], ctx.obj["config"])
    sys.exit(exit_code)


@scenario.command("switch")
@click.argument("scenario_ref", metavar="SCENARIO")
@click.pass_context
def scenario_switch(ctx: click.Context, scenario_ref: str) -> None:
    """Make SCENARIO (id or name) the live document."""
    from .commands.scenario_cmd import run_scenario_switch

    exit_code = run_scenario_switch(ctx.obj["state"], ctx.obj["config"], scenario_ref)
    sys.exit(exit_code)


@scenario.command("delete")
@click.argument("scenario_ref", metavar="SCENARIO")
@click.pass_context
def scenario_delete(ctx: click.Context, scenario_ref: str) -> None:
    """Delete SCENARIO."""
    from .commands.scenario_cmd import run_scenario_delete

    exit_code = run_scenario_delete(ctx.obj["state"], ctx.obj["config"], scenario_ref)
    sys.exit(exit_code)


@scenario.command("diff")
@click.argument("base")
@click.argument("target")
@click.option("--json", "output_json", is_flag=True, help="Output the diff as JSON")
@click.pass_context
def scenario_diff(ctx: click.Context, base: str, target: str, output_json: bool) -> None:
    """Show what changed from BASE to TARGET."""
    from .commands.scenario_cmd import run_scenario_diff

    exit_code = run_scenario_diff(ctx.obj["state"], ctx.obj["config"], base, target, output_json)
    sys.exit(exit_code)


# -----------------------------------------------------------------------------
# AI import
# -----------------------------------------------------------------------------


@cli.command("ai-import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--apply", is_flag=True, help="Apply the merge plan (default: only show it)")
@click.option(
    "--override",
    "overrides",
    multiple=True,
    metavar="NAME=STRATEGY",
    help="Force a strategy (skip, update, create-new) for an extracted person; repeatable",
)
@click.pass_context
def ai_import(ctx: click.Context, source: Path, apply: bool, overrides: tuple[str, ...]) -> None:
    """Merge people extracted from an org chart image (JSON) into the chart.

    Examples:

        orgraph ai-import extracted.json

        orgraph ai-import extracted.json --apply --override "Jon Smith=create-new"
    """
    from .commands.ai_import_cmd import run_ai_import

    exit_code = run_ai_import(ctx.obj["state"], ctx.obj["config"], source, apply, overrides)
    sys.exit(exit_code)


@cli.command()
def prompt() -> None:
    """Print the instruction text used to extract an org chart from an image."""
    from .ai import EXTRACTION_PROMPT

    click.echo(EXTRACTION_PROMPT)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
