"""CLI entry point for vartext. Uses Click for argument parsing."""

from __future__ import annotations

import json
import logging
import sys

import click

from vartext.catalog import DEFAULT_CATALOG, SAMPLE_TEMPLATE_DATA, load_catalog
from vartext.exceptions import VartextError
from vartext.template import TextSegment, parse, render_template, unknown_variables

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _catalog(path):
    if path is None:
        return DEFAULT_CATALOG
    try:
        return load_catalog(path)
    except VartextError as e:
        raise click.ClickException(str(e)) from e


@click.group(invoke_without_command=True)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    help="Logging level for diagnostics on stderr",
)
@click.pass_context
def main(ctx, log_level):
    """Inspect and render {{variable}} templates."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

@main.command("parse")
@click.argument("template")
def parse_command(template):
    """Print the segments of TEMPLATE as JSON."""
    segments = [
        {"type": "text", "content": s.content}
        if isinstance(s, TextSegment)
        else {"type": "variable", "name": s.name}
        for s in parse(template)
    ]
    click.echo(json.dumps(segments, indent=2))


@main.command("render")
@click.argument("template")
@click.option("--data", "data_json", default=None, help="JSON object of variable values")
@click.option("--sample", is_flag=True, help="Use the built-in sample values")
def render_command(template, data_json, sample):
    """Substitute variable values into TEMPLATE."""
    data = dict(SAMPLE_TEMPLATE_DATA) if sample else {}
    if data_json:
        try:
            supplied = json.loads(data_json)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"not valid JSON: {e}", param_hint="--data") from e
        if not isinstance(supplied, dict):
            raise click.BadParameter("must be a JSON object", param_hint="--data")
        data.update(supplied)
    click.echo(render_template(template, data))


@main.command("check")
@click.argument("template")
@click.option("--catalog", "catalog_path", default=None, type=click.Path(), help="Catalog JSON file")
def check_command(template, catalog_path):
    """Report variables in TEMPLATE that the catalog does not define."""
    unknown = unknown_variables(template, _catalog(catalog_path).names())
    if not unknown:
        click.echo("All variables are known.")
        return
    for name in unknown:
        click.echo(f"Unknown variable: {name}", err=True)
    sys.exit(1)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

@main.command("variables")
@click.option("--catalog", "catalog_path", default=None, type=click.Path(), help="Catalog JSON file")
@click.option("--email-type", default=None, help="Only variables available to this email type")
def variables_command(catalog_path, email_type):
    """List the variables a template may use."""
    catalog = _catalog(catalog_path)
    if email_type:
        catalog = catalog.for_email_type(email_type)
    for variable in catalog.variables:
        if variable.description:
            click.echo(f"{variable.name:<20} {variable.description}")
        else:
            click.echo(variable.name)


if __name__ == "__main__":
    main()
