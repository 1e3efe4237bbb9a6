import click
from flask.cli import with_appcontext

from quotation.services import store
from quotation.services.calculations import summarize
from quotation.services.catalog import replace_catalog, restore_defaults
from quotation.services.errors import ServiceError
from quotation.services.exports import catalog_workbook
from quotation.services.importer import import_equipment_sheet
from quotation.utils.helpers import format_currency

@click.group()
def catalog():
    """Equipment catalog maintenance."""

@catalog.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@with_appcontext
def catalog_import(path):
    """Merge an .xlsx price list into the working catalog."""
    data, _ = store.load_workspace()
    try:
        equipment, result = import_equipment_sheet(path, data.equipment)
        store.update_workspace(lambda d: replace_catalog(d, equipment))
    except ServiceError as e:
        raise click.ClickException(str(e))
    click.echo(f"Import done: added={result.added} updated={result.updated} skipped={result.skipped}")

@catalog.command("export")
@click.argument("path", type=click.Path(dir_okay=False, writable=True))
@with_appcontext
def catalog_export(path):
    data, _ = store.load_workspace()
    with open(path, "wb") as fh:
        fh.write(catalog_workbook(data.equipment))
    click.echo(f"Wrote {len(data.equipment)} items to {path}")

@catalog.command("restore-defaults")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@with_appcontext
def catalog_restore_defaults(yes):
    if not yes:
        click.confirm("Replace the working catalog with the built-in list?", abort=True)
    try:
        data = store.update_workspace(restore_defaults)
    except ServiceError as e:
        raise click.ClickException(str(e))
    click.echo(f"Catalog restored ({len(data.equipment)} items)")

@click.group()
def projects():
    """Saved projects."""

@projects.command("list")
@with_appcontext
def projects_list():
    rows = store.list_projects()
    if not rows:
        click.echo("No saved projects")
        return
    for p in rows:
        click.echo(f"{p['id']}  {p['lastModified']}  {p['name']}")

@click.group()
def quote():
    """Quotation figures for the working project."""

@quote.command("totals")
@with_appcontext
def quote_totals():
    data, _ = store.load_workspace()
    summary = summarize(data.jobs, data.catalog())
    for dep, row in summary["departments"].items():
        click.echo(f"{dep}: {format_currency(row['subtotal'])}")
    totals = summary["totals"]
    click.echo(f"sub_total={format_currency(totals['sub_total'])}")
    click.echo(f"profit={format_currency(totals['profit_amount'])}")
    click.echo(f"before_vat={format_currency(totals['total_before_vat'])}")
    click.echo(f"vat={format_currency(totals['vat_amount'])}")
    click.echo(f"grand_total={format_currency(totals['grand_total'])}")

def register_cli(app):
    app.cli.add_command(catalog)
    app.cli.add_command(projects)
    app.cli.add_command(quote)
