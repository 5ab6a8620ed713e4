"""
Vamsa GEDCOM CLI - validate, import and export GEDCOM files
"""

import json
from pathlib import Path

import click

from vamsa_gedcom.config import Config
from vamsa_gedcom.services.exceptions import ServiceError
from vamsa_gedcom.services.gedcom_service import gedcom_service
from vamsa_gedcom.shared.logging_config import get_project_logger, set_package_level
from vamsa_gedcom.shared.models import MapOptions, VamsaPerson, VamsaRelationship


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, verbose):
    """Vamsa GEDCOM - Import and export genealogy data"""
    try:
        config = Config()
    except RuntimeError as e:
        raise click.ClickException(str(e))

    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    ctx.obj['config'] = config
    set_package_level('DEBUG' if verbose else config.log_level)


@cli.command()
@click.argument('gedcom_file', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def validate(ctx, gedcom_file):
    """Validate a GEDCOM file without importing it"""
    logger = get_project_logger(__name__, ctx.obj['verbose'])
    logger.info(f"Validating {gedcom_file}")

    try:
        content = gedcom_service.read_gedcom_file(gedcom_file)
    except ServiceError as e:
        raise click.ClickException(str(e))

    result = gedcom_service.validate_import(Path(gedcom_file).name, content)

    for error in result['errors']:
        click.echo(f"[{error['type']}] {error['message']}")

    preview = result.get('preview')
    if preview:
        click.echo(f"People: {preview['people_count']}, families: {preview['families_count']}")

    if not result['valid']:
        click.echo("❌ GEDCOM file is not valid")
        ctx.exit(1)
    click.echo("✅ GEDCOM file is valid")


@cli.command('import')
@click.argument('gedcom_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--ignore-missing-references', is_flag=True,
              help='Drop links to records that do not exist instead of reporting them')
@click.option('--skip-validation', is_flag=True, help='Skip the structural validation pass')
@click.option('-o', '--output', 'output_file', type=click.Path(dir_okay=False),
              help='JSON file for the mapped people and relationships')
@click.pass_context
def import_gedcom(ctx, gedcom_file, ignore_missing_references, skip_validation, output_file):
    """Map a GEDCOM file to people and relationships (JSON)"""
    logger = get_project_logger(__name__, ctx.obj['verbose'])
    output_file = output_file or str(Path(gedcom_file).with_suffix('.json'))

    options = MapOptions(
        ignore_missing_references=ignore_missing_references,
        skip_validation=skip_validation
    )

    try:
        content = gedcom_service.read_gedcom_file(gedcom_file)
        result = gedcom_service.import_gedcom(content, options)
    except ServiceError as e:
        logger.error(f"GEDCOM import failed: {e}")
        raise click.ClickException(str(e))

    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(result, f, indent=2, ensure_ascii=False)

    statistics = result['statistics']
    click.echo(
        f"Mapped {statistics['people_count']} people and "
        f"{statistics['relationship_count']} relationships"
    )
    for warning in result['warnings']:
        click.echo(f"⚠️  {warning}")
    for error in result['errors']:
        click.echo(f"[{error['type']}] {error['message']}")
    click.echo(f"📁 Output file: {output_file}")

    if not result['success']:
        click.echo(f"❌ {result['message']}")
        ctx.exit(1)
    click.echo("✅ GEDCOM import completed successfully!")


@cli.command('export')
@click.argument('json_file', type=click.Path(exists=True, dir_okay=False))
@click.option('-o', '--output', 'output_file', type=click.Path(dir_okay=False),
              help='GEDCOM file to write (default: family-tree-YYYY-MM-DD.ged)')
@click.option('--source-program', help='Program name written to the header')
@click.option('--submitter-name', help='Submitter name written to the header')
@click.pass_context
def export_gedcom(ctx, json_file, output_file, source_program, submitter_name):
    """Export people and relationships (JSON) as GEDCOM 5.5.1"""
    logger = get_project_logger(__name__, ctx.obj['verbose'])
    config = ctx.obj['config']

    try:
        with open(json_file, encoding='utf-8') as f:
            data = json.load(f)
        people = [VamsaPerson.from_dict(item) for item in data.get('people', [])]
        relationships = [VamsaRelationship.from_dict(item) for item in data.get('relationships', [])]
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"Could not read {json_file}: {e}")
        raise click.ClickException(f"Invalid export input {json_file}: {e}")

    output_file = output_file or gedcom_service.format_gedcom_file_name()

    try:
        content = gedcom_service.export_gedcom(
            people, relationships, config.generator_config(source_program, submitter_name)
        )
        gedcom_service.write_gedcom_file(content, output_file)
    except ServiceError as e:
        logger.error(f"GEDCOM export failed: {e}")
        raise click.ClickException(str(e))

    click.echo(f"Exported {len(people)} people")
    click.echo(f"📁 Output file: {output_file}")
    click.echo("✅ GEDCOM export completed successfully!")


if __name__ == '__main__':
    cli()
