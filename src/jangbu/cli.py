"""Command-line interface for the bookkeeping classifier."""

import json
import sys
import click
import yaml
from typing import Optional, Dict, Any
import logging

from .models.core import ACCOUNT_CATEGORIES, DIRECTIONS, PAYMENT_METHODS, JournalEntry, ParsedDiaryEntry
from .pipeline import BookkeepingPipeline
from .utils.account_config import ChartOfAccountsLoader
from .utils.config_manager import ConfigManager


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class JangbuCLI:
    """Main CLI class; holds configuration and a lazily built pipeline"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_manager = ConfigManager(config_path)
        self.config = self.config_manager.load_config()
        self._pipeline: Optional[BookkeepingPipeline] = None

    @property
    def pipeline(self) -> BookkeepingPipeline:
        if self._pipeline is None:
            self._pipeline = BookkeepingPipeline(self.config)
        return self._pipeline

    def generate_config_template(self, output_path: str) -> bool:
        """Generate configuration template file"""
        try:
            self.config_manager.save_config_template(output_path)
            return True
        except OSError as e:
            logger.error(f"Failed to generate config template: {e}")
            return False

    @staticmethod
    def entry_to_dict(parsed: ParsedDiaryEntry, entry: JournalEntry) -> Dict[str, Any]:
        """JSON-friendly view of a parsed diary entry and its journal entry"""
        return {
            'parsed': {
                'date': parsed.date.isoformat(),
                'direction': parsed.direction,
                'amount': int(parsed.amount) if parsed.amount is not None else None,
                'counterpart': parsed.counterpart,
                'category': parsed.category,
                'payment_method': parsed.payment_method,
                'description': parsed.description,
            },
            'journal': {
                'date': entry.date.isoformat(),
                'lines': [
                    {
                        'account': line.account,
                        'account_code': line.account_code,
                        'debit': int(line.debit),
                        'credit': int(line.credit),
                    }
                    for line in entry.lines
                ],
                'confidence': entry.confidence,
                'reason': entry.reason,
                'needs_review': entry.needs_review,
            },
        }


# CLI Commands using Click
@click.group()
@click.option('--config', '-c', help='Path to configuration file')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, config, verbose):
    """Jangbu - classify bank statements and money diary entries into journal entries"""

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.ensure_object(dict)
    ctx.obj['cli'] = JangbuCLI(config)


@cli.command()
@click.argument('file_path')
@click.option('--output', '-o', help='Output CSV path (default: under the data directory)')
@click.pass_context
def ingest(ctx, file_path, output):
    """Ingest and classify a bank statement workbook"""

    cli_instance = ctx.obj['cli']

    try:
        result = cli_instance.pipeline.process_statement_file(file_path, output)
    except Exception as e:
        click.echo(f"✗ Error during processing: {str(e)}")
        sys.exit(1)

    if not result.success:
        click.echo(f"✗ Processing failed: {'; '.join(result.errors) or 'Unknown error'}")
        sys.exit(1)

    click.echo("✓ Statement processed successfully")
    click.echo(f"  Bank: {result.bank_code}")
    click.echo(f"  Transactions: {result.transactions_count}")
    click.echo(f"  Total withdrawal: {result.total_withdrawal:,}")
    click.echo(f"  Total deposit: {result.total_deposit:,}")
    click.echo(f"  Needs review: {result.review_count}")
    if result.output_file:
        click.echo(f"  Output: {result.output_file}")
    for warning in result.warnings:
        click.echo(f"  ⚠ {warning}")


@cli.command()
@click.argument('text')
@click.option('--payment', type=click.Choice(PAYMENT_METHODS), help='Payment method, overrides the text')
@click.option('--category', help='Category answer to a follow-up question')
@click.option('--direction', type=click.Choice(DIRECTIONS), help='Income or expense, overrides the text')
@click.option('--output', '-o', help='Append the journal lines to this CSV file')
@click.option('--json', 'as_json', is_flag=True, help='Print the result as JSON')
@click.pass_context
def diary(ctx, text, payment, category, direction, as_json, output):
    """Turn a money diary sentence into a journal entry"""

    cli_instance = ctx.obj['cli']

    try:
        if category or direction:
            parsed, entry = cli_instance.pipeline.reclassify_diary(
                text, category=category, payment_method=payment, direction=direction)
        else:
            parsed, entry = cli_instance.pipeline.record_diary(text, payment_method=payment)
    except Exception as e:
        click.echo(f"✗ Error classifying entry: {str(e)}")
        sys.exit(1)

    if output and entry.lines and not cli_instance.pipeline.write_journal([entry], output):
        click.echo(f"✗ Failed to write journal file: {output}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(cli_instance.entry_to_dict(parsed, entry), ensure_ascii=False, indent=2))
        return

    click.echo(f"{entry.date.isoformat()}  {parsed.description}")
    if not entry.lines:
        click.echo(f"✗ {entry.reason}")
        return

    for line in entry.lines:
        if line.debit:
            click.echo(f"  (차) {line.account} [{line.account_code}] {line.debit:,}")
        else:
            click.echo(f"  (대) {line.account} [{line.account_code}] {line.credit:,}")
    click.echo(f"  confidence: {entry.confidence:.2f} ({entry.reason})")
    if entry.needs_review:
        click.echo("  ⚠ Needs review")
    if output:
        click.echo(f"  Journal: {output}")


@cli.command()
@click.option('--category', type=click.Choice(ACCOUNT_CATEGORIES), help='Filter by account category')
@click.option('--json', 'as_json', is_flag=True, help='Print the accounts as JSON')
@click.option('--export', 'export_path', help='Write the chart as an editable accounts YAML file')
@click.pass_context
def accounts(ctx, category, as_json, export_path):
    """List or export the chart of accounts"""

    chart = ctx.obj['cli'].pipeline.chart

    if export_path:
        try:
            with open(export_path, 'w', encoding='utf-8') as f:
                yaml.dump(ChartOfAccountsLoader.to_yaml_data(chart), f,
                          allow_unicode=True, sort_keys=False)
        except OSError as e:
            click.echo(f"✗ Failed to export chart of accounts: {e}")
            sys.exit(1)
        click.echo(f"✓ Chart of accounts exported: {export_path} ({len(chart)} accounts)")
        return

    if as_json:
        click.echo(json.dumps(chart.to_list(category), ensure_ascii=False, indent=2))
        return

    selected = chart.by_category(category) if category else list(chart)

    for account in selected:
        vat = " VAT" if account.vat_relevant else ""
        click.echo(f"{account.code}  {account.name}  ({account.category}/{account.subcategory}){vat}")


@cli.command()
@click.argument('output_path', default='jangbu_config.json')
@click.option('--format', type=click.Choice(['json', 'yaml']), default='json', help='Configuration file format')
@click.pass_context
def init_config(ctx, output_path, format):
    """Generate configuration template file"""

    cli_instance = ctx.obj['cli']

    if format == 'yaml' and not output_path.endswith(('.yml', '.yaml')):
        output_path = output_path.replace('.json', '.yml')
    elif format == 'json' and not output_path.endswith('.json'):
        output_path = output_path.replace('.yml', '.json').replace('.yaml', '.json')

    if cli_instance.generate_config_template(output_path):
        click.echo(f"✓ Configuration template generated: {output_path}")
        click.echo("  Edit the file to add bank layouts or change the review threshold")
    else:
        click.echo("✗ Failed to generate configuration template")
        sys.exit(1)


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
