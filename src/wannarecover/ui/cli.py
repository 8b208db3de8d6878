"""
WannaRecover - Command-Line Interface
CLI with rich terminal output

Features:
- Locate *.WNCRYT leftovers across temp and recycle folders
- Identify file types by content
- Recover leftovers with their proper extension

Dependencies:
    pip install click rich
"""

import click
import sys
from pathlib import Path
from collections import Counter

from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn, TimeRemainingColumn
from rich.panel import Panel
from rich import box

from .. import __version__
from ..app import RecoveryApp
from ..utils import format_bytes, file_size

console = Console()


def _build_app(ctx, **extra) -> RecoveryApp:
    """Create the backend from the group-level options"""
    opts = ctx.obj or {}
    overrides = {k: v for k, v in opts.items() if k != 'config_path' and v is not None}
    overrides.update({k: v for k, v in extra.items() if v is not None})
    return RecoveryApp(opts.get('config_path'), overrides=overrides)


@click.group()
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='JSON configuration file')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging verbosity')
@click.option('--log-file/--no-log-file', default=True, help='Also write a log file under logs/')
@click.option('--no-libmagic', is_flag=True, help='Use the built-in content-type table instead of libmagic')
@click.pass_context
def cli(ctx, config_path, log_level, log_file, no_libmagic):
    """WannaRecover - restore files left behind by WannaCry"""
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = Path(config_path) if config_path else None
    ctx.obj['log_level'] = log_level.upper() if log_level else None
    if not log_file:
        ctx.obj['log_dir'] = ''
    if no_libmagic:
        ctx.obj['use_libmagic'] = False


@cli.command()
def version():
    """Show version information"""
    version_info = Table(show_header=False, box=box.ROUNDED)
    version_info.add_column(style="cyan bold")
    version_info.add_column(style="white")

    version_info.add_row("Application", "WannaRecover")
    version_info.add_row("Version", __version__)
    version_info.add_row("Python", f"{sys.version.split()[0]}")

    console.print(Panel(version_info, title="[bold blue]Version Information[/bold blue]", border_style="blue"))


@cli.command()
@click.option('--root', '-r', 'roots', multiple=True, type=click.Path(),
              help='Directory to search (repeatable); defaults to temp and $RECYCLE folders')
@click.option('--pattern', '-p', help='Glob of leftover files (default *.WNCRYT)')
@click.option('--recursive/--no-recursive', default=None, help='Walk subdirectories')
@click.pass_context
def find(ctx, roots, pattern, recursive):
    """List leftover files without copying them"""
    console.print(f"\n[bold cyan]Searching for leftovers[/bold cyan]\n")

    try:
        app = _build_app(ctx, file_pattern=pattern, recursive=recursive)
        search_roots = list(roots) or app.search_roots()

        results = Table(title="Leftover Files", box=box.ROUNDED)
        results.add_column("#", style="dim", justify="right")
        results.add_column("Path", style="cyan")
        results.add_column("Size", style="white", justify="right")

        count = 0
        with console.status("[cyan]Walking directories..."):
            for path in app.find_leftovers(search_roots):
                count += 1
                results.add_row(str(count), path, format_bytes(file_size(path)))

        if count:
            console.print(results)
        console.print(f"\n[bold green]✓ Found {count} file(s)[/bold green] "
                      f"in {len(search_roots)} root(s)\n")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        sys.exit(1)


@cli.command()
@click.argument('files', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def identify(ctx, files):
    """Identify file types by content"""
    try:
        app = _build_app(ctx)

        results = Table(title="Content Identification", box=box.ROUNDED)
        results.add_column("File", style="cyan")
        results.add_column("Extension", style="bold yellow")
        results.add_column("Decided By", style="white")
        results.add_column("MIME", style="dim")

        for file_path in files:
            result = app.identify(file_path)
            results.add_row(file_path, result.extension,
                            result.source.value.replace('_', ' '), result.mime_type or '-')

        console.print(results)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        sys.exit(1)


@cli.command()
@click.argument('output_dir', type=click.Path(file_okay=False))
@click.option('--root', '-r', 'roots', multiple=True, type=click.Path(),
              help='Directory to search (repeatable); defaults to temp and $RECYCLE folders')
@click.option('--file', '-f', 'files', multiple=True, type=click.Path(exists=True, dir_okay=False),
              help='Recover only these files instead of searching (repeatable)')
@click.option('--pattern', '-p', help='Glob of leftover files (default *.WNCRYT)')
@click.option('--overwrite/--no-overwrite', default=None, help='Replace files already in OUTPUT_DIR')
@click.option('--workers', type=int, help='Copy worker threads (default: CPU count)')
@click.option('--report', 'report_path', type=click.Path(dir_okay=False), help='Write a JSON report')
@click.pass_context
def recover(ctx, output_dir, roots, files, pattern, overwrite, workers, report_path):
    """Recover leftovers into OUTPUT_DIR with their real extension"""
    console.print(f"\n[bold cyan]Starting Recovery Operation[/bold cyan]\n")

    try:
        app = _build_app(ctx, file_pattern=pattern, max_workers=workers)

        if files:
            sources = list(files)
        else:
            search_roots = list(roots) or app.search_roots()
            with console.status(f"[cyan]Searching {len(search_roots)} root(s)..."):
                sources = list(app.find_leftovers(search_roots))

        if not sources:
            console.print("[yellow]No leftover files found[/yellow]\n")
            return

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeRemainingColumn(),
            console=console
        ) as progress:
            task = progress.add_task("[cyan]Recovering files...", total=len(sources))
            session = app.recover(
                output_dir, files=sources, overwrite=overwrite,
                progress_cb=lambda done, total: progress.update(task, completed=done),
            )

        console.print("\n[bold green]✓ Recovery Complete[/bold green]\n")

        summary = Table(title="Recovery Summary", box=box.ROUNDED)
        summary.add_column("Metric", style="cyan bold")
        summary.add_column("Count", style="white", justify="right")
        summary.add_row("Files Processed", str(len(session.outcomes)))
        summary.add_row("  └─ [green]Copied[/green]", f"[green]{session.copied_count}[/green]")
        summary.add_row("  └─ [red]Skipped[/red]", f"[red]{session.skipped_count}[/red]")
        console.print(summary)

        type_counts = Counter(o.extension for o in session.outcomes if o.copied)
        if type_counts:
            breakdown = Table(title="File Type Breakdown", box=box.SIMPLE)
            breakdown.add_column("Type", style="cyan")
            breakdown.add_column("Count", style="white", justify="right")
            for ext, count in type_counts.most_common():
                breakdown.add_row(ext, str(count))
            console.print(breakdown)

        if report_path:
            app.write_report(report_path)
            console.print(f"[bold]Report:[/bold] {report_path}")
        console.print(f"[bold]Output Directory:[/bold] {output_dir}\n")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        sys.exit(1)


def main():
    """Main CLI entry point"""
    cli()


if __name__ == "__main__":
    main()
