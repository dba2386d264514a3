"""
sha2vectors - Main Entry Point

Command line front end for the conformance suite.
"""

from pathlib import Path
from typing import Optional, Tuple

import click

from . import config
from .conformance.groups import GROUPS, get_group, run_groups
from .conformance.runner import ALL_CHECKS, GroupReport
from .core_crypto.engine import ENGINES, get_engine
from .logs import configure_logging
from .vectors.rsp_writer import (
    generate_vector_file,
    generated_comments,
    long_msg_lengths,
    short_msg_lengths,
    write_vector_file,
)


MAX_REPORTED_FAILURES = 10


def _print_report(report: GroupReport) -> None:
    status = "PASS" if report.passed else "FAIL"
    click.echo(f"{status}  {report.group}  ({report.source})")
    if report.error:
        click.echo(f"      setup error: {report.error}")
        return
    for result in report.results:
        click.echo(f"      {result.summary()}")
    failures = report.failures
    for mismatch in failures[:MAX_REPORTED_FAILURES]:
        click.echo(f"      {mismatch}")
    if len(failures) > MAX_REPORTED_FAILURES:
        click.echo(f"      ... {len(failures) - MAX_REPORTED_FAILURES} more")


@click.group()
def cli():
    """Verify SHA-2 engines against NIST CAVS vector files."""
    pass


@cli.command()
@click.option("--vectors-dir", "-d", type=click.Path(file_okay=False, path_type=Path),
              default=None, help="Directory holding the .rsp files")
@click.option("--group", "-g", "group_names", multiple=True,
              type=click.Choice([g.name for g in GROUPS]), help="Run only these groups")
@click.option("--check", "-c", "checks", multiple=True,
              type=click.Choice(list(ALL_CHECKS)), help="Run only these checks")
@click.option("--workers", "-w", default=config.DEFAULT_WORKERS, show_default=True,
              type=click.IntRange(min=1), help="Groups to run in parallel")
@click.option("--verbose", "-v", count=True, help="Log progress (-vv for debug)")
@click.pass_context
def verify(ctx: click.Context, vectors_dir: Optional[Path], group_names: Tuple[str, ...],
           checks: Tuple[str, ...], workers: int, verbose: int):
    """Run the conformance checks and exit non-zero on any failure."""
    if verbose:
        configure_logging("DEBUG" if verbose > 1 else "INFO")
    groups = [get_group(name) for name in group_names] or GROUPS
    reports = run_groups(groups, vectors_dir, checks or None, workers)

    for report in reports:
        _print_report(report)

    failed = [r for r in reports if not r.passed]
    click.echo(f"\n{len(reports) - len(failed)}/{len(reports)} groups passed")
    if failed:
        ctx.exit(1)


@cli.command("groups")
def list_groups():
    """List the registered groups and their vector files."""
    for group in GROUPS:
        path = config.vectors_dir() / group.filename
        marker = "" if path.exists() else "  (missing)"
        click.echo(f"{group.name:<22} {group.algorithm:<11} {group.filename}{marker}")


@cli.command()
@click.argument("algorithm", type=click.Choice(list(ENGINES)))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--long", "long_msg", is_flag=True, help="LongMsg schedule instead of ShortMsg")
@click.option("--count", default=8, show_default=True, type=click.IntRange(min=1),
              help="Number of LongMsg vectors")
def generate(algorithm: str, output: Path, long_msg: bool, count: int):
    """Write a vector file with reference digests from the cryptography backend."""
    if long_msg:
        lengths, label = long_msg_lengths(algorithm, count), "LongMsg"
    else:
        lengths, label = short_msg_lengths(algorithm), "ShortMsg"
    vector_file = generate_vector_file(algorithm, lengths)
    write_vector_file(vector_file, output, generated_comments(algorithm, label))
    click.echo(f"Wrote {len(vector_file)} vectors to {output}")


@cli.command()
@click.argument("algorithm", type=click.Choice(list(ENGINES)))
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def digest(algorithm: str, file: Path):
    """Hash a file through the streaming engine API."""
    engine = get_engine(algorithm)
    state = engine.allocate_state()
    engine.init(state)
    with open(file, 'rb') as f:
        for chunk in iter(lambda: f.read(config.STREAM_CHUNK_SIZE), b''):
            engine.update(state, chunk)
    out = bytearray(engine.finalize(state, None))
    engine.finalize(state, out)
    click.echo(f"{out.hex()}  {file}")


def main():
    """Main entry point for sha2vectors."""
    configure_logging()
    cli()


if __name__ == "__main__":
    main()
