"""
Test Group Registry

A group pairs one engine with one vector file. Files are resolved by base
name against the configured vector directory. Groups are independent: each
one parses its own file and owns its own state buffers, so they can run on
separate worker threads.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

import structlog

from .. import config
from ..core_crypto.engine import get_engine
from ..vectors.rsp_parser import VectorFile, VectorFileError, parse_vector_file
from .runner import ConformanceRunner, ConformanceSetupError, GroupReport


log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class VectorGroup:
    """One (algorithm, vector file) pairing."""
    name: str
    algorithm: str
    digest_size: int
    filename: str


GROUPS: List[VectorGroup] = [
    VectorGroup("sha224_short_msg", "sha224", 28, "SHA224ShortMsg.rsp"),
    VectorGroup("sha224_long_msg", "sha224", 28, "SHA224LongMsg.rsp"),
    VectorGroup("sha256_short_msg", "sha256", 32, "SHA256ShortMsg.rsp"),
    VectorGroup("sha256_long_msg", "sha256", 32, "SHA256LongMsg.rsp"),
    VectorGroup("sha384_short_msg", "sha384", 48, "SHA384ShortMsg.rsp"),
    VectorGroup("sha384_long_msg", "sha384", 48, "SHA384LongMsg.rsp"),
    VectorGroup("sha512_short_msg", "sha512", 64, "SHA512ShortMsg.rsp"),
    VectorGroup("sha512_long_msg", "sha512", 64, "SHA512LongMsg.rsp"),
    VectorGroup("sha512_256_short_msg", "sha512_256", 32, "SHA512_256ShortMsg.rsp"),
    VectorGroup("sha512_256_long_msg", "sha512_256", 32, "SHA512_256LongMsg.rsp"),
]


def get_group(name: str) -> VectorGroup:
    """Look up a registered group by name."""
    for group in GROUPS:
        if group.name == name:
            return group
    raise KeyError(f"Unknown group {name!r}")


def resolve_vector_path(filename: str, vectors_dir: Optional[Union[str, Path]] = None) -> Path:
    """Resolve a vector file base name against the vector directory."""
    base = Path(vectors_dir) if vectors_dir is not None else config.vectors_dir()
    return base / filename


def load_group(group: VectorGroup, vectors_dir: Optional[Union[str, Path]] = None) -> VectorFile:
    """
    Parse a group's vector file and check its declared digest length.

    Raises:
        VectorFileError: If the file is missing or malformed
        ConformanceSetupError: If the header disagrees with the group
    """
    vector_file = parse_vector_file(resolve_vector_path(group.filename, vectors_dir))
    if vector_file.digest_length_bytes != group.digest_size:
        raise ConformanceSetupError(
            f"Unexpected digest length in {group.filename}: "
            f"got {vector_file.digest_length_bytes}, expected {group.digest_size}"
        )
    return vector_file


def run_group(group: VectorGroup, vectors_dir: Optional[Union[str, Path]] = None,
              checks: Optional[Sequence[str]] = None) -> GroupReport:
    """
    Set up and run one group.

    Setup failures (missing file, malformed file, wrong digest length) are
    recorded on the report and no check runs for that group.
    """
    engine = get_engine(group.algorithm)
    try:
        vector_file = load_group(group, vectors_dir)
        runner = ConformanceRunner(engine, vector_file, group.name)
    except (VectorFileError, ConformanceSetupError) as e:
        log.error("group setup failed", group=group.name, error=str(e))
        return GroupReport(group.name, engine.name, group.filename, error=str(e))

    report = runner.run(checks)
    log.info("group finished", group=group.name, passed=report.passed,
             failures=len(report.failures))
    return report


def run_groups(groups: Optional[Sequence[VectorGroup]] = None,
               vectors_dir: Optional[Union[str, Path]] = None,
               checks: Optional[Sequence[str]] = None,
               workers: int = config.DEFAULT_WORKERS) -> List[GroupReport]:
    """
    Run several groups, optionally on a thread pool.

    Reports come back in the order the groups were given.
    """
    selected = list(groups) if groups is not None else list(GROUPS)
    if workers <= 1:
        return [run_group(g, vectors_dir, checks) for g in selected]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(run_group, g, vectors_dir, checks) for g in selected]
        return [f.result() for f in futures]
