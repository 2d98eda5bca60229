"""Seed runner.

Every module in this package that defines ``run_seed(session)`` is run in
name order, each in its own transaction. Modules without it are skipped.
"""
import importlib
import logging
import pkgutil
import random
from types import ModuleType
from typing import Dict, Iterable, List, Optional

from sqlalchemy import Table, delete
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

# Fixed so repeated runs produce the same data
SEED = 20240101

OK = "ok"
SKIPPED = "skipped"
FAILED = "failed"


def rng(module_name: str) -> random.Random:
    return random.Random(f"{SEED}:{module_name}")


def reset_tables(session: Session, tables: Iterable[Table]) -> None:
    """Delete all rows, children first. Tables must be given in dependency order."""
    for table in reversed(list(tables)):
        session.execute(delete(table))


def seed_modules(package: Optional[ModuleType] = None) -> List[str]:
    package = package or importlib.import_module(__name__)
    return sorted(
        f"{package.__name__}.{info.name}"
        for info in pkgutil.iter_modules(package.__path__)
        if not info.ispkg
    )


def run_seeds(database, package: Optional[ModuleType] = None) -> Dict[str, str]:
    """Run every seed module against a database.

    Args:
        database: Database handle (see bookshelf.sa.database.connect)
        package: Package to scan; defaults to bookshelf.seeds

    Returns:
        Module name to outcome ("ok", "skipped" or "failed")
    """
    results: Dict[str, str] = {}
    for name in seed_modules(package):
        module = importlib.import_module(name)
        run_seed = getattr(module, "run_seed", None)
        if run_seed is None:
            logger.warning(f"{name} has no run_seed(); skipping")
            results[name] = SKIPPED
            continue

        logger.info(f"Running seed {name}")
        try:
            with database.get_db() as session:
                run_seed(session)
        except Exception:
            logger.exception(f"Seed {name} failed")
            results[name] = FAILED
            continue
        results[name] = OK

    failed = [name for name, outcome in results.items() if outcome == FAILED]
    logger.info(f"Seeding finished: {len(results) - len(failed)} ran or skipped, {len(failed)} failed")
    return results
