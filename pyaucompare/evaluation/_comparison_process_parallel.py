"""
Parallel processing of independent units.
Uses multiprocessing to spread units across CPU cores; results are identical
to the sequential path since units are combined by order-independent reductions.
"""

import logging
from functools import partial
from multiprocessing import Pool, cpu_count
from typing import Any

import pandas as pd

from ._comparison_config import ComparisonColumns
from ._comparison_process import _process_single_unit

logger = logging.getLogger(__name__)


def _unit_worker(
    unit_item: tuple[Any, pd.DataFrame],
    compare_values: tuple[Any, Any],
    columns: ComparisonColumns,
    filter_value: Any,
    verbosity: int,
) -> tuple[float, list[dict[str, Any]]]:
    unit, unit_df = unit_item
    return _process_single_unit(
        unit=unit,
        unit_df=unit_df,
        compare_values=compare_values,
        columns=columns,
        filter_value=filter_value,
        verbosity=verbosity,
    )


def _resolve_n_workers(n_jobs: int | None, n_units: int) -> int:
    if n_jobs is None or n_jobs == -1:
        n_workers = cpu_count()
    else:
        n_workers = min(n_jobs, cpu_count())

    # Don't start more workers than there are units
    return max(1, min(n_workers, n_units))


def process_units(
    unit_items: list[tuple[Any, pd.DataFrame]],
    compare_values: tuple[Any, Any],
    columns: ComparisonColumns,
    filter_value: Any,
    verbosity: int = 0,
    n_jobs: int | None = 1,
) -> list[tuple[float, list[dict[str, Any]]]]:
    """
    Processes every independent unit, in-process or on a worker pool.

    Args:
        unit_items: (unit identifier, unit rows) pairs.
        compare_values: The two compared identifiers, in order.
        columns: Column-role configuration.
        filter_value: Filter value in effect (only used in messages).
        verbosity: Controls logging level.
        n_jobs: Number of parallel jobs. 1 = run in-process, None or -1 = all CPUs,
                positive int = that many CPUs.

    Returns:
        One (unit z-score, cell records) tuple per unit, in the order of `unit_items`.

    Note:
        Warnings raised inside worker processes are not propagated to the caller.
    """
    worker_func = partial(
        _unit_worker,
        compare_values=compare_values,
        columns=columns,
        filter_value=filter_value,
        verbosity=verbosity,
    )

    n_workers = _resolve_n_workers(n_jobs, len(unit_items))
    if n_workers == 1:
        return [worker_func(item) for item in unit_items]

    if verbosity <= -1:
        logger.info(f"Using {n_workers} workers for {len(unit_items)} datasets")

    with Pool(processes=n_workers) as pool:
        return pool.map(worker_func, unit_items)
