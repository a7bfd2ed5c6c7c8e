"""
Scenario grouping.

Groups are positional: a run is a maximal block of adjacent cases with the same
scenario label. Two separated blocks with the same label are two runs.
"""

from __future__ import annotations
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .models import TestCase


@dataclass(frozen=True)
class GroupRun:
    """One contiguous block of cases sharing a scenario label."""
    start_index: int
    length: int
    key: str

    @property
    def end_index(self) -> int:
        """Index one past the last case of the run."""
        return self.start_index + self.length


def compute_runs(cases: Sequence[TestCase]) -> List[GroupRun]:
    """
    Partition the case indices into maximal runs of equal scenario_group.

    Input order is authoritative; nothing is sorted.
    """
    runs: List[GroupRun] = []
    if not cases:
        return runs

    run_start = 0
    for i in range(1, len(cases) + 1):
        if i == len(cases) or cases[i].scenario_group != cases[run_start].scenario_group:
            runs.append(GroupRun(
                start_index=run_start,
                length=i - run_start,
                key=cases[run_start].scenario_group
            ))
            run_start = i

    return runs


def group_members(
    cases: Sequence[TestCase],
    runs: Optional[Sequence[GroupRun]] = None
) -> List[Tuple[str, List[str]]]:
    """Explicit (key, member ids) view of the runs, in suite order."""
    if runs is None:
        runs = compute_runs(cases)
    return [
        (run.key, [case.id for case in cases[run.start_index:run.end_index]])
        for run in runs
    ]


def find_split_groups(runs: Sequence[GroupRun]) -> Dict[str, List[int]]:
    """
    Find scenario labels that occur in more than one run.

    Returns a map from label to the start index of each of its runs. An empty
    map means every label forms a single contiguous block.
    """
    starts: Dict[str, List[int]] = defaultdict(list)
    for run in runs:
        starts[run.key].append(run.start_index)
    return {key: indices for key, indices in starts.items() if len(indices) > 1}
