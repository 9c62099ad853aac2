"""
Convergence criteria and the controller that drives the training loop.

The controller is a small state machine:

    RUNNING --(no point changed cluster)--> CONVERGED
    RUNNING --(max_iter update rounds)----> MAX_ITERS_REACHED

Criteria other than exact assignment stability can be plugged in for
tolerance-based stopping.
"""

from enum import Enum
from typing import Dict, Any, Optional

import torch

from ..base.interfaces import ConvergenceCriterion


class TrainingStatus(Enum):
    """States of the convergence controller."""
    RUNNING = 'running'
    CONVERGED = 'converged'
    MAX_ITERS_REACHED = 'max_iters_reached'


class ChangeInAssignments(ConvergenceCriterion):
    """Convergence based on fraction of points that change clusters.

    With the default ``min_change_fraction=0.0`` the criterion fires only
    when the assignment is identical to the previous one.
    """

    def __init__(self, min_change_fraction: float = 0.0,
                 patience: int = 1):
        """
        Args:
            min_change_fraction: Largest fraction of changed points still
                considered stable
            patience: Number of stable iterations before declaring convergence
        """
        super().__init__()
        self.min_change_fraction = min_change_fraction
        self.patience = patience
        self._prev_assignments = None
        self._stable_count = 0
        self.last_n_changed: Optional[int] = None

    def check(self, current_state: Dict[str, Any]) -> bool:
        """Check if assignments have stabilized."""
        current_assignments = current_state['assignments']

        if self._prev_assignments is None:
            self._prev_assignments = current_assignments.clone()
            self.last_n_changed = None
            return False

        # O(1) comparison per point
        n_changed = (current_assignments != self._prev_assignments).sum().item()
        n_total = len(current_assignments)
        change_fraction = n_changed / n_total
        self.last_n_changed = n_changed

        self.history.append({
            'iteration': current_state.get('iteration', len(self.history)),
            'n_changed': n_changed,
            'change_fraction': change_fraction
        })

        if change_fraction <= self.min_change_fraction:
            self._stable_count += 1
            converged = self._stable_count >= self.patience
        else:
            self._stable_count = 0
            converged = False

        self._prev_assignments = current_assignments.clone()

        return converged

    def reset(self):
        super().reset()
        self._prev_assignments = None
        self._stable_count = 0
        self.last_n_changed = None


class ChangeInObjective(ConvergenceCriterion):
    """Convergence based on relative change in objective function."""

    def __init__(self, rel_tol: float = 1e-4, abs_tol: float = 1e-8,
                 patience: int = 1):
        """
        Args:
            rel_tol: Relative tolerance for objective change
            abs_tol: Absolute tolerance for objective change
            patience: Number of iterations to wait before convergence
        """
        super().__init__()
        self.rel_tol = rel_tol
        self.abs_tol = abs_tol
        self.patience = patience
        self._prev_objective = None
        self._stable_count = 0

    def check(self, current_state: Dict[str, Any]) -> bool:
        """Check if objective has stabilized."""
        current_objective = current_state['objective']

        if self._prev_objective is None:
            self._prev_objective = current_objective
            return False

        abs_change = abs(current_objective - self._prev_objective)

        if abs(self._prev_objective) > 1e-10:
            rel_change = abs_change / abs(self._prev_objective)
        else:
            rel_change = abs_change

        self.history.append({
            'iteration': current_state.get('iteration', len(self.history)),
            'objective': current_objective,
            'abs_change': abs_change,
            'rel_change': rel_change
        })

        if abs_change < self.abs_tol or rel_change < self.rel_tol:
            self._stable_count += 1
            converged = self._stable_count >= self.patience
        else:
            self._stable_count = 0
            converged = False

        self._prev_objective = current_objective

        return converged

    def reset(self):
        super().reset()
        self._prev_objective = None
        self._stable_count = 0


class ParameterChange(ConvergenceCriterion):
    """Convergence based on relative movement of the centroids."""

    def __init__(self, tol: float = 1e-6, patience: int = 1):
        """
        Args:
            tol: Tolerance for centroid change (relative Frobenius norm)
            patience: Number of iterations to wait
        """
        super().__init__()
        self.tol = tol
        self.patience = patience
        self._prev_params = None
        self._stable_count = 0

    def check(self, current_state: Dict[str, Any]) -> bool:
        """Check if centroids have stabilized."""
        current_params = current_state['centroids']

        if self._prev_params is None:
            self._prev_params = current_params.clone()
            return False

        diff_norm = torch.norm(current_params - self._prev_params, p='fro')
        prev_norm = torch.norm(self._prev_params, p='fro')

        if prev_norm > 1e-10:
            rel_change = (diff_norm / prev_norm).item()
        else:
            rel_change = diff_norm.item()

        self.history.append({
            'iteration': current_state.get('iteration', len(self.history)),
            'parameter_change': rel_change
        })

        if rel_change < self.tol:
            self._stable_count += 1
            converged = self._stable_count >= self.patience
        else:
            self._stable_count = 0
            converged = False

        self._prev_params = current_params.clone()

        return converged

    def reset(self):
        super().reset()
        self._prev_params = None
        self._stable_count = 0


class CombinedCriterion(ConvergenceCriterion):
    """Combine multiple convergence criteria with AND/OR logic."""

    def __init__(self, criteria: list[ConvergenceCriterion],
                 mode: str = 'any'):
        """
        Args:
            criteria: List of convergence criteria
            mode: 'any' (OR) or 'all' (AND)
        """
        super().__init__()
        self.criteria = criteria
        self.mode = mode

        if mode not in ['any', 'all']:
            raise ValueError(f"Mode must be 'any' or 'all', got {mode}")

    def check(self, current_state: Dict[str, Any]) -> bool:
        """Check all criteria and combine results."""
        # Evaluate every criterion so each keeps its own history current
        results = [criterion.check(current_state) for criterion in self.criteria]

        if self.mode == 'any':
            converged = any(results)
        else:
            converged = all(results)

        self.history.append({
            'iteration': current_state.get('iteration', len(self.history)),
            'individual_results': results,
            'converged': converged
        })

        return converged

    def reset(self):
        """Reset all sub-criteria."""
        super().reset()
        for criterion in self.criteria:
            criterion.reset()


class ConvergenceController:
    """Drives the iterate-until-converged-or-capped loop.

    The trainer calls :meth:`observe` after every assignment step and
    :meth:`advance` after every update step. Both return the current
    :class:`TrainingStatus`; anything other than RUNNING is terminal.
    """

    def __init__(self, max_iter: int,
                 criterion: Optional[ConvergenceCriterion] = None):
        """
        Args:
            max_iter: Number of update rounds after which training stops
            criterion: Stability test (exact assignment equality if None)
        """
        self.max_iter = max_iter
        self.criterion = criterion if criterion is not None else ChangeInAssignments()
        self.status = TrainingStatus.RUNNING
        self.iteration = 0

    def reset(self) -> None:
        """Back to RUNNING at iteration 0, as right after initialization."""
        self.criterion.reset()
        self.status = TrainingStatus.RUNNING
        self.iteration = 0

    @property
    def running(self) -> bool:
        return self.status is TrainingStatus.RUNNING

    def observe(self, state: Dict[str, Any]) -> TrainingStatus:
        """Feed the result of an assignment step.

        Args:
            state: At least ``assignments``; ``objective`` and ``centroids``
                for criteria that need them
        """
        if not self.running:
            raise RuntimeError(f"Controller already finished ({self.status.value})")
        state = dict(state)
        state.setdefault('iteration', self.iteration)
        if self.criterion.check(state):
            self.status = TrainingStatus.CONVERGED
        return self.status

    def advance(self) -> TrainingStatus:
        """Record one completed update round."""
        if not self.running:
            raise RuntimeError(f"Controller already finished ({self.status.value})")
        self.iteration += 1
        if self.iteration >= self.max_iter:
            self.status = TrainingStatus.MAX_ITERS_REACHED
        return self.status

    @property
    def last_n_changed(self) -> Optional[int]:
        """Points that changed cluster in the last observed step, if tracked."""
        return getattr(self.criterion, 'last_n_changed', None)

    def __repr__(self) -> str:
        return (f"ConvergenceController(max_iter={self.max_iter}, "
                f"iteration={self.iteration}, status={self.status.value})")
