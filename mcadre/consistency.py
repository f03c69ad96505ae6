#!/usr/bin/env python3
#
# Copyright 2022 Max Planck Insitute Magdeburg
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
#
#
"""Identification of blocked reactions and consistency checks for model pruning

The consistency check evaluates the removal of a single reaction from a model: it first looks
for core reactions that were cut off by dead-end metabolites (a pure matrix operation) and only
if there are none, it enumerates all reactions with zero flux capacity with a heuristic speed-up
of flux variability analysis (Jerby et al., 2010).
"""

import logging
import time
from typing import List, NamedTuple

import numpy as np

from mcadre.exceptions import ContractViolationError, InfeasibleModelError
from mcadre.lptools import fba, fva, model_with_solver, solver_config
from mcadre.names import *
from mcadre.networktools import check_core_deadends, clear_objective, remove_reaction


class ConsistencyResult(NamedTuple):
    """Outcome of check_model_consistency

    Attributes:
        inactive_rxns (list of str):
            Reactions with zero flux capacity. If result is CORE_DEAD_END, only the dead-end core
            reactions and the removed reaction are listed.

        time (float):
            Wall-clock time of the check in seconds.

        result (int):
            NO_CORE_DEAD_END (1) or CORE_DEAD_END (2).
    """
    inactive_rxns: List[str]
    time: float
    result: int


def _optimize(model, obj, obj_sense, config):
    sol = fba(model, obj=obj, obj_sense=obj_sense, config=config)
    if sol.status == INFEASIBLE:
        raise InfeasibleModelError('No feasible flux distribution (' + obj_sense + ' ' + str(len(obj)) + ' reactions)')
    return sol


def _is_blocked(model, reaction_id, config) -> bool:
    """Maximize and minimize the flux through a single reaction"""
    for sense in (MAXIMIZE, MINIMIZE):
        try:
            sol = _optimize(model, [reaction_id], sense, config)
        except InfeasibleModelError:
            return True
        if abs(sol.objective_value) >= config.tol:
            return False
    return True


def _find_inactive_heuristic(model, config, seed=None) -> List[str]:
    tol = config.tol
    inactive = [r.id for r in model.reactions if abs(r.lower_bound) < tol and abs(r.upper_bound) < tol]
    unresolved = sorted(set(model.reactions.list_attr('id')).difference(inactive))
    rng = np.random.default_rng(seed) if seed is not None else None
    while unresolved:
        num_unresolved = len(unresolved)
        try:
            # maximizing and minimizing the sum of fluxes reveals forward and backward activity
            for sense in (MAXIMIZE, MINIMIZE):
                fluxes = _optimize(model, unresolved, sense, config).fluxes
                unresolved = [rid for rid in unresolved if abs(fluxes[rid]) < tol]
                if not unresolved:
                    break
        except InfeasibleModelError:
            logging.warning('Model is infeasible. ' + str(len(unresolved)) + ' unresolved reactions are set inactive.')
            inactive += unresolved
            break
        logging.debug('  ' + str(num_unresolved - len(unresolved)) + ' reactions found active, ' + str(len(unresolved)) +
                      ' unresolved.')
        if unresolved and len(unresolved) == num_unresolved:
            rid = unresolved[0] if rng is None else unresolved[rng.integers(len(unresolved))]
            if _is_blocked(model, rid, config):
                inactive.append(rid)
            unresolved.remove(rid)
    return sorted(inactive)


def _find_inactive_fva(model, config) -> List[str]:
    flux_ranges = fva(model, config=config)
    blocked = flux_ranges.isna().any(axis=1) | \
              ((flux_ranges.minimum.abs() < config.tol) & (flux_ranges.maximum.abs() < config.tol))
    return sorted(flux_ranges.index[blocked])


def find_inactive_rxns(model, method=HEURISTIC, **kwargs) -> List[str]:
    """Find all reactions with zero flux capacity (blocked reactions)

    With the heuristic method, the sum of fluxes of all unresolved reactions is maximized and
    minimized. Every reaction that carries flux in one of the solutions is active. If a round
    resolves no reaction, a single reaction is maximized and minimized on its own. If the model is
    infeasible, all unresolved reactions are reported as inactive.

    Example:
        blocked = find_inactive_rxns(model, solver='glpk')

    Args:
        model (cobra.Model):
            A metabolic model that is an instance of the cobra.Model class. Its objective is ignored
            and the model is not modified.

        method (optional (str)): (Default: 'heuristic')
            'heuristic' for sequential batch optimization or 'fva' for a full flux variability analysis.

        seed (optional (int)):
            If given, the reaction that is tested individually after a round without progress is drawn
            randomly with this seed. By default, the reaction with the lowest identifier is tested.

        config (optional (SolverConfig)):
            Solver settings. Alternatively, 'solver' and 'tol' can be passed as keyword arguments.

    Returns:
        (list of str):
            Sorted identifiers of the inactive reactions.
    """
    config = solver_config(**kwargs)
    model = model_with_solver(model, config)
    if method == HEURISTIC:
        return _find_inactive_heuristic(model, config, kwargs.get(SEED))
    elif method == FVA:
        return _find_inactive_fva(model, config)
    raise ValueError('Unknown method ' + str(method) + ". Use '" + HEURISTIC + "' or '" + FVA + "'.")


def check_model_consistency(model, r=None, core=(), de_check=True, method=HEURISTIC, **kwargs) -> ConsistencyResult:
    """Check which reactions become inactive when a reaction is removed from a model

    The function can report the inactive reactions of an entire model (r=None) or be used within a
    pruning algorithm to examine the effect of removing the reaction r. In the latter case, the
    core reactions are first checked for dead-end metabolites. If any core reaction is found to be
    a dead end, the function stops without enumerating the remaining inactive reactions.

    Example:
        inactive, t, result = check_model_consistency(model, 'PGI', core=['PFK', 'FBA'])

    Args:
        model (cobra.Model):
            A metabolic model that is an instance of the cobra.Model class. It is not modified.

        r (optional (str)):
            Identifier of the reaction to be removed.

        core (optional (list of str)):
            Identifiers of the core reactions.

        de_check (optional (bool)): (Default: True)
            Check the core reactions for dead-end metabolites before solving any LP.

        method (optional (str)): (Default: 'heuristic')
            Method used to find inactive reactions: 'heuristic' or 'fva' (see find_inactive_rxns).

        seed, config, solver, tol:
            Passed on to find_inactive_rxns.

    Returns:
        (ConsistencyResult):
            A named tuple (inactive_rxns, time, result). result is NO_CORE_DEAD_END (1) if the removal
            of r did not create dead ends in the core, and CORE_DEAD_END (2) if it did.
    """
    t0 = time.perf_counter()
    config = solver_config(**kwargs)
    core = list(core)
    unknown = [rid for rid in core if rid not in model.reactions]
    if unknown:
        raise ContractViolationError('Core reactions not found in model: ' + str(unknown))

    if r is not None:
        model = remove_reaction(model, r)
    else:
        model = model.copy()
        clear_objective(model)
    inactive_rxns = [] if r is None else [r]
    result = NO_CORE_DEAD_END

    if de_check:
        dead_core = check_core_deadends(model, core, config.tol)
    else:
        dead_core = []

    if dead_core:
        inactive_rxns = sorted(set(dead_core).union(inactive_rxns))
        result = CORE_DEAD_END
        logging.info('Removal of ' + str(r) + ' creates dead ends in ' + str(len(dead_core)) + ' core reactions.')
    else:
        inactive_rxns = find_inactive_rxns(model, method, config=config, seed=kwargs.get(SEED))
        logging.info(str(len(inactive_rxns)) + ' inactive reactions.')

    elapsed = time.perf_counter() - t0
    logging.info('check_model_consistency time: ' + format(elapsed, '1.2f') + ' s')
    return ConsistencyResult(inactive_rxns, elapsed, result)
