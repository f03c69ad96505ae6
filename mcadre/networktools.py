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
"""Stoichiometric analysis of metabolic networks: dead-end metabolites and model reduction"""

import logging
from typing import List, Tuple

import numpy as np
from cobra.util import create_stoichiometric_matrix
from optlang.symbolics import Zero
from scipy import sparse

from mcadre.exceptions import ContractViolationError
from mcadre.names import ACTIVITY_TOL


def check_alignment(S, lb, ub, reaction_ids=None):
    """Verify that matrix columns, bounds and reaction identifiers refer to the same reactions"""
    sizes = {'S columns': S.shape[1], 'lower bounds': len(lb), 'upper bounds': len(ub)}
    if reaction_ids is not None:
        sizes['reaction identifiers'] = len(reaction_ids)
    if len(set(sizes.values())) > 1:
        raise ContractViolationError('Misaligned reaction data: ' + ', '.join(k + ' = ' + str(v) for k, v in sizes.items()))


def stoichiometric_data(model) -> Tuple[sparse.csr_matrix, np.ndarray, np.ndarray, List[str]]:
    """Extract stoichiometric matrix, flux bounds and reaction identifiers from a model

    Returns:
        (Tuple):
            (S, lb, ub, reaction_ids) with S as a sparse matrix (metabolites x reactions) and all
            entries aligned with model.reactions.
    """
    S = sparse.csr_matrix(create_stoichiometric_matrix(model, array_type='lil'))
    lb = np.array([r.lower_bound for r in model.reactions], dtype=float)
    ub = np.array([r.upper_bound for r in model.reactions], dtype=float)
    reaction_ids = model.reactions.list_attr('id')
    check_alignment(S, lb, ub, reaction_ids)
    return S, lb, ub, reaction_ids


def _oriented_matrix(S, lb, ub, tol):
    """Drop reactions that cannot carry flux and flip reactions that only run backwards"""
    lb = np.asarray(lb, dtype=float)
    ub = np.asarray(ub, dtype=float)
    check_alignment(S, lb, ub)
    usable = (ub >= tol) | (lb <= -tol)
    backward = usable & (ub < tol)
    reversible = usable & (ub >= tol) & (lb <= -tol)
    scale = np.where(backward, -1.0, 1.0) * usable
    S = sparse.csr_matrix(S, dtype=float) @ sparse.diags(scale)
    S = sparse.csr_matrix(S)
    S.eliminate_zeros()
    return S, usable, reversible


def find_dead_end_metabolites(S, lb, ub, tol=ACTIVITY_TOL) -> np.ndarray:
    """Find metabolites that cannot be balanced at steady state

    Only reactions with a nonzero flux range are considered. A metabolite that takes part in at least
    one of these reactions is a dead end if it takes part in only one of them, or if it can only be
    produced or only be consumed. Reversible reactions can do both.

    Example:
        dead = find_dead_end_metabolites(S, lb, ub)

    Args:
        S (scipy.sparse matrix or numpy.ndarray):
            Stoichiometric matrix (metabolites x reactions).

        lb, ub (list of float):
            Lower and upper flux bounds of the reactions.

        tol (optional (float)): (Default: 1e-6)
            Bounds with a smaller magnitude count as zero.

    Returns:
        (numpy.ndarray):
            Boolean vector marking dead-end metabolites.
    """
    S, _, reversible = _oriented_matrix(S, lb, ub, tol)
    num_rxns = np.diff(S.indptr)
    num_rev = np.asarray((S @ sparse.diags(reversible.astype(float)) != 0).sum(axis=1)).ravel()
    produced = np.asarray((S > 0).sum(axis=1)).ravel() + num_rev > 0
    consumed = np.asarray((S < 0).sum(axis=1)).ravel() + num_rev > 0
    return (num_rxns > 0) & ((num_rxns == 1) | ~produced | ~consumed)


def find_dead_end_reactions(S, lb, ub, reaction_ids, tol=ACTIVITY_TOL, iterate=False) -> List[str]:
    """Find reactions that are blocked because they contain a dead-end metabolite

    Args:
        S, lb, ub:
            Stoichiometric matrix and flux bounds (see find_dead_end_metabolites).

        reaction_ids (list of str):
            Reaction identifiers aligned with the columns of S.

        tol (optional (float)): (Default: 1e-6)
            Bounds with a smaller magnitude count as zero.

        iterate (optional (bool)): (Default: False)
            Block the dead-end reactions found and search again until no new dead ends appear.

    Returns:
        (list of str):
            Identifiers of dead-end reactions in the order of reaction_ids.
    """
    check_alignment(S, lb, ub, reaction_ids)
    lb = np.array(lb, dtype=float)
    ub = np.array(ub, dtype=float)
    dead_rxns = np.zeros(len(reaction_ids), dtype=bool)
    while True:
        dead_mets = find_dead_end_metabolites(S, lb, ub, tol)
        S_or, _, _ = _oriented_matrix(S, lb, ub, tol)
        new = (S_or[np.flatnonzero(dead_mets), :].getnnz(axis=0) > 0) & ~dead_rxns
        dead_rxns |= new
        if not iterate or not new.any():
            break
        lb[new] = 0.0
        ub[new] = 0.0
    return [rid for rid, d in zip(reaction_ids, dead_rxns) if d]


def check_core_deadends(model, core, tol=ACTIVITY_TOL, iterate=False) -> List[str]:
    """Identify core reactions that are blocked by dead-end metabolites

    The check only uses the stoichiometric matrix and the flux bounds and solves no LP. It is used
    during model pruning to find out whether the removal of a reaction damaged the core.

    Example:
        dead_core = check_core_deadends(model, ['PGI', 'PFK'])

    Args:
        model (cobra.Model):
            A metabolic model that is an instance of the cobra.Model class.

        core (list of str):
            Identifiers of core reactions. Identifiers that are not part of the model are ignored.

        tol (optional (float)): (Default: 1e-6)
            Bounds with a smaller magnitude count as zero.

        iterate (optional (bool)): (Default: False)
            Propagate dead ends through the network (see find_dead_end_reactions).

    Returns:
        (list of str):
            Sorted identifiers of the dead-end core reactions.
    """
    S, lb, ub, reaction_ids = stoichiometric_data(model)
    core = set(core)
    absent = core.difference(reaction_ids)
    if absent:
        logging.debug(str(len(absent)) + ' core reactions not in model: ' + ', '.join(sorted(absent)))
    dead = find_dead_end_reactions(S, lb, ub, reaction_ids, tol, iterate)
    return sorted(core.intersection(dead))


def clear_objective(model):
    """Set all objective coefficients of a model to zero"""
    model.objective = model.problem.Objective(Zero, direction='max', sloppy=True)


def remove_reaction(model, reaction_id):
    """Return a copy of a model without the given reaction and with a cleared objective

    The model passed to this function is not modified.

    Args:
        model (cobra.Model):
            A metabolic model that is an instance of the cobra.Model class.

        reaction_id (str):
            Identifier of the reaction to be removed.

    Returns:
        (cobra.Model):
            The reduced copy of the model.
    """
    if reaction_id not in model.reactions:
        raise ContractViolationError('Reaction ' + str(reaction_id) + ' not found in model.')
    reduced = model.copy()
    reduced.remove_reactions([reaction_id])
    clear_objective(reduced)
    return reduced
