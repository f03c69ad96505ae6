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
"""LP-based analysis of metabolic networks (FBA and FVA) on top of the COBRApy solver interface"""

import logging
from dataclasses import dataclass
from re import search
from typing import Optional

from cobra.core import Solution
from cobra.exceptions import OptimizationError
from cobra.flux_analysis import flux_variability_analysis
from numpy import inf, nan
from optlang.symbolics import Zero
from pandas import DataFrame, Series

from mcadre import avail_solvers
from mcadre.exceptions import ContractViolationError
from mcadre.names import *


@dataclass
class SolverConfig:
    """Settings for the LPs solved during an analysis

    An instance of this class is passed explicitly to every function that solves LPs. No global
    solver setting is consulted.

    Args:
        solver (optional (str)):
            Preferred solver: 'glpk', 'cplex', 'gurobi' or 'scip'. If None, the solver of the model is
            used if available, otherwise the first available solver.

        tol (optional (float)): (Default: 1e-6)
            Flux values with a smaller magnitude are considered zero.

        processes (optional (int)): (Default: 1)
            Number of processes used for FVA.
    """
    solver: Optional[str] = None
    tol: float = ACTIVITY_TOL
    processes: Optional[int] = None


def solver_config(config=None, **kwargs) -> SolverConfig:
    """Build a SolverConfig from keyword arguments ('solver', 'tol', 'processes')

    If a SolverConfig is passed as config, it is returned unchanged.
    """
    if config is not None:
        return config
    return SolverConfig(solver=kwargs.get(SOLVER), tol=kwargs.get(TOL, ACTIVITY_TOL), processes=kwargs.get(PROCESSES))


def select_solver(solver=None, model=None) -> str:
    """Select a solver for subsequent LP computations

    If a solver is provided and available, it is returned. Otherwise the solver that is attached to the
    model is used, if it is one of the available solvers. As a last resort, the first available solver
    is picked in the order 'glpk', 'cplex', 'gurobi', 'scip'.

    Example:
        solver = select_solver('cplex')

    Args:
        solver (optional (str)):
            A user preferred solver that should be checked for availability.

        model (optional (cobra.Model)):
            A metabolic model that is an instance of the cobra.Model class.

    Returns:
        (str):
            The selected solver name.
    """
    if not avail_solvers:
        raise RuntimeError('No LP solver available. Install swiglpk, cplex, gurobipy or pyscipopt.')
    if solver:
        if solver in avail_solvers:
            return solver
        logging.warning('Selected solver ' + solver + ' not available. Using ' + avail_solvers[0] + ' instead.')
    if hasattr(model, 'solver') and hasattr(model.solver, 'interface'):
        model_solver = search('(' + '|'.join(avail_solvers) + ')', model.solver.interface.__name__)
        if model_solver is not None:
            return model_solver[0]
        logging.warning('Solver specified in model (' + model.solver.interface.__name__ + ') unavailable')
    return avail_solvers[0]


def model_with_solver(model, config):
    """Return the model itself if it uses the configured solver, otherwise a copy that does"""
    solver = select_solver(config.solver, model)
    if search(solver, model.solver.interface.__name__) is None:
        model = model.copy()
        model.solver = solver
    return model


def objective_coefficients(obj, reaction_ids) -> dict:
    """Turn a reaction identifier, a list of identifiers or a dict into {reaction_id: coefficient}"""
    if isinstance(obj, str):
        obj = {obj: 1.0}
    elif not isinstance(obj, dict):
        obj = {rid: 1.0 for rid in obj}
    unknown = [rid for rid in obj if rid not in reaction_ids]
    if unknown:
        raise ContractViolationError('Objective references reactions not in the model: ' + str(unknown))
    return obj


def variable_coefficients(model, coefficients) -> dict:
    """Translate {reaction_id: coefficient} into coefficients of the forward and reverse variables

    Coefficients are set on the optlang variables directly, so no symbolic expression is built.
    """
    var_coeffs = {}
    for rid, c in coefficients.items():
        r = model.reactions.get_by_id(rid)
        var_coeffs[r.forward_variable] = c
        var_coeffs[r.reverse_variable] = -c
    return var_coeffs


def fba(model, obj=None, obj_sense=MAXIMIZE, **kwargs) -> Solution:
    """Flux Balance Analysis (FBA)

    Optimizes a linear objective function over the steady-state flux space of a model. The model
    itself is not modified.

    If the problem is unbounded, the objective is fixed to 1 (maximization) or -1 (minimization) to
    return a feasible flux vector in which the objective reactions are active. The objective value
    is then inf or -inf.

    Example:
        optim = fba(model, obj=['r1', 'r2'], obj_sense='maximize', solver='glpk')

    Args:
        model (cobra.Model):
            A metabolic model that is an instance of the cobra.Model class. If no custom objective
            function is provided, the model's objective function is used.

        obj (optional (str), (list of str) or (dict)):
            A custom objective: a single reaction identifier, a list of identifiers (each with
            coefficient 1) or a dict {reaction_id: coefficient}.

        obj_sense (optional (str)): (Default: 'maximize')
            The optimization direction: 'maximize' (or 'max') or 'minimize' (or 'min').

        config (optional (SolverConfig)):
            Solver settings. Alternatively, 'solver' can be passed as a keyword argument.

    Returns:
        (cobra.core.Solution):
            A solution object that contains the objective value, an optimal flux vector and the
            optimization status. If the problem is infeasible, the flux vector is empty.
    """
    config = solver_config(**kwargs)
    model = model_with_solver(model, config)
    direction = 'min' if obj_sense in ['min', MINIMIZE] else 'max'
    reaction_ids = model.reactions.list_attr('id')
    with model:
        if obj is not None:
            coefficients = objective_coefficients(obj, set(reaction_ids))
            model.objective = model.problem.Objective(Zero, direction=direction, sloppy=True)
            model.objective.set_linear_coefficients(variable_coefficients(model, coefficients))
        else:
            model.objective_direction = direction
        status = model.solver.optimize()
        if status == UNBOUNDED:
            var_coeffs = model.solver.objective.get_linear_coefficients(model.variables)
            bound = 1.0 if direction == 'max' else -1.0
            fix_obj = model.problem.Constraint(Zero, lb=bound, ub=bound)
            model.add_cons_vars(fix_obj)
            fix_obj.set_linear_coefficients(var_coeffs)
            model.objective = model.problem.Objective(Zero, direction='max', sloppy=True)
            opt_cx = inf if direction == 'max' else -inf
            if model.solver.optimize() != OPTIMAL:
                status = INFEASIBLE
        elif status == OPTIMAL:
            opt_cx = model.solver.objective.value
        else:
            status = INFEASIBLE
        if status == INFEASIBLE:
            return Solution(objective_value=nan, status=status, fluxes=Series(dtype=float))
        primal = model.solver.primal_values
        fluxes = {r.id: primal[r.id] - primal[r.reverse_id] for r in model.reactions}
    fluxes = Series({rid: v if abs(v) >= 1e-11 else 0.0 for rid, v in fluxes.items()}, dtype=float)  # cut off for very small absolute values
    return Solution(objective_value=opt_cx, status=status, fluxes=fluxes)


def fva(model, reaction_ids=None, **kwargs) -> DataFrame:
    """Flux Variability Analysis (FVA)

    Determines the minimum and maximum flux of reactions in the steady-state flux space of a model,
    regardless of the model objective.

    Example:
        flux_ranges = fva(model, solver='glpk')

    Args:
        model (cobra.Model):
            A metabolic model that is an instance of the cobra.Model class.

        reaction_ids (optional (list of str)):
            Reactions to analyze. By default all reactions.

        config (optional (SolverConfig)):
            Solver settings. Alternatively, 'solver' and 'processes' can be passed as keyword arguments.

    Returns:
        (pandas.DataFrame):
            A data frame containing the minimum and maximum attainable flux rates. If the model is
            infeasible, all values are nan.
    """
    config = solver_config(**kwargs)
    model = model_with_solver(model, config)
    if reaction_ids is None:
        reaction_ids = model.reactions.list_attr('id')
    try:
        fva_result = flux_variability_analysis(model,
                                               reaction_list=reaction_ids,
                                               fraction_of_optimum=0.0,
                                               processes=config.processes or 1)
    except OptimizationError:
        logging.error('FVA problem not feasible.')
        return DataFrame({"minimum": nan, "maximum": nan}, index=reaction_ids)
    fva_result = fva_result[["minimum", "maximum"]]
    return fva_result.where(fva_result.abs() >= 1e-11, 0.0)  # cut off for very small absolute values
