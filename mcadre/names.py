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
"""Static strings and default values used in the mcadre package

    Solvers and status codes

        SOLVER = 'solver'

        CPLEX = 'cplex'

        GUROBI = 'gurobi'

        SCIP = 'scip'

        GLPK = 'glpk'

        OPTIMAL = 'optimal' # from optlang interface

        INFEASIBLE ='infeasible' # from optlang interface

        UNBOUNDED = 'unbounded' # from optlang interface

    Solver settings

        TOL = 'tol'

        PROCESSES = 'processes'

        SEED = 'seed'

        ACTIVITY_TOL = 1e-6

    Analysis

        MAXIMIZE = 'maximize'

        MINIMIZE = 'minimize'

        HEURISTIC = 'heuristic'

        FVA = 'fva'

    Evidence

        EVIDENCE_EPSILON = -1e-6

        CORE_THRESHOLD = 0.9

    Consistency check outcomes

        NO_CORE_DEAD_END = 1

        CORE_DEAD_END = 2
"""

# Solvers and status codes
SOLVER = 'solver'
CPLEX = 'cplex'
GUROBI = 'gurobi'
SCIP = 'scip'
GLPK = 'glpk'
from optlang.interface import OPTIMAL,    \
                              INFEASIBLE, \
                              UNBOUNDED

# Solver settings
TOL = 'tol'
PROCESSES = 'processes'
SEED = 'seed'
ACTIVITY_TOL = 1e-6

# Analysis
MAXIMIZE = 'maximize'
MINIMIZE = 'minimize'
HEURISTIC = 'heuristic'
FVA = 'fva'

# Evidence
EVIDENCE_EPSILON = -1e-6
CORE_THRESHOLD = 0.9

# Consistency check outcomes
NO_CORE_DEAD_END = 1
CORE_DEAD_END = 2
