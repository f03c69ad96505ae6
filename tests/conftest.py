import pytest
from numpy import inf
from cobra import Model, Reaction
from mcadre.names import *

# Initialize an empty list for solvers
solvers = [GLPK]

# Add GRUOBI to the list if the gurobipy package is installed
try:
    import gurobipy
    solvers.append(GUROBI)
except ImportError:
    pass  # GUROBI is not installed

# Add CPLEX to the list if the cplex package is installed
try:
    import cplex
    solvers.append(CPLEX)
except ImportError:
    pass  # CPLEX is not installed


@pytest.fixture(params=solvers, scope="session")
def curr_solver(request: pytest.FixtureRequest) -> str:
    """Provide session-level fixture for parametrized solver names."""
    return request.param


def build_model(reactions, model_id='test'):
    """Build a model from tuples (id, equation, lower bound, upper bound[, gpr rule])."""
    model = Model(model_id)
    for entry in reactions:
        rid, equation, lb, ub = entry[:4]
        r = Reaction(rid)
        model.add_reactions([r])
        r.reaction = equation
        r.bounds = (lb, ub)
        if len(entry) > 4:
            r.gene_reaction_rule = entry[4]
    return model


BRANCH = [
    ('EX_A', '--> A', 0.0, 10.0, 'gA'),
    ('R1', 'A --> B', 0.0, 1000.0, 'g1 or (g2 and g3)'),
    ('R2', 'B --> C', 0.0, 1000.0, 'g2'),
    ('R_alt', 'A --> C', 0.0, 1000.0, ''),
    ('EX_C', 'C --> ', 0.0, 1000.0),
]

BLOCKED = [
    ('R3', 'B --> D', 0.0, 1000.0),
    ('Z1', 'A --> B', 0.0, 0.0),
    ('Z2', 'B --> C', 0.0, 0.0),
    ('Z3', 'A --> C', 0.0, 0.0),
    ('R_back', 'C --> B', -1000.0, 0.0),
]


@pytest.fixture
def model_branch():
    """Uptake of A, two routes from A to C and export of C.

    EX_A -> A -(R1)-> B -(R2)-> C -> EX_C and A -(R_alt)-> C
    """
    return build_model(BRANCH)


@pytest.fixture
def model_blocked():
    """model_branch with a dead-end branch (R3), three closed reactions (Z1-Z3) and a backward-only reaction."""
    return build_model(BRANCH + BLOCKED)


@pytest.fixture
def model_closed():
    """model_branch with three reactions whose bounds are fixed to zero."""
    return build_model(BRANCH + BLOCKED[1:4])


@pytest.fixture
def model_infeasible():
    """Forced uptake of A that can only end in C, which has no consumer."""
    return build_model([
        ('EX_A', '--> A', 1.0, 10.0),
        ('R1', 'A --> B', 0.0, 1000.0),
        ('R2', 'B --> C', 0.0, 1000.0),
    ])


@pytest.fixture
def model_unbounded():
    """Conversion of A to C without flux limits."""
    return build_model([
        ('EX_A', '--> A', 0.0, inf),
        ('R1', 'A --> C', 0.0, inf),
        ('EX_C', 'C --> ', 0.0, inf),
    ])
