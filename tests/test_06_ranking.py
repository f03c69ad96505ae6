"""Test ranking of reactions by expression and connectivity evidence."""
import pytest
import numpy as np
from pandas import Series
import mcadre as mc


@pytest.fixture
def evidence(model_branch):
    table = mc.parse_gprs(model_branch)
    clause_scores = mc.combine_clause_scores(table, {'gA': 0.9, 'g1': 0.4, 'g2': 0.6})
    return mc.calc_expr_evidence(model_branch, clause_scores)


def test_evidence_fixture(evidence):
    """R1 has an undefined clause (g3), but g1 supports it."""
    assert (evidence.tolist() == [0.9, 0.4, 0.6, mc.EVIDENCE_EPSILON, mc.EVIDENCE_EPSILON])


def test_conn_evidence(model_branch, evidence):
    """Connectivity evidence is the mean evidence of neighboring reactions."""
    evidence['EX_C'] = np.nan
    conn = mc.calc_conn_evidence(model_branch, evidence)
    assert (conn.index.tolist() == ['EX_A', 'R1', 'R2', 'R_alt', 'EX_C'])
    assert (conn.tolist() == pytest.approx([0.2, 0.5, 0.4 / 3, 0.475, 0.3]))


def test_conn_evidence_isolated():
    """Reactions without neighbors have connectivity evidence 0."""
    from .conftest import build_model
    model = build_model([('EX_A', '--> A', 0.0, 10.0), ('EX_B', '--> B', 0.0, 10.0)])
    conn = mc.calc_conn_evidence(model, Series({'EX_A': 1.0, 'EX_B': 1.0}))
    assert (conn.tolist() == [0.0, 0.0])


def test_rank_reactions(model_branch, evidence):
    """Reactions with little support come first, core reactions are split off."""
    evidence['EX_C'] = np.nan
    core, candidates = mc.rank_reactions(model_branch, evidence)
    assert (core == ['EX_A'])
    assert (candidates == ['R_alt', 'EX_C', 'R1', 'R2'])
    core, candidates = mc.rank_reactions(model_branch, evidence, threshold=0.5)
    assert (core == ['EX_A', 'R2'])
    assert (candidates == ['R_alt', 'EX_C', 'R1'])


def test_rank_reactions_misaligned(model_branch):
    with pytest.raises(mc.ContractViolationError):
        mc.rank_reactions(model_branch, Series({'EX_A': 1.0}))
