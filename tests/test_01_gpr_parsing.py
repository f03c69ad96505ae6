"""Test parsing of GPR rules into OR-of-AND clause tables."""
import logging
import pytest
import mcadre as mc
from mcadre.gpr import Gene, And, Or

TEST_RULES = {
    'none': '',
    'iso': '1591',
    'or': '(221) or (222)',
    'and': '(23657) and (6520)',
    'zero': '(7299)',
    'both': '(1892) or (3030) and (3032)',
    'complex': '(549) or (3030) and (3032) or (1892)',
    'complex_zero': '(3906) and (2683) or (8704) or (8704)',
}


@pytest.mark.parametrize('gene', ['b0001', '1591', 'HGNC:1234', 'YAL012W', 'g_1.2-a'])
def test_single_gene(gene):
    """A rule without operators yields exactly one clause with the gene."""
    assert (mc.gpr_to_clauses(gene) == [[gene]])
    assert (mc.gpr_to_clauses('(' + gene + ')') == [[gene]])


@pytest.mark.parametrize('rule', ['', '   ', None])
def test_empty_rule(rule):
    """Empty rules have no clauses."""
    assert (mc.parse_gpr(rule) is None)
    assert (mc.gpr_to_clauses(rule) == [])


def test_expression_tree():
    """AND binds stronger than OR."""
    tree = mc.parse_gpr('A or B and C')
    assert (tree == Or((Gene('A'), And((Gene('B'), Gene('C'))))))


def test_precedence_with_parentheses():
    """The example from the mCADRE documentation: (A) or (B) and (C)."""
    assert (mc.gpr_to_clauses('(A) or (B) and (C)') == [['A'], ['B', 'C']])
    assert (mc.gpr_to_clauses('(A or B) and C') == [['A', 'C'], ['B', 'C']])


def test_distribution():
    """AND over OR is distributed into disjunctive normal form."""
    assert (mc.gpr_to_clauses('(A or B) and (C or D)') == [['A', 'C'], ['A', 'D'], ['B', 'C'], ['B', 'D']])
    assert (mc.gpr_to_clauses('A and (B and (C or D))') == [['A', 'B', 'C'], ['A', 'B', 'D']])
    assert (mc.gpr_to_clauses('((A or (B and C)) and D) or E') == [['A', 'D'], ['B', 'C', 'D'], ['E']])


def test_duplicates_are_kept():
    """Repeated genes are neither removed from clauses nor from the clause list."""
    assert (mc.gpr_to_clauses('A and (B or A)') == [['A', 'B'], ['A', 'A']])
    assert (mc.gpr_to_clauses('8704 or 8704') == [['8704'], ['8704']])


def test_operator_spellings():
    """Operators may be written in upper case or as symbols."""
    assert (mc.gpr_to_clauses('A AND B OR C') == [['A', 'B'], ['C']])
    assert (mc.gpr_to_clauses('A & B | C') == [['A', 'B'], ['C']])
    assert (mc.gpr_to_clauses('A && (B || C)') == [['A', 'B'], ['A', 'C']])


@pytest.mark.parametrize('rule', ['(A and B', 'A and B)', 'A and', 'or A', 'A or or B', 'A B', 'A ; B', 'not A', '()'])
def test_malformed_rules(rule):
    """Malformed rules raise a ParseError that names the reaction."""
    with pytest.raises(mc.ParseError) as err:
        mc.parse_gpr(rule, 'R_bad')
    assert (err.value.reaction_id == 'R_bad')
    assert ('R_bad' in str(err.value))


def test_parse_error_position():
    """The position of an unknown token is reported."""
    with pytest.raises(mc.ParseError) as err:
        mc.tokenize_gpr('A or $B', 'R1')
    assert (err.value.pos == 5)


def test_clause_table():
    """Clause table of the mCADRE test reactions."""
    table = mc.ClauseTable.from_rules(TEST_RULES)
    expected = [['1591', ''], ['221', ''], ['222', ''], ['23657', '6520'], ['7299', ''], ['1892', ''], ['3030', '3032'],
                ['549', ''], ['3030', '3032'], ['1892', ''], ['3906', '2683'], ['8704', ''], ['8704', '']]
    assert (table.genes.tolist() == expected)
    assert (table.reactions == ['iso', 'or', 'or', 'and', 'zero', 'both', 'both', 'complex', 'complex', 'complex',
                                'complex_zero', 'complex_zero', 'complex_zero'])
    assert (table.no_gene_reactions == ['none'])
    assert (table.reaction_ids == list(TEST_RULES))
    assert (table.width == 2)
    assert (len(table) == 13)
    assert (table.clauses('both') == [['1892'], ['3030', '3032']])
    assert ('none' in table)


def test_clause_table_without_genes():
    """A table of reactions without genes has no rows."""
    table = mc.ClauseTable.from_rules({'r1': '', 'r2': ''})
    assert (table.genes.shape == (0, 0))
    assert (table.no_gene_reactions == ['r1', 'r2'])


def test_parse_gprs_model(model_branch):
    """All rules of a model are parsed, reactions without rules are kept."""
    table = mc.parse_gprs(model_branch)
    assert (table.reaction_ids == ['EX_A', 'R1', 'R2', 'R_alt', 'EX_C'])
    assert (table.clauses('R1') == [['g1'], ['g2', 'g3']])
    assert (table.no_gene_reactions == ['R_alt', 'EX_C'])
    assert (table.gene_ids() == {'gA', 'g1', 'g2', 'g3'})


def test_parse_gprs_subset(model_branch):
    """Only the requested reactions are parsed."""
    table = mc.parse_gprs(model_branch, ['R2', 'R1'])
    assert (table.reaction_ids == ['R2', 'R1'])
    with pytest.raises(mc.ContractViolationError):
        mc.parse_gprs(model_branch, ['R1', 'unknown'])


def test_parse_gprs_logging(model_branch, caplog):
    """Progress messages can be silenced with DisableLogger."""
    caplog.set_level(logging.INFO)
    with mc.DisableLogger():
        mc.parse_gprs(model_branch)
    assert (not caplog.records)
    mc.parse_gprs(model_branch)
    assert (any('GPR rules' in rec.getMessage() for rec in caplog.records))
