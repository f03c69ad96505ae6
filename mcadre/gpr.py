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
"""Parsing of gene-protein-reaction (GPR) rules into OR-of-AND clause tables"""

import logging
import re
from dataclasses import dataclass
from typing import List, Tuple, Union

import numpy as np

from mcadre.exceptions import ParseError, ContractViolationError

GENE_TOKEN = 'gene'
AND_TOKEN = 'and'
OR_TOKEN = 'or'
LPAR_TOKEN = '('
RPAR_TOKEN = ')'

_token_pattern = re.compile(r'(?P<lpar>\()|(?P<rpar>\))|(?P<and>&&?)|(?P<or>\|\|?)|(?P<word>[A-Za-z0-9_.:\-]+)')
_reserved_words = {'not'}


@dataclass(frozen=True)
class Gene:
    """Leaf of a GPR expression tree"""
    id: str


@dataclass(frozen=True)
class And:
    """Conjunction of GPR sub-expressions (all gene products required)"""
    children: Tuple


@dataclass(frozen=True)
class Or:
    """Disjunction of GPR sub-expressions (isozymes)"""
    children: Tuple


GPRNode = Union[Gene, And, Or]


def tokenize_gpr(rule, reaction_id=None) -> List[Tuple[str, str, int]]:
    """Split a GPR rule into tokens

    Operators may be written as 'and'/'or' (any case) or as '&'/'|' ('&&'/'||').
    Gene identifiers consist of letters, digits and the characters '_', '.', ':' and '-'.

    Args:
        rule (str):
            The GPR rule, e.g. '(b0001 and b0002) or b0003'.

        reaction_id (optional (str)):
            Reaction the rule belongs to. Only used in error messages.

    Returns:
        (list of tuple):
            Tuples (kind, text, position) where kind is one of 'gene', 'and', 'or', '(' and ')'.
    """
    tokens = []
    pos = 0
    while pos < len(rule):
        if rule[pos].isspace():
            pos += 1
            continue
        m = _token_pattern.match(rule, pos)
        if m is None:
            raise ParseError(reaction_id, rule, pos, 'unknown token ' + repr(rule[pos]))
        text = m.group(0)
        if m.lastgroup == 'lpar':
            kind = LPAR_TOKEN
        elif m.lastgroup == 'rpar':
            kind = RPAR_TOKEN
        elif m.lastgroup == 'and' or text.lower() == 'and':
            kind = AND_TOKEN
        elif m.lastgroup == 'or' or text.lower() == 'or':
            kind = OR_TOKEN
        elif text.lower() in _reserved_words:
            raise ParseError(reaction_id, rule, pos, 'unsupported operator ' + repr(text))
        else:
            kind = GENE_TOKEN
        tokens.append((kind, text, pos))
        pos = m.end()
    return tokens


class _GPRParser(object):
    """Recursive descent parser for the grammar

        expr   := term ('or' term)*
        term   := factor ('and' factor)*
        factor := GENE | '(' expr ')'
    """

    def __init__(self, rule, reaction_id):
        self.rule = rule
        self.reaction_id = reaction_id
        self.tokens = tokenize_gpr(rule, reaction_id)
        self.i = 0

    def peek(self):
        if self.i < len(self.tokens):
            return self.tokens[self.i][0]
        return None

    def fail(self, reason):
        pos = self.tokens[self.i][2] if self.i < len(self.tokens) else None
        raise ParseError(self.reaction_id, self.rule, pos, reason)

    def parse(self) -> GPRNode:
        node = self.expr()
        if self.i < len(self.tokens):
            if self.peek() == RPAR_TOKEN:
                self.fail('unbalanced parenthesis')
            self.fail('unexpected token ' + repr(self.tokens[self.i][1]))
        return node

    def expr(self) -> GPRNode:
        terms = [self.term()]
        while self.peek() == OR_TOKEN:
            self.i += 1
            terms.append(self.term())
        return terms[0] if len(terms) == 1 else Or(tuple(terms))

    def term(self) -> GPRNode:
        factors = [self.factor()]
        while self.peek() == AND_TOKEN:
            self.i += 1
            factors.append(self.factor())
        return factors[0] if len(factors) == 1 else And(tuple(factors))

    def factor(self) -> GPRNode:
        kind = self.peek()
        if kind == GENE_TOKEN:
            node = Gene(self.tokens[self.i][1])
            self.i += 1
            return node
        if kind == LPAR_TOKEN:
            self.i += 1
            node = self.expr()
            if self.peek() != RPAR_TOKEN:
                self.fail('unbalanced parenthesis')
            self.i += 1
            return node
        if kind is None:
            self.fail('rule ends with an operator')
        self.fail('expected gene or "(" but found ' + repr(self.tokens[self.i][1]))


def parse_gpr(rule, reaction_id=None) -> Union[GPRNode, None]:
    """Parse a GPR rule into an expression tree of Gene, And and Or nodes

    Example:
        tree = parse_gpr('b0001 and (b0002 or b0003)', 'PGI')

    Args:
        rule (str):
            The GPR rule text. An empty rule (or None) means the reaction has no genes assigned.

        reaction_id (optional (str)):
            Identifier of the reaction, reported in a ParseError.

    Returns:
        (Gene, And, Or or None):
            Root of the expression tree or None for an empty rule.
    """
    if rule is None or not rule.strip():
        return None
    return _GPRParser(rule, reaction_id).parse()


def to_dnf(node) -> List[List[str]]:
    """Expand an expression tree into disjunctive normal form

    AND is distributed over OR so that the result is an OR of AND-clauses. Clause order
    follows the rule from left to right. Genes that occur repeatedly are kept.

    Args:
        node (Gene, And, Or or None):
            Expression tree as returned by parse_gpr.

    Returns:
        (list of list of str):
            One list of gene identifiers per AND-clause. Empty for an empty rule.
    """
    if node is None:
        return []
    if isinstance(node, Gene):
        return [[node.id]]
    if isinstance(node, Or):
        return [clause for child in node.children for clause in to_dnf(child)]
    if isinstance(node, And):
        clauses = [[]]
        for child in node.children:
            clauses = [left + right for left in clauses for right in to_dnf(child)]
        return clauses
    raise TypeError('Unsupported GPR node type: ' + str(type(node)))


def gpr_to_clauses(rule, reaction_id=None) -> List[List[str]]:
    """Parse a GPR rule and return its AND-clauses (see parse_gpr and to_dnf)"""
    return to_dnf(parse_gpr(rule, reaction_id))


class ClauseTable(object):
    """Model-wide table of GPR clauses

    Every row holds one AND-clause. The list 'reactions' names the reaction of each row, so
    that the clauses of a reaction with isozymes occupy consecutive rows. Rows are padded
    with '' up to the width of the widest clause.

    Example:
        table = ClauseTable({'r1': [['g1'], ['g2', 'g3']], 'r2': []})
        table.genes -> [['g1', ''], ['g2', 'g3']]
        table.reactions -> ['r1', 'r1']
        table.no_gene_reactions -> ['r2']

    Args:
        clauses (dict):
            Ordered mapping of reaction identifiers to their list of AND-clauses. Reactions
            mapped to an empty list have no genes assigned.
    """

    def __init__(self, clauses):
        self._clauses = {rid: [list(c) for c in cl] for rid, cl in clauses.items()}
        self.reactions = []
        self.no_gene_reactions = []
        rows = []
        for rid, cl in self._clauses.items():
            if not cl:
                self.no_gene_reactions.append(rid)
            for c in cl:
                self.reactions.append(rid)
                rows.append(c)
        self.width = max((len(c) for c in rows), default=0)
        self.genes = np.full((len(rows), self.width), '', dtype=object)
        for i, c in enumerate(rows):
            for j, g in enumerate(c):
                self.genes[i, j] = g

    @classmethod
    def from_rules(cls, rules) -> 'ClauseTable':
        """Build a clause table from a mapping {reaction_id: rule}"""
        return cls({rid: gpr_to_clauses(rule, rid) for rid, rule in rules.items()})

    @property
    def reaction_ids(self) -> List[str]:
        """All reactions covered by the table, including those without genes"""
        return list(self._clauses)

    def clauses(self, reaction_id) -> List[List[str]]:
        """AND-clauses of a single reaction"""
        return [list(c) for c in self._clauses[reaction_id]]

    def gene_ids(self) -> set:
        """Set of all gene identifiers that occur in the table"""
        return {g for cl in self._clauses.values() for c in cl for g in c}

    def items(self):
        return self._clauses.items()

    def __contains__(self, reaction_id):
        return reaction_id in self._clauses

    def __len__(self):
        return len(self.reactions)

    def __repr__(self):
        return '<ClauseTable ' + str(len(self._clauses)) + ' reactions, ' + str(len(self)) + ' clauses>'


def parse_gprs(model, reaction_ids=None) -> ClauseTable:
    """Parse the GPR rules of a metabolic model into a clause table

    Example:
        table = parse_gprs(model)

    Args:
        model (cobra.Model):
            A metabolic model that is an instance of the cobra.Model class containing GPR rules.

        reaction_ids (optional (list of str)):
            Only parse the rules of these reactions. By default all reactions are parsed.

    Returns:
        (ClauseTable):
            The clauses of all parsed reactions. Reactions with an empty rule are listed in
            ClauseTable.no_gene_reactions.
    """
    if reaction_ids is None:
        reactions = list(model.reactions)
    else:
        unknown = [rid for rid in reaction_ids if rid not in model.reactions]
        if unknown:
            raise ContractViolationError('Reactions not found in model: ' + str(unknown))
        reactions = [model.reactions.get_by_id(rid) for rid in reaction_ids]
    table = ClauseTable({r.id: gpr_to_clauses(r.gene_reaction_rule, r.id) for r in reactions})
    missing = table.gene_ids().difference(g.id for g in model.genes)
    if missing:
        raise ContractViolationError('GPR rules reference genes that are not part of the model: ' + str(sorted(missing)))
    logging.info('Parsed ' + str(len(reactions) - len(table.no_gene_reactions)) + ' GPR rules (' + str(len(table)) +
                 ' clauses, width ' + str(table.width) + ').')
    return table
