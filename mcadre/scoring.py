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
"""Propagation of gene scores through GPR clauses to reaction evidence

Gene scores (ubiquity or confidence values in [0,1]) are combined with AND = minimum within a
clause and OR = maximum across the clauses of a reaction. A gene without a score is undefined
(None) and stays undefined through the minimum, so that 'no data' is never confused with a
score of zero.
"""

import logging
from typing import Dict, List, Optional

import numpy as np
from pandas import Series

from mcadre.exceptions import ContractViolationError
from mcadre.names import EVIDENCE_EPSILON

Score = Optional[float]


def score_and(scores) -> Score:
    """Combine scores of genes that are all required: the minimum, undefined if any score is undefined"""
    scores = list(scores)
    if not scores or any(s is None for s in scores):
        return None
    return min(scores)


def score_or(scores) -> Score:
    """Combine scores of alternative clauses: the maximum over the defined scores"""
    defined = [s for s in scores if s is not None]
    if not defined:
        return None
    return max(defined)


def gene_score(gene_scores, gene) -> Score:
    """Look up the score of a gene, None if the gene has no (finite) score"""
    value = gene_scores.get(gene)
    if value is None or np.isnan(value):
        return None
    return float(value)


def map_gene_scores_to_rxns(table, gene_scores) -> np.ndarray:
    """Substitute the genes of a clause table by their scores

    Example:
        U_GPR = map_gene_scores_to_rxns(table, {'g1': 0.2, 'g2': 0.7})

    Args:
        table (ClauseTable):
            GPR clauses as returned by parse_gprs.

        gene_scores (dict or pandas.Series):
            Scores of genes in [0,1], indexed by gene identifier.

    Returns:
        (numpy.ndarray):
            A float matrix of the same shape as table.genes. Padding cells and genes without a score
            are nan. Use table.genes != '' to tell padding apart.
    """
    U = np.full(table.genes.shape, np.nan)
    for (i, j), g in np.ndenumerate(table.genes):
        if g:
            s = gene_score(gene_scores, g)
            if s is not None:
                U[i, j] = s
    return U


def combine_clause_scores(table, gene_scores) -> Dict[str, List[Score]]:
    """Compute one score per AND-clause

    The score of a clause is the minimum of its gene scores. If any gene of the clause lacks a score,
    the clause score is undefined (None).

    Example:
        clause_scores = combine_clause_scores(table, {'A': 0.2, 'B': 0.3, 'C': 0.4})
        # for 'A or (B and C)': {'r1': [0.2, 0.3]}

    Args:
        table (ClauseTable):
            GPR clauses as returned by parse_gprs.

        gene_scores (dict or pandas.Series):
            Scores of genes in [0,1], indexed by gene identifier.

    Returns:
        (dict):
            A dictionary {reaction_id: [clause scores]} in the order of the table. Reactions without
            genes are mapped to an empty list.
    """
    clause_scores = {}
    missing = set()
    for rid, clauses in table.items():
        clause_scores[rid] = []
        for clause in clauses:
            member_scores = [gene_score(gene_scores, g) for g in clause]
            missing.update(g for g, s in zip(clause, member_scores) if s is None)
            clause_scores[rid].append(score_and(member_scores))
    if missing:
        logging.debug(str(len(missing)) + ' genes without score: ' + ', '.join(sorted(missing)))
    return clause_scores


def calc_expr_evidence(model, clause_scores, is_high_conf=None, epsilon=EVIDENCE_EPSILON) -> Series:
    """Calculate the expression-based evidence for every reaction of a model

    The evidence of a reaction is the maximum of its clause scores. The following rules apply on top:

    - reactions that are not part of clause_scores have evidence 0
    - an undefined evidence (all clause scores undefined) is nan
    - an evidence of exactly zero, also for reactions without genes, is replaced by epsilon
    - reactions marked in is_high_conf have evidence 1

    Example:
        E_X = calc_expr_evidence(model, combine_clause_scores(table, U), is_C_H)

    Args:
        model (cobra.Model or list of str):
            A metabolic model that is an instance of the cobra.Model class, or the list of its reaction
            identifiers. Determines the order of the result.

        clause_scores (dict):
            Clause scores per reaction as returned by combine_clause_scores.

        is_high_conf (optional (list of bool)):
            Mask of high-confidence reactions, aligned with the reactions of the model.

        epsilon (optional (float)): (Default: -1e-6)
            Value that marks a computed evidence of zero.

    Returns:
        (pandas.Series):
            Evidence per reaction, indexed by reaction identifier.
    """
    if hasattr(model, 'reactions'):
        reaction_ids = model.reactions.list_attr('id')
    else:
        reaction_ids = list(model)
    known = set(reaction_ids)
    unknown = [rid for rid in clause_scores if rid not in known]
    if unknown:
        raise ContractViolationError('Clause scores given for reactions not in the model: ' + str(unknown))
    if is_high_conf is None:
        is_high_conf = np.zeros(len(reaction_ids), dtype=bool)
    is_high_conf = np.asarray(is_high_conf, dtype=bool)
    if is_high_conf.shape != (len(reaction_ids),):
        raise ContractViolationError('High-confidence mask has ' + str(is_high_conf.size) + ' entries, but the model has ' +
                                     str(len(reaction_ids)) + ' reactions.')

    evidence = Series(0.0, index=reaction_ids)
    for rid, scores in clause_scores.items():
        value = score_or(scores) if scores else 0.0
        if value is None:
            value = np.nan
        elif value == 0.0:
            value = epsilon
        evidence[rid] = value
    evidence[is_high_conf] = 1.0
    return evidence


def map_high_conf_to_rxns(model, table, high_conf_genes) -> np.ndarray:
    """Determine which reactions are supported by high-confidence genes

    A reaction is high-confidence if all genes of at least one of its AND-clauses are
    high-confidence genes.

    Args:
        model (cobra.Model):
            A metabolic model that is an instance of the cobra.Model class.

        table (ClauseTable):
            GPR clauses as returned by parse_gprs.

        high_conf_genes (iterable of str):
            Identifiers of high-confidence genes.

    Returns:
        (numpy.ndarray):
            A boolean mask aligned with the reactions of the model.
    """
    high_conf_genes = set(high_conf_genes)
    supported = {rid for rid, clauses in table.items() if any(set(c) <= high_conf_genes for c in clauses if c)}
    return np.array([r.id in supported for r in model.reactions], dtype=bool)
