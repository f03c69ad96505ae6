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
"""Ranking of reactions for model pruning based on expression and connectivity evidence"""

from typing import List, Tuple

import numpy as np
from pandas import Series
from scipy import sparse

from mcadre.exceptions import ContractViolationError
from mcadre.names import CORE_THRESHOLD
from mcadre.networktools import stoichiometric_data


def _aligned(model, values, name) -> Series:
    reaction_ids = model.reactions.list_attr('id')
    values = Series(values)
    if len(values) != len(reaction_ids) or set(values.index) != set(reaction_ids):
        raise ContractViolationError(name + ' must contain one value for every reaction of the model.')
    return values.reindex(reaction_ids)


def calc_conn_evidence(model, evidence) -> Series:
    """Connectivity-based evidence of reactions

    The connectivity evidence of a reaction is the mean expression evidence of all other reactions
    that share at least one metabolite with it. Undefined (nan) and negative evidence count as zero.
    Reactions without neighbors receive 0.

    Args:
        model (cobra.Model):
            A metabolic model that is an instance of the cobra.Model class.

        evidence (pandas.Series):
            Expression evidence per reaction, e.g. from calc_expr_evidence.

    Returns:
        (pandas.Series):
            Connectivity evidence per reaction.
    """
    evidence = _aligned(model, evidence, 'Evidence')
    S, _, _, reaction_ids = stoichiometric_data(model)
    S = (S != 0).astype(float)
    A = sparse.csr_matrix(S.T @ S)
    A.setdiag(0.0)
    A.eliminate_zeros()
    A = (A != 0).astype(float)
    degree = np.asarray(A.sum(axis=1)).ravel()
    values = np.clip(np.nan_to_num(evidence.values, nan=0.0), 0.0, None)
    total = A @ values
    conn = np.divide(total, degree, out=np.zeros_like(total), where=degree > 0)
    return Series(conn, index=reaction_ids)


def rank_reactions(model, evidence, conn_evidence=None, threshold=CORE_THRESHOLD) -> Tuple[List[str], List[str]]:
    """Split reactions into a core set and an ordered list of removal candidates

    Reactions with an evidence of at least threshold form the core. All other reactions are ranked
    by increasing expression evidence, then increasing connectivity evidence, so that reactions with
    the least support come first. Undefined evidence ranks like zero evidence.

    Example:
        core, candidates = rank_reactions(model, E_X)

    Args:
        model (cobra.Model):
            A metabolic model that is an instance of the cobra.Model class.

        evidence (pandas.Series):
            Expression evidence per reaction.

        conn_evidence (optional (pandas.Series)):
            Connectivity evidence per reaction. Computed with calc_conn_evidence if omitted.

        threshold (optional (float)): (Default: 0.9)
            Minimum evidence of core reactions.

    Returns:
        (Tuple):
            (core, candidates), two lists of reaction identifiers.
    """
    evidence = _aligned(model, evidence, 'Evidence')
    if conn_evidence is None:
        conn_evidence = calc_conn_evidence(model, evidence)
    conn_evidence = _aligned(model, conn_evidence, 'Connectivity evidence')
    core = [rid for rid, e in evidence.items() if e >= threshold]
    candidates = sorted(set(evidence.index).difference(core),
                        key=lambda rid: (np.nan_to_num(evidence[rid], nan=0.0), conn_evidence[rid], rid))
    return core, candidates
