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
"""Exceptions raised by the mcadre package"""

from cobra.exceptions import Infeasible


class ParseError(ValueError):
    """A gene-protein-reaction rule could not be parsed

    Args:
        reaction_id (str):
            Identifier of the reaction whose rule is malformed.

        rule (str):
            The raw rule text.

        pos (int):
            Character offset of the offending token (None if the rule ended early).

        reason (str):
            Short description of the problem.
    """

    def __init__(self, reaction_id, rule, pos, reason):
        self.reaction_id = reaction_id
        self.rule = rule
        self.pos = pos
        self.reason = reason
        where = 'end of rule' if pos is None else 'position ' + str(pos)
        super().__init__('Cannot parse GPR rule of reaction ' + str(reaction_id) + ' (' + reason + ' at ' + where +
                         '): ' + repr(rule))


class ContractViolationError(ValueError):
    """Inputs are misaligned or reference unknown reactions or genes"""


class InfeasibleModelError(Infeasible):
    """An LP that was expected to have a feasible optimum is infeasible"""
