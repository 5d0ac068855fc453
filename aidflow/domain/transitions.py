# SPDX-License-Identifier: Apache-2.0

"""
Transition table: the single authority on which status moves are legal.
"""

import logging
from typing import Any, Dict, FrozenSet, List, Tuple

from ..models.enums import RequestStatus
from .catalog import StatusCatalog, coerce_status
from .tables import WorkflowTables

logger = logging.getLogger(__name__)


class TransitionTable:
    """Adjacency map of legal status-to-status moves."""
    
    def __init__(self, tables: WorkflowTables, catalog: StatusCatalog):
        self.tables = tables
        self.catalog = catalog
    
    def allowed_next(self, status: Any) -> FrozenSet[RequestStatus]:
        """
        Statuses reachable in one move from the given status.
        
        Args:
            status: Current status
            
        Returns:
            Set of target statuses; empty for terminal statuses
            
        Raises:
            UnknownStatusError: If status is not a RequestStatus value
        """
        return self.tables.transitions.get(coerce_status(status), frozenset())
    
    def is_valid_transition(self, from_status: Any, to_status: Any) -> bool:
        """Whether moving from ``from_status`` to ``to_status`` is legal."""
        return coerce_status(to_status) in self.allowed_next(from_status)
    
    def describe_graph(self) -> Dict[RequestStatus, List[RequestStatus]]:
        """Transition graph in enum declaration order, for display."""
        order = list(RequestStatus)
        return {
            status: sorted(self.allowed_next(status), key=order.index)
            for status in RequestStatus
        }
    
    def validate(self) -> Tuple[bool, List[str]]:
        """
        Self-check the graph against the status catalog.
        
        Returns:
            Tuple of (is_valid, errors)
        """
        errors = []
        known = set(self.tables.statuses)
        
        for status in RequestStatus:
            if status not in known:
                errors.append(f"Status missing from catalog: {status.value}")
            if status not in self.tables.transitions:
                errors.append(f"Status missing from transition table: {status.value}")
        
        for source, targets in self.tables.transitions.items():
            for target in targets:
                if target not in known:
                    errors.append(f"Transition {source.value} -> {target} targets an unknown status")
            info = self.tables.statuses.get(source)
            if info is not None and info.is_terminal and targets:
                errors.append(f"Terminal status {source.value} has outgoing transitions")
            if info is not None and not info.is_terminal and not targets:
                errors.append(f"Non-terminal status {source.value} has no outgoing transitions")
        
        if errors:
            logger.error("Transition table self-check failed", extra={"errors": errors})
        
        return len(errors) == 0, errors
