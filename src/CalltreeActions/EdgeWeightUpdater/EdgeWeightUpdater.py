from typing import Dict
import logging
import math

from src.CalltreeActions.AbstractClasses import CallTreeAction

logger = logging.getLogger(__name__)


class EdgeWeightUpdater(CallTreeAction):
    """
    Applies externally computed weights (for example inclusive time fractions) to the call tree edges.
    """

    def __init__(self, call_tree, weights: Dict[int, float]):
        CallTreeAction.__init__(self, call_tree=call_tree)
        self.weights = weights

    def run(self):
        """
        Overwrite the weight of every edge whose handle is in the weights map.
        Edges missing from the map keep their weight, handles of edges not in this call tree are ignored.
        """
        updated_edges_count = 0
        for edge_handle, weight in self.weights.items():
            if edge_handle not in self.call_tree.edges:
                continue
            weight = self.valid_weight(edge_handle, weight)
            if weight is None:
                continue
            self.call_tree.get_call_edge(edge_handle).weight = weight
            updated_edges_count += 1

        ignored_handles_count = len(self.weights) - updated_edges_count
        logger.debug(f"Updated {updated_edges_count} edge weights, ignored {ignored_handles_count} weights")

    @staticmethod
    def valid_weight(edge_handle: int, weight):
        """
        :return: The weight as a float, or None if it can not be used as a call depth weight.

        Usable weights are finite and non-negative.
        """
        try:
            weight = float(weight)
        except (TypeError, ValueError):
            logger.warning(f"Skipping non numeric weight {weight!r} for edge {edge_handle}")
            return None
        if not math.isfinite(weight) or weight < 0:
            logger.warning(f"Skipping invalid weight {weight} for edge {edge_handle}")
            return None
        return weight
