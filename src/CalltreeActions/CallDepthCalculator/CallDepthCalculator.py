from typing import Dict, Tuple
import logging
import math
import networkx as nx

from src.CalltreeActions.AbstractClasses import CallTreeAction

logger = logging.getLogger(__name__)

WEIGHT = 'weight'


class CallDepthCalculator(CallTreeAction):
    r"""
    Computes call depths with Johnson's all-pairs shortest paths algorithm.
    The call depth between two functions is the minimal sum of edge weights over the paths between them.

    Example (weights on the edges):

        (A) --1--> (B) --1--> (C)
         \                    ^
          '---------1---------'

    depth(A, B) = 1, depth(B, C) = 1, depth(A, C) = 1 (the direct call beats the two hop path).

    A virtual source connected with zero weight edges to every function gives each function a potential h
    (Bellman-Ford), every edge (u, v) is reweighted to w + h(u) - h(v) which is never negative,
    Dijkstra runs from every function and the distances are restored with d - h(u) + h(v).
    """

    def run(self) -> Dict[Tuple[int, int], float]:
        """
        :return: Mapping of (caller handle, callee handle) to the call depth, for every pair of distinct
                 functions with a path from the caller to the callee. Unreachable pairs and depths overflowing
                 to infinity are absent.
        """
        weighted_graph = self.get_weighted_graph()
        potential = self.get_potential(weighted_graph)
        call_depths = {}
        for source in weighted_graph:
            distances = self.get_source_distances(weighted_graph, potential, source)
            source_handle = self.call_tree.vertices.handle_of(source)
            for target, distance in distances.items():
                if target == source or not math.isfinite(distance):
                    continue
                call_depths[(source_handle, self.call_tree.vertices.handle_of(target))] = distance

        if logger.isEnabledFor(logging.DEBUG):
            self.log_call_depths(call_depths)
        return call_depths

    def run_from(self, root: int) -> Dict[int, float]:
        """
        :param root: The root function handle.
        :return: Mapping of function handle to its call depth from the root, for every function reachable from
                 the root. The root itself has a call depth of 0.
        """
        weighted_graph = self.get_weighted_graph()
        potential = self.get_potential(weighted_graph)
        distances = self.get_source_distances(weighted_graph, potential, self.call_tree.vertices.resolve(root))
        return {self.call_tree.vertices.handle_of(target): distance for target, distance in distances.items()
                if math.isfinite(distance)}

    def get_weighted_graph(self) -> nx.DiGraph:
        """
        :return: Simple directed graph over the call tree vertices. Parallel call edges are merged into one edge
                 holding the minimal weight.
        """
        weighted_graph = nx.DiGraph()
        weighted_graph.add_nodes_from(self.call_tree.call_tree)
        for edge_handle in self.call_tree.edge_handles():
            call_edge = self.call_tree.get_call_edge(edge_handle)
            caller = self.call_tree.vertices.resolve(call_edge.caller)
            callee = self.call_tree.vertices.resolve(call_edge.callee)
            if weighted_graph.has_edge(caller, callee):
                weight = min(weighted_graph[caller][callee][WEIGHT], call_edge.weight)
            else:
                weight = call_edge.weight
            weighted_graph.add_edge(caller, callee, **{WEIGHT: weight})
        return weighted_graph

    @staticmethod
    def get_potential(weighted_graph: nx.DiGraph) -> Dict:
        """
        :return: The Bellman-Ford distance of every vertex from a virtual source joined to all vertices.
        """
        virtual_source = object()
        weighted_graph.add_node(virtual_source)
        weighted_graph.add_weighted_edges_from(((virtual_source, vertex, 0.0) for vertex in list(weighted_graph)),
                                               weight=WEIGHT)
        try:
            return nx.single_source_bellman_ford_path_length(weighted_graph, virtual_source, weight=WEIGHT)
        finally:
            weighted_graph.remove_node(virtual_source)

    @staticmethod
    def get_source_distances(weighted_graph: nx.DiGraph, potential: Dict, source) -> Dict:
        def reweighted(u, v, edge_attributes):
            return edge_attributes[WEIGHT] + potential[u] - potential[v]

        distances = nx.single_source_dijkstra_path_length(weighted_graph, source, weight=reweighted)
        return {target: distance - potential[source] + potential[target] for target, distance in distances.items()}

    def log_call_depths(self, call_depths: Dict[Tuple[int, int], float]):
        """
        Logs the call depths as a matrix, unreachable pairs are shown as inf.
        """
        handles = list(self.call_tree.vertex_handles())
        lines = ["       " + " ".join(f"{self.call_tree.get_function_node(handle).function_name:>6}"
                                      for handle in handles)]
        for caller in handles:
            row = []
            for callee in handles:
                depth = 0.0 if caller == callee else call_depths.get((caller, callee))
                row.append(f"{'inf':>6}" if depth is None else f"{depth:>6g}")
            lines.append(f"{caller:>3} -> " + " ".join(row))
        logger.debug("Call depths:\n" + "\n".join(lines))
