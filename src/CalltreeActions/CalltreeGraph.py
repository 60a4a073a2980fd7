from __future__ import annotations
from typing import Dict, Iterable, Iterator, Optional, TextIO, Tuple
import logging
import networkx as nx

from src.CalltreeActions.CallDepthCalculator.CallDepthCalculator import CallDepthCalculator
from src.CalltreeActions.EdgeWeightUpdater.EdgeWeightUpdater import EdgeWeightUpdater
from src.CalltreeActions.GraphExporter.GraphExporter import GraphExporter
from src.CalltreeActions.HandleRegistry import HandleRegistry
from src.CalltreeActions.Exceptions import InvalidHandle, IoFailure
from src.CalltreeActions.Models import FunctionNode, CallEdge, to_metric_values

logger = logging.getLogger(__name__)

FUNCTION_ATTRIBUTE = 'function'
CALL_EDGE_ATTRIBUTE = 'call_edge'


class CalltreeGraphManager:
    r"""
    The call tree of one profiling view. Functions are the vertices, every observed call site
    between a caller and a callee is an edge:

          (main)
          /    \
         /      \
     (parse)    (solve) <-.
                   \      |   recursive call
                    '-----'

    Parallel edges (several call sites between the same functions) and cycles (recursion) are allowed.
    Vertices and edges are addressed with the handles returned when they are added.
    """

    def __init__(self):
        self.call_tree = nx.MultiDiGraph()
        self.vertices = HandleRegistry()
        self.edges = HandleRegistry()

    def add_function_node(self, function_name: str, source_filename: str, line_number: int,
                          linked_object_name: str, metric_values: Iterable = ()) -> int:
        """
        :param function_name: The function's name (the vertex label).
        :param source_filename: The associated source-code filename.
        :param line_number: The line number in the associated source-code file.
        :param linked_object_name: The name of the linked object (the program executable or a library).
        :param metric_values: The metric name/value pairs of the function.
        :return: The vertex handle used for subsequent calls such as add_call_edge.
        """
        function = FunctionNode(function_name=function_name, source_filename=source_filename,
                                line_number=line_number, linked_object_name=linked_object_name,
                                metric_values=to_metric_values(metric_values))
        vertex = self.call_tree.number_of_nodes()
        self.call_tree.add_node(vertex, **{FUNCTION_ATTRIBUTE: function})
        return self.vertices.issue(vertex)

    def add_call_edge(self, caller: int, callee: int, label_or_metric_name: str = '',
                      metric_values: Iterable = ()) -> int:
        """
        :param caller: The calling function vertex handle.
        :param callee: The called function vertex handle.
        :param label_or_metric_name: The edge label, or the name of the metric pair holding the label.
        :param metric_values: The metric name/value pairs of the call site.
        :return: The edge handle used for subsequent calls such as set_edge_weights.

        Adds a caller-callee relationship between two previously added functions with a weight of 1.0.
        Raises InvalidHandle ("invalid caller handle" or "invalid callee handle") and leaves the call tree
        unchanged if either handle is unknown.
        """
        if caller not in self.vertices:
            raise InvalidHandle("invalid caller handle")
        if callee not in self.vertices:
            raise InvalidHandle("invalid callee handle")

        call_edge = CallEdge(caller=caller, callee=callee, label_or_metric_name=label_or_metric_name,
                             metric_values=to_metric_values(metric_values))
        caller_vertex = self.vertices.resolve(caller)
        callee_vertex = self.vertices.resolve(callee)
        key = self.call_tree.add_edge(caller_vertex, callee_vertex, **{CALL_EDGE_ATTRIBUTE: call_edge})
        return self.edges.issue((caller_vertex, callee_vertex, key))

    def set_edge_weights(self, weights: Dict[int, float]):
        EdgeWeightUpdater(call_tree=self, weights=weights).run()

    def generate_call_depths(self) -> Dict[Tuple[int, int], float]:
        """
        :return: The call depth of every (caller, callee) pair of distinct functions connected by a path.
        """
        return CallDepthCalculator(call_tree=self).run()

    def generate_root_call_depths(self, root: Optional[int] = None) -> Dict[int, float]:
        """
        :param root: The root function handle, the first added function by default.
        :return: The call depth of every function reachable from the root, including the root itself.
        """
        if root is None:
            if not len(self.vertices):
                return {}
            root = next(iter(self.vertices))
        if root not in self.vertices:
            raise InvalidHandle("invalid root handle")
        return CallDepthCalculator(call_tree=self).run_from(root)

    def export_graph(self, sink: TextIO, rich_edge_labels: bool = False):
        """
        Writes the call tree in DOT format to the sink. The bundled vertex attributes are written
        as DOT attributes, each edge is labelled with its weight.
        """
        GraphExporter(call_tree=self, sink=sink, rich_edge_labels=rich_edge_labels).run()

    def export_to_file(self, path: str, rich_edge_labels: bool = False):
        """
        :param path: The DOT file path, overwritten if it exists.
        """
        logger.info(f"Exporting call tree with {self.vertex_count} functions to {path}")
        try:
            with open(path, 'w', encoding='utf-8') as dot_file:
                self.export_graph(dot_file, rich_edge_labels=rich_edge_labels)
        except IoFailure:
            raise
        except OSError as error:
            raise IoFailure(f"failed writing the call tree to {path}: {error}") from error

    def get_function_node(self, handle: int) -> FunctionNode:
        if handle not in self.vertices:
            raise InvalidHandle("invalid function handle")
        return self.call_tree.nodes[self.vertices.resolve(handle)][FUNCTION_ATTRIBUTE]

    def get_call_edge(self, handle: int) -> CallEdge:
        if handle not in self.edges:
            raise InvalidHandle("invalid edge handle")
        caller_vertex, callee_vertex, key = self.edges.resolve(handle)
        return self.call_tree.edges[caller_vertex, callee_vertex, key][CALL_EDGE_ATTRIBUTE]

    def edge_weight(self, handle: int) -> float:
        return self.get_call_edge(handle).weight

    def vertex_handles(self) -> Iterator[int]:
        return iter(self.vertices)

    def edge_handles(self) -> Iterator[int]:
        return iter(self.edges)

    @property
    def vertex_count(self) -> int:
        return self.call_tree.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self.call_tree.number_of_edges()
