from typing import List, TextIO, Tuple
import logging
import re

from src.CalltreeActions.AbstractClasses import CallTreeAction
from src.CalltreeActions.Exceptions import IoFailure

logger = logging.getLogger(__name__)

GRAPH_HEADER = "digraph G {\n"
GRAPH_FOOTER = "}\n"
DOT_IDENTIFIER_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
METRIC_NAME_PREFIX = "metric_"
FUNCTION_ATTRIBUTE_NAMES = ('label', 'file', 'line', 'unit')
RICH_EDGE_ATTRIBUTE_NAMES = ('label', 'weight')


def quote(value) -> str:
    return '"' + str(value).replace('\\', '\\\\').replace('"', '\\"') + '"'


def attribute_name(name: str) -> str:
    """
    Metric names such as "% of Total" are not plain DOT identifiers and are written quoted.
    """
    if DOT_IDENTIFIER_PATTERN.match(name):
        return name
    return quote(name)


def metric_attributes(metric_values, reserved_names: Tuple[str, ...]) -> List[Tuple[str, str]]:
    """
    Metrics named like one of the record's own attributes are written with the "metric_" prefix.
    """
    return [(METRIC_NAME_PREFIX + name if name in reserved_names else name, value) for name, value in metric_values]


def format_weight(weight: float) -> str:
    # same text as a default std::ostream, 1.0 -> "1", 0.25 -> "0.25"
    return '%g' % weight


def format_attributes(attributes: List[Tuple[str, str]]) -> str:
    return "[" + ", ".join(f"{attribute_name(name)}={quote(value)}" for name, value in attributes) + "]"


class GraphExporter(CallTreeAction):
    r"""
    Writes the call tree in DOT format for the layout tool:

        digraph G {
        0 [label="main", file="main.c", line="12", unit="a.out", inclusive="10.5"];
        1 [label="solve", file="solve.c", line="40", unit="a.out"];
        0->1 [label="1"];
        }

    Functions are written in handle order with their bundled attributes, then the edges in handle order,
    each labelled with its weight. Exporting an unchanged call tree always writes the same text.
    With rich_edge_labels the edges are labelled with their resolved label and carry their metric values.
    """

    def __init__(self, call_tree, sink: TextIO, rich_edge_labels: bool = False):
        CallTreeAction.__init__(self, call_tree=call_tree)
        self.sink = sink
        self.rich_edge_labels = rich_edge_labels

    def run(self):
        try:
            self.sink.write(GRAPH_HEADER)
            for vertex_handle in self.call_tree.vertex_handles():
                self.sink.write(self.get_function_record(vertex_handle))
            for edge_handle in self.call_tree.edge_handles():
                self.sink.write(self.get_edge_record(edge_handle))
            self.sink.write(GRAPH_FOOTER)
        except (OSError, ValueError) as error:
            # closed file objects raise ValueError on write
            raise IoFailure(f"failed writing the call tree: {error}") from error
        logger.debug(f"Exported {self.call_tree.vertex_count} functions and {self.call_tree.edge_count} calls")

    def get_function_record(self, vertex_handle: int) -> str:
        function = self.call_tree.get_function_node(vertex_handle)
        attributes = [('label', function.function_name),
                      ('file', function.source_filename),
                      ('line', function.line_number),
                      ('unit', function.linked_object_name)]
        attributes += metric_attributes(function.metric_values, FUNCTION_ATTRIBUTE_NAMES)
        return f"{vertex_handle} {format_attributes(attributes)};\n"

    def get_edge_record(self, edge_handle: int) -> str:
        call_edge = self.call_tree.get_call_edge(edge_handle)
        if self.rich_edge_labels:
            attributes = [('label', call_edge.label)]
            attributes += metric_attributes(call_edge.metric_values, RICH_EDGE_ATTRIBUTE_NAMES)
            attributes.append(('weight', format_weight(call_edge.weight)))
        else:
            attributes = [('label', format_weight(call_edge.weight))]
        return f"{call_edge.caller}->{call_edge.callee} {format_attributes(attributes)};\n"
