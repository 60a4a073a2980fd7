from __future__ import annotations
from typing import Iterable, Tuple

NameValuePair = Tuple[str, str]
MetricValues = Tuple[NameValuePair, ...]

DEFAULT_EDGE_WEIGHT = 1.0


def to_metric_values(metric_values: Iterable) -> MetricValues:
    """
    :param metric_values: Iterable of (name, value) pairs.
    :return: The pairs as an immutable tuple, keeping their order.
    """
    return tuple((name, value) for name, value in metric_values)


class FunctionNode:
    __slots__ = 'function_name', 'source_filename', 'line_number', 'linked_object_name', 'metric_values'

    def __init__(self, function_name: str, source_filename: str, line_number: int, linked_object_name: str,
                 metric_values: MetricValues = ()):
        """
        Stack frame information of a function in the call tree.
        :param function_name: The function's name, used as the vertex label.
        :param source_filename: The associated source-code filename.
        :param line_number: The line number in the associated source-code file.
        :param linked_object_name: The program executable or shared library containing the function.
        :param metric_values: The metric name/value pairs of the function.
        """
        self.function_name = function_name
        self.source_filename = source_filename
        self.line_number = line_number
        self.linked_object_name = linked_object_name
        self.metric_values = metric_values

    def __eq__(self, other):
        if not isinstance(other, FunctionNode):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__slots__)

    def __repr__(self):
        return f"FunctionNode({self.function_name!r}, {self.source_filename!r}:{self.line_number})"


class CallEdge:
    __slots__ = 'caller', 'callee', 'label_or_metric_name', 'label', 'metric_values', 'weight'

    def __init__(self, caller: int, callee: int, label_or_metric_name: str = '', metric_values: MetricValues = (),
                 weight: float = DEFAULT_EDGE_WEIGHT):
        self.caller = caller
        self.callee = callee
        self.label_or_metric_name = label_or_metric_name
        self.metric_values = metric_values
        self.label = self.resolve_label(label_or_metric_name, metric_values)
        self.weight = weight

    @staticmethod
    def resolve_label(label_or_metric_name: str, metric_values: MetricValues) -> str:
        """
        The label either names one of the metric pairs, in which case the metric value is the label,
        or it is the label value itself.
        """
        for name, value in metric_values:
            if name == label_or_metric_name:
                return value
        return label_or_metric_name

    def __repr__(self):
        return f"CallEdge({self.caller} -> {self.callee}, weight={self.weight})"
