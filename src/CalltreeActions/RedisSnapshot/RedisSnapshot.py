from __future__ import annotations
from typing import Dict, List, Set, Union
import logging
import json
import redis

from src.CalltreeActions.CalltreeGraph import CalltreeGraphManager
from src.CalltreeActions.Exceptions import SnapshotNotFound

logger = logging.getLogger(__name__)

SNAPSHOT_KEY_PREFIX = b'calltree'


def decode(value: Union[bytes, str]) -> str:
    if isinstance(value, bytes):
        return value.decode('utf-8')
    return value


class RedisSnapshot:
    r"""
    Saves a call tree to redis and loads it back into a fresh call tree instance.
    Keys of the snapshot named "view":

        calltree:view                          hash   vertex_count, edge_count
        calltree:view:functions                list   function handles in creation order
        calltree:view:function:<h>             hash   function_name, source_filename, line_number,
                                                      linked_object_name, metric_values
        calltree:view:function:<h>:calls_out   set    called function handles
        calltree:view:edges                    list   edge handles in creation order
        calltree:view:edge:<h>                 hash   caller, callee, label_or_metric_name, metric_values, weight
    """
    __slots__ = 'redis_session', 'graph_name', 'snapshot_id', 'functions_list_id', 'edges_list_id'

    def __init__(self, redis_session: redis.Redis, graph_name: str):
        self.redis_session = redis_session
        self.graph_name = graph_name
        self.snapshot_id = SNAPSHOT_KEY_PREFIX + b':' + graph_name.encode('utf-8')
        self.functions_list_id = self.snapshot_id + b':functions'
        self.edges_list_id = self.snapshot_id + b':edges'

    def get_function_id(self, handle) -> bytes:
        return self.snapshot_id + b':function:' + str(handle).encode()

    def get_calls_out_set_id(self, handle) -> bytes:
        return self.get_function_id(handle) + b':calls_out'

    def get_edge_id(self, handle) -> bytes:
        return self.snapshot_id + b':edge:' + str(handle).encode()

    def exists(self) -> bool:
        return bool(self.redis_session.exists(self.snapshot_id))

    def save(self, call_tree: CalltreeGraphManager):
        """
        Saves the call tree, replacing an earlier snapshot with the same name.
        """
        self.delete()
        pipeline = self.redis_session.pipeline()
        pipeline.hset(self.snapshot_id, mapping={b'vertex_count': call_tree.vertex_count,
                                                 b'edge_count': call_tree.edge_count})
        for handle in call_tree.vertex_handles():
            function = call_tree.get_function_node(handle)
            pipeline.rpush(self.functions_list_id, handle)
            pipeline.hset(self.get_function_id(handle), mapping={
                b'function_name': function.function_name,
                b'source_filename': function.source_filename,
                b'line_number': function.line_number,
                b'linked_object_name': function.linked_object_name,
                b'metric_values': json.dumps(function.metric_values)})
        for handle in call_tree.edge_handles():
            call_edge = call_tree.get_call_edge(handle)
            pipeline.rpush(self.edges_list_id, handle)
            pipeline.hset(self.get_edge_id(handle), mapping={
                b'caller': call_edge.caller,
                b'callee': call_edge.callee,
                b'label_or_metric_name': call_edge.label_or_metric_name,
                b'metric_values': json.dumps(call_edge.metric_values),
                b'weight': repr(call_edge.weight)})
            pipeline.sadd(self.get_calls_out_set_id(call_edge.caller), call_edge.callee)
        pipeline.execute()
        logger.info(f"Saved call tree {self.graph_name} with {call_tree.vertex_count} functions "
                    f"and {call_tree.edge_count} calls")

    def load(self) -> CalltreeGraphManager:
        """
        :return: A new call tree with the saved functions, calls and weights.
        Functions and calls are added in their creation order so they get back their saved handles.
        """
        if not self.exists():
            raise SnapshotNotFound(f"no call tree snapshot named {self.graph_name}")

        call_tree = CalltreeGraphManager()
        vertex_handles: Dict[int, int] = {}
        for saved_handle in self.get_saved_handles(self.functions_list_id):
            function_info = self.get_hash(self.get_function_id(saved_handle))
            vertex_handles[saved_handle] = call_tree.add_function_node(
                function_name=function_info['function_name'],
                source_filename=function_info['source_filename'],
                line_number=int(function_info['line_number']),
                linked_object_name=function_info['linked_object_name'],
                metric_values=json.loads(function_info['metric_values']))

        weights: Dict[int, float] = {}
        for saved_handle in self.get_saved_handles(self.edges_list_id):
            edge_info = self.get_hash(self.get_edge_id(saved_handle))
            edge_handle = call_tree.add_call_edge(caller=vertex_handles[int(edge_info['caller'])],
                                                  callee=vertex_handles[int(edge_info['callee'])],
                                                  label_or_metric_name=edge_info['label_or_metric_name'],
                                                  metric_values=json.loads(edge_info['metric_values']))
            weights[edge_handle] = float(edge_info['weight'])
        call_tree.set_edge_weights(weights)

        logger.info(f"Loaded call tree {self.graph_name} with {call_tree.vertex_count} functions "
                    f"and {call_tree.edge_count} calls")
        return call_tree

    def delete(self):
        """
        Removes every key of the snapshot.
        """
        keys = [self.snapshot_id, self.functions_list_id, self.edges_list_id]
        for handle in self.get_saved_handles(self.functions_list_id):
            keys += [self.get_function_id(handle), self.get_calls_out_set_id(handle)]
        for handle in self.get_saved_handles(self.edges_list_id):
            keys.append(self.get_edge_id(handle))
        self.redis_session.delete(*keys)

    def get_called_function_handles(self, handle: int) -> Set[int]:
        """
        :param handle: The saved caller function handle.
        :return: The saved handles of the functions it calls.
        """
        called_handles = self.redis_session.smembers(self.get_calls_out_set_id(handle))
        return {int(called_handle) for called_handle in called_handles}

    def get_saved_handles(self, list_id: bytes) -> List[int]:
        return [int(handle) for handle in self.redis_session.lrange(list_id, 0, -1)]

    def get_hash(self, hash_id: bytes) -> Dict[str, str]:
        return {decode(field): decode(value) for field, value in self.redis_session.hgetall(hash_id).items()}
