from typing import Dict, Optional, Tuple
import logging
import os
import redis
import time

from src.CalltreeActions.AbstractClasses import Action
from src.CalltreeActions.RedisSnapshot.RedisSnapshot import RedisSnapshot
from PathSource import get_call_tree_dot_path

logger = logging.getLogger(__name__)

REDIS_SERVER_IP = 'localhost'


class CalltreeActionsRunner(Action):
    def __init__(self, redis_host: str, graph_name: str, weights: Optional[Dict[int, float]] = None,
                 output_path: Optional[str] = None, redis_session: Optional[redis.Redis] = None):
        """
        :param redis_host: The redis server holding the call tree snapshot.
        :param graph_name: The snapshot name.
        :param weights: Edge weights by edge handle, applied before computing the call depths.
        :param output_path: The DOT file path, OUT/<graph_name>.dot by default.
        :param redis_session: An existing redis session to use instead of connecting to redis_host.
        """
        if redis_session is None:
            redis_session = redis.Redis(host=redis_host)
        self.redis_session = redis_session
        self.graph_name = graph_name
        self.weights = weights or {}
        if not output_path:
            self.output_path = get_call_tree_dot_path(graph_name)
        else:
            self.output_path = output_path

    def run(self) -> Dict[Tuple[int, int], float]:
        """
        Loads the call tree snapshot, applies the edge weights, exports the call tree in DOT format
        and returns the call depths.
        """
        call_tree = RedisSnapshot(redis_session=self.redis_session, graph_name=self.graph_name).load()
        call_tree.set_edge_weights(self.weights)
        call_depths = call_tree.generate_call_depths()
        logger.info(f"Computed {len(call_depths)} call depths for {self.graph_name}")

        output_directory = os.path.dirname(self.output_path)
        if output_directory:
            os.makedirs(output_directory, exist_ok=True)
        call_tree.export_to_file(self.output_path)
        return call_depths


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    name = input("Please Enter the call tree snapshot name to export:\n")
    start_flow_time = time.time()
    CalltreeActionsRunner(redis_host=REDIS_SERVER_IP, graph_name=name).run()
    end_flow_time = time.time()
    logger.info(f"total time    {end_flow_time - start_flow_time}")
