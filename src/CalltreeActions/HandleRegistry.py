from typing import Dict, Hashable, Iterator


class HandleRegistry:
    r"""
    Issues the opaque handles given out for call tree entities and resolves them back to
    the descriptor the graph storage uses for the entity.

        handle  --->  descriptor        (resolve)
        handle  <---  descriptor        (handle_of)

    Handles are consecutive integers starting at 0 and are never reused.
    The registry only keeps references, the entity data lives in the graph storage.
    """

    def __init__(self):
        self.next_handle = 0
        self.descriptors: Dict[int, Hashable] = {}
        self.handles: Dict[Hashable, int] = {}

    def issue(self, descriptor: Hashable) -> int:
        """
        :param descriptor: The storage descriptor of the newly created entity.
        :return: The new handle.
        """
        handle = self.next_handle
        self.next_handle += 1
        self.descriptors[handle] = descriptor
        self.handles[descriptor] = handle
        return handle

    def resolve(self, handle: int) -> Hashable:
        return self.descriptors[handle]

    def handle_of(self, descriptor: Hashable) -> int:
        return self.handles[descriptor]

    def __contains__(self, handle) -> bool:
        # bool is an int subclass but never a valid handle
        if not isinstance(handle, int) or isinstance(handle, bool):
            return False
        return handle in self.descriptors

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self.descriptors))

    def __len__(self) -> int:
        return len(self.descriptors)
