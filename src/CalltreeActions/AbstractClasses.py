import abc


class Action(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def run(self):
        pass


class CallTreeAction(Action, metaclass=abc.ABCMeta):
    """
    An action working on a single call tree instance.
    """

    def __init__(self, call_tree):
        self.call_tree = call_tree
