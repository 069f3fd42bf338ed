"""
    lexgen.graph
    ~~~~~~~~~~~~

    Node and edge storage shared by NFAs and DFAs. Nodes live in a single
    arena keyed by identifier and refer to each other only by identifier, so
    the cycles introduced by repetitions need no special treatment.

    :copyright: 2012 by Daniel Neuhäuser
    :license: BSD
"""
from collections import deque


class GraphConsistencyError(LookupError):
    def __init__(self, node_id):
        LookupError.__init__(self, node_id)
        self.node_id = node_id

    def __str__(self):
        return "no node with id %r" % self.node_id


class Epsilon(object):
    """
    Label of an edge that can be taken without consuming a character.
    """
    def __contains__(self, character):
        return False

    def __iter__(self):
        return iter(())

    def __repr__(self):
        return "EPSILON"


EPSILON = Epsilon()


class Edge(object):
    def __init__(self, destination, label):
        self.destination = destination
        self.label = label

    @property
    def is_epsilon(self):
        return self.label is EPSILON

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return (
                self.destination == other.destination and
                self.label == other.label
            )
        return NotImplemented

    def __ne__(self, other):
        return not self == other

    def __repr__(self):
        return "%s(%r, %r)" % (
            self.__class__.__name__,
            self.destination,
            self.label
        )


class Node(object):
    def __init__(self, id, name, terminal=False, rule=None):
        self.id = id
        self.name = name
        self.terminal = terminal
        self.rule = rule
        self.edges = []

    def __repr__(self):
        return "%s(%r, %r, %r, %r)" % (
            self.__class__.__name__,
            self.id,
            self.name,
            self.terminal,
            self.rule
        )


class Graph(object):
    def __init__(self):
        self.nodes = {}
        self._last_id = 0

    def add_node(self, name, terminal=False, rule=None):
        self._last_id += 1
        node = self.nodes[self._last_id] = Node(
            self._last_id, name, terminal, rule
        )
        return node.id

    def get(self, node_id):
        try:
            return self.nodes[node_id]
        except KeyError:
            raise GraphConsistencyError(node_id)

    def edges(self, node_id):
        return self.get(node_id).edges

    def add_edge(self, source, destination, label):
        """
        Adds an edge from `source` to `destination`. If `source` already has
        an edge of the same kind leading to `destination` the character set
        of that edge is extended instead.
        """
        node = self.get(source)
        self.get(destination)
        for edge in node.edges:
            if edge.destination != destination:
                continue
            if label is EPSILON and edge.is_epsilon:
                return edge
            if label is not EPSILON and not edge.is_epsilon:
                edge.label = edge.label | frozenset(label)
                return edge
        edge = Edge(
            destination,
            label if label is EPSILON else frozenset(label)
        )
        node.edges.append(edge)
        return edge

    def mark_terminal(self, node_id, name, rule=None):
        node = self.get(node_id)
        node.terminal = True
        node.name = name
        node.rule = rule

    def reachable_from(self, node_id):
        reachable = set([node_id])
        stack = [node_id]
        while stack:
            for edge in self.edges(stack.pop()):
                if edge.destination not in reachable:
                    reachable.add(edge.destination)
                    stack.append(edge.destination)
        return reachable

    def __contains__(self, node_id):
        return node_id in self.nodes

    def __iter__(self):
        return iter(sorted(self.nodes))

    def __len__(self):
        return len(self.nodes)

    def __repr__(self):
        return "<%s with %d nodes>" % (self.__class__.__name__, len(self))


def escape_dot(string):
    return (
        string
        .replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\t", "\\\\t")
        .replace("\n", "\\\\n")
        .replace("\r", "\\\\r")
    )


def format_label(label):
    if label is EPSILON:
        return "ε"
    return escape_dot("".join(sorted(label)))


def to_dot(graph, root, title="FA"):
    """
    Returns a Graphviz description of every node reachable from `root`.
    """
    lines = ["digraph %s {" % title]
    seen = set([root])
    queue = deque([root])
    while queue:
        node = graph.get(queue.popleft())
        for edge in node.edges:
            lines.append('    %d -> %d [label="%s"];' % (
                node.id, edge.destination, format_label(edge.label)
            ))
            if edge.destination not in seen:
                seen.add(edge.destination)
                queue.append(edge.destination)
        if node.terminal:
            lines.append('    %d [shape=doublecircle, label="%s"];' % (
                node.id, escape_dot(node.name)
            ))
    lines.append("}")
    return "\n".join(lines) + "\n"
