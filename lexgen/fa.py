"""
    lexgen.fa
    ~~~~~~~~~

    :copyright: 2012 by Daniel Neuhäuser
    :license: BSD
"""
import logging
from collections import deque

from lexgen.graph import Graph, to_dot
from lexgen.matcher import MatcherBase, Match, Span
from lexgen.parser import Compiler, PatternError, DEFAULT_LANGUAGE
from lexgen.rules import Rule


logger = logging.getLogger(__name__)


#: Name of DFA states that do not accept anything.
NONTERMINAL_NAME = "<>"


def select_terminal(nodes):
    """
    Picks the node whose token name an accepting state reports. When several
    rules accept the same lexeme the rule declared first wins.
    """
    terminals = [node for node in nodes if node.terminal]
    if not terminals:
        return None
    return min(terminals, key=lambda node: (node.rule, node.id))


class NFA(MatcherBase):
    def __init__(self, graph, root, rules=()):
        self.graph = graph
        self.root = root
        self.rules = list(rules)

    @classmethod
    def from_rules(cls, rules, language=DEFAULT_LANGUAGE):
        """
        Compiles every ``(pattern, name)`` rule, in order, from one shared root
        node.
        """
        graph = Graph()
        root = graph.add_node("NFA")
        compiler = Compiler(graph, language)
        rules = [Rule(*rule) for rule in rules]
        for index, rule in enumerate(rules):
            try:
                compiler.compile(
                    rule.pattern, rule.name, root, mark_ending=True, rule=index
                )
            except PatternError as error:
                error.rule = rule
                raise
        logger.debug(
            "compiled %d rules into an NFA with %d states",
            len(rules), len(graph)
        )
        return cls(graph, root, rules)

    def epsilon_closure(self, states):
        closure = set(states)
        stack = list(states)
        while stack:
            for edge in self.graph.edges(stack.pop()):
                if edge.is_epsilon and edge.destination not in closure:
                    closure.add(edge.destination)
                    stack.append(edge.destination)
        return frozenset(closure)

    def move(self, states, symbol):
        return frozenset(
            edge.destination
            for state in states
            for edge in self.graph.edges(state)
            if symbol in edge.label
        )

    def extract_symbols(self, states):
        symbols = set()
        for state in states:
            for edge in self.graph.edges(state):
                symbols.update(edge.label)
        return symbols

    def to_dfa(self):
        graph = Graph()
        closure = self.epsilon_closure([self.root])
        subsets = {closure: self._create_state(graph, closure)}
        unmarked = deque([closure])
        while unmarked:
            closure = unmarked.popleft()
            state = subsets[closure]
            for symbol in sorted(self.extract_symbols(closure)):
                target = self.epsilon_closure(self.move(closure, symbol))
                if not target:
                    continue
                if target not in subsets:
                    subsets[target] = self._create_state(graph, target)
                    unmarked.append(target)
                graph.add_edge(state, subsets[target], symbol)
        dfa = DFA(graph, subsets[self.epsilon_closure([self.root])], subsets)
        logger.debug(
            "subset construction turned %d NFA states into %d DFA states",
            len(self.graph), len(graph)
        )
        return dfa

    def _create_state(self, graph, closure):
        terminal = select_terminal(self.graph.get(state) for state in closure)
        if terminal is None:
            return graph.add_node(NONTERMINAL_NAME)
        return graph.add_node(terminal.name, terminal=True, rule=terminal.rule)

    def match(self, string, offset=0):
        states = self.epsilon_closure([self.root])
        accepted = None
        for position in range(offset, len(string)):
            states = self.epsilon_closure(self.move(states, string[position]))
            if not states:
                break
            terminal = select_terminal(self.graph.get(state) for state in states)
            if terminal is not None:
                accepted = Match(terminal.name, Span(offset, position + 1))
        return accepted

    def to_dot(self):
        return to_dot(self.graph, self.root, "NFA")

    def __repr__(self):
        return "%s(%r, %r)" % (self.__class__.__name__, self.graph, self.root)


class DFA(MatcherBase):
    def __init__(self, graph, root, subsets=None):
        self.graph = graph
        self.root = root
        #: Maps the NFA states each DFA state was made of to its id.
        self.subsets = {} if subsets is None else subsets

    def transition(self, state, character):
        for edge in self.graph.edges(state):
            if character in edge.label:
                return edge.destination
        return None

    def match(self, string, offset=0):
        state = self.root
        accepted = None
        for position in range(offset, len(string)):
            state = self.transition(state, string[position])
            if state is None:
                break
            node = self.graph.get(state)
            if node.terminal:
                accepted = Match(node.name, Span(offset, position + 1))
        return accepted

    def minimize(self):
        """
        Returns an equivalent DFA with the least number of states.

        States are partitioned by the token they accept and the partition is
        refined until every block agrees on where each character leads.
        """
        states = sorted(self.graph.reachable_from(self.root))
        alphabet = sorted(set(
            character
            for state in states
            for edge in self.graph.edges(state)
            for character in edge.label
        ))
        blocks = {}
        for state in states:
            node = self.graph.get(state)
            blocks[state] = (node.terminal, node.name if node.terminal else None)
        block_count = None
        while True:
            signatures = {}
            for state in states:
                signatures[state] = (blocks[state], tuple(
                    blocks.get(self.transition(state, character))
                    for character in alphabet
                ))
            numbers = {}
            for state in states:
                numbers.setdefault(signatures[state], len(numbers))
            blocks = dict(
                (state, numbers[signatures[state]]) for state in states
            )
            if len(numbers) == block_count:
                break
            block_count = len(numbers)

        graph = Graph()
        ids = {}
        for state in states:
            if blocks[state] not in ids:
                node = self.graph.get(state)
                ids[blocks[state]] = graph.add_node(
                    node.name, node.terminal, node.rule
                )
        for state in states:
            for edge in self.graph.edges(state):
                graph.add_edge(
                    ids[blocks[state]],
                    ids[blocks[edge.destination]],
                    edge.label
                )
        logger.debug(
            "minimization reduced %d DFA states to %d",
            len(states), len(graph)
        )
        return self.__class__(graph, ids[blocks[self.root]])

    def to_dot(self):
        return to_dot(self.graph, self.root, "DFA")

    def __repr__(self):
        return "%s(%r, %r)" % (self.__class__.__name__, self.graph, self.root)
