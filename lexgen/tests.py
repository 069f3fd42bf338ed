"""
    lexgen.tests
    ~~~~~~~~~~~~

    :copyright: 2012 by Daniel Neuhäuser
    :license: BSD
"""
import io
import os
import shutil
import tempfile
from unittest import TestCase
from contextlib import contextmanager, redirect_stdout, redirect_stderr

from lexgen.graph import (
    Graph, Edge, Node, EPSILON, GraphConsistencyError, escape_dot, to_dot
)
from lexgen.parser import (
    Compiler, Language, PatternError, PRINTABLE, WHITESPACE
)
from lexgen.rules import Rule, RuleFileError, parse_rules, load_rules
from lexgen.matcher import Match, Span
from lexgen.fa import NFA, DFA, select_terminal
from lexgen.tokenizer import Tokenizer, Token, LexError
from lexgen.__main__ import main


PROGRAM_RULES = [
    ("if", "IF"),
    ("else", "ELSE"),
    ("[a-zA-Z_][a-zA-Z0-9_]*", "ID"),
    ("[0-9]+", "INT"),
    ('"[^"]*"', "STRING"),
    ("==", "EQ"),
    ("=", "ASSIGN"),
    ("\\s+", ";"),
]


class TestGraph(TestCase):
    def test_node_ids(self):
        graph = Graph()
        self.assertEqual(graph.add_node("a"), 1)
        self.assertEqual(graph.add_node("b"), 2)
        self.assertEqual(Graph().add_node("c"), 1)
        self.assertEqual(len(graph), 2)
        self.assertEqual(list(graph), [1, 2])
        self.assertIn(2, graph)
        self.assertNotIn(3, graph)

    def test_get_missing(self):
        graph = Graph()
        node = graph.add_node("a")
        with self.assertRaises(GraphConsistencyError) as context:
            graph.get(node + 1)
        self.assertEqual(context.exception.node_id, node + 1)
        with self.assertRaises(GraphConsistencyError):
            graph.add_edge(node, node + 1, "x")

    def test_edges_are_merged(self):
        graph = Graph()
        a, b = graph.add_node("a"), graph.add_node("b")
        graph.add_edge(a, b, "x")
        graph.add_edge(a, b, "yz")
        self.assertEqual(graph.edges(a), [Edge(b, frozenset("xyz"))])

    def test_epsilon_edges(self):
        graph = Graph()
        a, b = graph.add_node("a"), graph.add_node("b")
        graph.add_edge(a, b, "x")
        graph.add_edge(a, b, EPSILON)
        graph.add_edge(a, b, EPSILON)
        self.assertEqual(
            graph.edges(a),
            [Edge(b, frozenset("x")), Edge(b, EPSILON)]
        )
        self.assertTrue(graph.edges(a)[1].is_epsilon)
        self.assertNotIn("x", EPSILON)
        self.assertEqual(list(EPSILON), [])

    def test_mark_terminal(self):
        graph = Graph()
        node = graph.add_node("a")
        graph.mark_terminal(node, "NAME", 3)
        node = graph.get(node)
        self.assertTrue(node.terminal)
        self.assertEqual(node.name, "NAME")
        self.assertEqual(node.rule, 3)

    def test_reachable_from(self):
        graph = Graph()
        a, b, c, d = [graph.add_node(name) for name in "abcd"]
        graph.add_edge(a, b, "x")
        graph.add_edge(b, a, EPSILON)
        graph.add_edge(b, c, "y")
        self.assertEqual(graph.reachable_from(a), set([a, b, c]))
        self.assertEqual(graph.reachable_from(d), set([d]))

    def test_escape_dot(self):
        self.assertEqual(escape_dot('a"b\tc'), 'a\\"b\\\\tc')
        self.assertEqual(escape_dot("\\"), "\\\\")
        self.assertEqual(escape_dot("\r\n"), "\\\\r\\\\n")

    def test_to_dot(self):
        graph = Graph()
        a, b, c = [graph.add_node(name) for name in "abc"]
        graph.add_edge(a, b, EPSILON)
        graph.add_edge(b, c, "yx")
        graph.add_edge(c, b, EPSILON)
        graph.mark_terminal(c, "NAME")
        self.assertEqual(to_dot(graph, a, "T"), (
            "digraph T {\n"
            '    1 -> 2 [label="ε"];\n'
            '    2 -> 3 [label="xy"];\n'
            '    3 -> 2 [label="ε"];\n'
            '    3 [shape=doublecircle, label="NAME"];\n'
            "}\n"
        ))


class TestCompiler(TestCase):
    def compile(self, pattern, mark_ending=True, language=None):
        graph = Graph()
        root = graph.add_node("root")
        compiler = Compiler(graph) if language is None else Compiler(
            graph, language
        )
        end = compiler.compile(pattern, "T", root, mark_ending=mark_ending)
        return graph, root, end

    @contextmanager
    def raises(self, pattern, reason, annotation=None):
        with self.assertRaises(PatternError) as context:
            self.compile(pattern)
        self.assertEqual(context.exception.reason, reason)
        if annotation is not None:
            self.assertEqual(context.exception.annotation, annotation)
        yield context.exception

    def test_character(self):
        graph, root, end = self.compile("a")
        self.assertEqual(graph.edges(root), [Edge(end, frozenset("a"))])
        self.assertTrue(graph.get(end).terminal)
        self.assertEqual(graph.get(end).name, "T")
        self.assertFalse(graph.get(root).terminal)

    def test_mark_ending(self):
        graph, root, end = self.compile("ab", mark_ending=False)
        self.assertFalse(graph.get(end).terminal)

    def test_concatenation(self):
        graph, root, end = self.compile("ab")
        middle = graph.edges(root)[0].destination
        self.assertEqual(graph.edges(middle), [Edge(end, frozenset("b"))])

    def test_whitespace(self):
        graph, root, end = self.compile("\\s")
        self.assertEqual(graph.edges(root), [Edge(end, WHITESPACE)])

    def test_escape(self):
        graph, root, end = self.compile("\\*")
        self.assertEqual(graph.edges(root), [Edge(end, frozenset("*"))])

    def test_dot_is_literal(self):
        graph, root, end = self.compile(".")
        self.assertEqual(graph.edges(root), [Edge(end, frozenset("."))])

    def test_either(self):
        graph, root, end = self.compile("[a-cx\\s]")
        self.assertEqual(
            graph.edges(root),
            [Edge(end, frozenset("abcx") | WHITESPACE)]
        )

    def test_neither(self):
        graph, root, end = self.compile("[^a]")
        label = graph.edges(root)[0].label
        self.assertEqual(label, PRINTABLE - frozenset("a"))
        self.assertEqual(len(label), 94)

    def test_either_literal_dash(self):
        graph, root, end = self.compile("[-+]")
        self.assertEqual(graph.edges(root), [Edge(end, frozenset("-+"))])
        graph, root, end = self.compile("[a-]")
        self.assertEqual(graph.edges(root), [Edge(end, frozenset("a-"))])

    def test_either_escapes(self):
        graph, root, end = self.compile("[\\]\\\\]")
        self.assertEqual(graph.edges(root), [Edge(end, frozenset("]\\"))])

    def test_group(self):
        graph, root, end = self.compile("(a)")
        [edge] = graph.edges(root)
        self.assertTrue(edge.is_epsilon)
        self.assertEqual(
            graph.edges(edge.destination),
            [Edge(end, frozenset("a"))]
        )

    def test_union(self):
        graph, root, end = self.compile("a|b")
        a, b = graph.edges(root)
        self.assertEqual(a.label, frozenset("a"))
        self.assertEqual(b.label, frozenset("b"))
        self.assertEqual(graph.edges(a.destination), [Edge(end, EPSILON)])
        self.assertEqual(graph.edges(b.destination), [Edge(end, EPSILON)])
        self.assertTrue(graph.get(end).terminal)
        self.assertFalse(graph.get(a.destination).terminal)

    def test_zero_or_more(self):
        graph, root, end = self.compile("a*")
        [edge] = graph.edges(root)
        entry = edge.destination
        self.assertTrue(edge.is_epsilon)
        [repeated, skip] = graph.edges(entry)
        self.assertEqual(repeated.label, frozenset("a"))
        self.assertEqual(skip, Edge(end, EPSILON))
        self.assertEqual(
            graph.edges(repeated.destination),
            [Edge(end, EPSILON)]
        )
        self.assertEqual(graph.edges(end), [Edge(entry, EPSILON)])

    def test_one_or_more(self):
        graph, root, end = self.compile("a+")
        entry = graph.edges(root)[0].destination
        self.assertEqual(graph.edges(entry), [Edge(end, frozenset("a"))])
        self.assertEqual(graph.edges(end), [Edge(entry, EPSILON)])

    def test_zero_or_one(self):
        graph, root, end = self.compile("a?")
        [character, skip] = graph.edges(root)
        self.assertEqual(character.label, frozenset("a"))
        self.assertEqual(skip, Edge(end, EPSILON))
        self.assertEqual(
            graph.edges(character.destination),
            [Edge(end, EPSILON)]
        )

    def test_custom_language(self):
        graph, root, end = self.compile("\\w", language=Language(whitespace="w"))
        self.assertEqual(graph.edges(root), [Edge(end, WHITESPACE)])

    def test_trailing_escape(self):
        with self.raises(
            "\\",
            "unexpected end of pattern, following escape character",
            "\\\n ^"
        ):
            pass

    def test_either_missing_end(self):
        with self.raises(
            "[ab",
            "unexpected end of pattern, expected ] corresponding to [",
            "[ab\n^--^"
        ):
            pass

    def test_group_missing_end(self):
        with self.raises(
            "(a",
            "unexpected end of pattern, expected ) corresponding to (",
            "(a\n^-^"
        ):
            pass

    def test_group_missing_begin(self):
        with self.raises("a)", "found unmatched )", "a)\n ^"):
            pass

    def test_repetition_missing_repeatable(self):
        for operator in "*+?":
            with self.raises(
                operator,
                "%s is not preceded by a repeatable expression" % operator,
                "%s\n^" % operator
            ):
                pass
        with self.raises(
            "a|+",
            "+ is not preceded by a repeatable expression",
            "a|+\n  ^"
        ):
            pass
        with self.raises(
            "(*)", "* is not preceded by a repeatable expression"
        ):
            pass

    def test_range_out_of_order(self):
        with self.raises("[z-a]", "range z-a is out of order", "[z-a]\n ^-^"):
            pass

    def test_empty_either(self):
        with self.raises("[]", "character class matches nothing"):
            pass

    def test_empty_pattern(self):
        with self.raises("", "empty pattern"):
            pass


class PatternTestWrapper(object):
    def __init__(self, pattern):
        self.nfa = NFA.from_rules([(pattern, "T")])
        self.dfa = self.nfa.to_dfa()
        self.minimized = self.dfa.minimize()

    @property
    def matchers(self):
        return [self.nfa, self.dfa, self.minimized]

    def assertMatches(self, string, expected_end):
        for matcher in self.matchers:
            match = matcher.match(string)
            assert match == Match("T", Span(0, expected_end)), (
                matcher, string, match
            )

    def assertMatchesAll(self, matches):
        for string, end in matches:
            self.assertMatches(string, end)

    def assertNotMatches(self, string):
        for matcher in self.matchers:
            match = matcher.match(string)
            assert match is None, (matcher, string, match)

    def assertNotMatchesAny(self, strings):
        for string in strings:
            self.assertNotMatches(string)


class TestMatcher(TestCase):
    @contextmanager
    def pattern(self, pattern):
        yield PatternTestWrapper(pattern)

    def test_character(self):
        with self.pattern("a") as pattern:
            pattern.assertMatchesAll([("a", 1), ("aa", 1)])
            pattern.assertNotMatchesAny(["", "b", "ba"])

    def test_concatenation(self):
        with self.pattern("ab") as pattern:
            pattern.assertMatchesAll([("ab", 2), ("abab", 2)])
            pattern.assertNotMatchesAny(["a", "ba"])

    def test_union(self):
        with self.pattern("a|b") as pattern:
            pattern.assertMatchesAll([("a", 1), ("b", 1), ("ab", 1)])
            pattern.assertNotMatches("c")
        with self.pattern("ab|cd") as pattern:
            pattern.assertMatchesAll([("ab", 2), ("cd", 2)])
            pattern.assertNotMatchesAny(["ad", "cb"])

    def test_zero_or_more(self):
        with self.pattern("a*") as pattern:
            pattern.assertMatchesAll([("a", 1), ("aaab", 3)])
            pattern.assertNotMatchesAny(["", "b"])

    def test_one_or_more(self):
        with self.pattern("a+") as pattern:
            pattern.assertMatchesAll([("a", 1), ("aaa", 3)])
            pattern.assertNotMatchesAny(["", "b"])

    def test_zero_or_one(self):
        with self.pattern("ab?") as pattern:
            pattern.assertMatchesAll([("a", 1), ("ab", 2), ("abb", 2)])
        with self.pattern("a?b") as pattern:
            pattern.assertMatchesAll([("b", 1), ("ab", 2)])
            pattern.assertNotMatches("aab")

    def test_consecutive_repetitions(self):
        with self.pattern("a*b*") as pattern:
            pattern.assertMatchesAll([("aabb", 4), ("bbb", 3), ("ba", 1)])
        with self.pattern("a+b+") as pattern:
            pattern.assertMatchesAll([("ab", 2), ("abab", 2), ("aabbb", 5)])
            pattern.assertNotMatches("ba")

    def test_stacked_repetitions(self):
        with self.pattern("x?*") as pattern:
            pattern.assertMatchesAll([("x", 1), ("xxx", 3), ("xy", 1)])
        with self.pattern("a?+") as pattern:
            pattern.assertMatchesAll([("a", 1), ("aab", 2)])
        with self.pattern("ba*?") as pattern:
            pattern.assertMatchesAll([("b", 1), ("baa", 3), ("bab", 2)])

    def test_group(self):
        with self.pattern("(ab)+") as pattern:
            pattern.assertMatchesAll([("ab", 2), ("abab", 4), ("aba", 2)])
            pattern.assertNotMatches("a")
        with self.pattern("((a|b)c)+") as pattern:
            pattern.assertMatchesAll([("ac", 2), ("acbc", 4)])
        with self.pattern("x(a|b)*y") as pattern:
            pattern.assertMatchesAll([("xy", 2), ("xabay", 5)])
            pattern.assertNotMatches("xaca")

    def test_repeated_union(self):
        with self.pattern("(a|b)*c") as pattern:
            pattern.assertMatchesAll([("c", 1), ("ababc", 5)])
            pattern.assertNotMatches("abd")

    def test_either(self):
        with self.pattern("[a-c]+") as pattern:
            pattern.assertMatchesAll([("a", 1), ("abcd", 3), ("cab", 3)])
            pattern.assertNotMatches("d")

    def test_neither(self):
        with self.pattern("[^a]") as pattern:
            pattern.assertMatchesAll([("b", 1), ("1", 1), (" ", 1)])
            pattern.assertNotMatchesAny(["a", "\t"])

    def test_whitespace(self):
        with self.pattern("\\s") as pattern:
            pattern.assertMatchesAll([(" ", 1), ("\t", 1), ("\n", 1), ("\r", 1)])
            pattern.assertNotMatches("s")
        with self.pattern("[\\s]+") as pattern:
            pattern.assertMatches(" \t\n", 3)

    def test_literal_dot(self):
        with self.pattern("a.b") as pattern:
            pattern.assertMatches("a.b", 3)
            pattern.assertNotMatches("axb")

    def test_find(self):
        dfa = NFA.from_rules([("[0-9]+", "INT")]).to_dfa()
        self.assertEqual(dfa.find("ab12c345"), Match("INT", Span(2, 4)))
        self.assertIsNone(dfa.find("abc"))
        self.assertEqual(
            [match.span for match in dfa.find_all("ab12c345")],
            [Span(2, 4), Span(5, 8)]
        )
        self.assertEqual(Match("INT", Span(2, 4)).group("ab12"), "12")


class TestRules(TestCase):
    def test_parse_rules(self):
        source = (
            "%%\n"
            'if "IF"\n'
            "\n"
            "   \n"
            '[a-z]+    "ID"\n'
            "[ \\t]+ ;\n"
            "%%\n"
        )
        self.assertEqual(parse_rules(source), [
            Rule("if", "IF"),
            Rule("[a-z]+", "ID"),
            Rule("[ \\t]+", ";"),
        ])

    def test_fields_are_rejoined(self):
        self.assertEqual(
            parse_rules("a   b\tc NAME"),
            [Rule("a b c", "NAME")]
        )

    def test_missing_token_name(self):
        with self.assertRaises(RuleFileError) as context:
            parse_rules("a A\nlonely\n")
        exception = context.exception
        self.assertEqual(exception.reason, "missing token name")
        self.assertEqual(exception.lineno, 2)
        self.assertEqual(exception.line, "lonely")
        self.assertEqual(str(exception), "<rules>:2: missing token name\nlonely")

    def test_empty_token_name(self):
        with self.assertRaises(RuleFileError) as context:
            parse_rules('a ""')
        self.assertEqual(context.exception.reason, "empty token name")

    def test_load_rules(self):
        directory = tempfile.mkdtemp()
        try:
            path = os.path.join(directory, "rules.l")
            with open(path, "w", encoding="utf-8") as file:
                file.write('%%\n[0-9]+ "INT"\n%%\n')
            self.assertEqual(load_rules(path), [Rule("[0-9]+", "INT")])
        finally:
            shutil.rmtree(directory)


class TestNFA(TestCase):
    def test_shared_root(self):
        nfa = NFA.from_rules([("a", "A"), ("b", "B")])
        self.assertEqual(nfa.graph.get(nfa.root).name, "NFA")
        self.assertEqual(
            sorted(
                "".join(edge.label) for edge in nfa.graph.edges(nfa.root)
            ),
            ["a", "b"]
        )
        terminals = [
            nfa.graph.get(node) for node in nfa.graph
            if nfa.graph.get(node).terminal
        ]
        self.assertEqual(
            [(node.name, node.rule) for node in terminals],
            [("A", 0), ("B", 1)]
        )

    def test_skip_rules_are_compiled(self):
        nfa = NFA.from_rules([("\\s", ";")])
        self.assertEqual(nfa.match(" "), Match(";", Span(0, 1)))

    def test_pattern_error_names_rule(self):
        with self.assertRaises(PatternError) as context:
            NFA.from_rules([("a", "A"), ("(a", "BROKEN")])
        exception = context.exception
        self.assertEqual(exception.rule, Rule("(a", "BROKEN"))
        self.assertIn("in rule BROKEN (pattern '(a')", str(exception))

    def test_epsilon_closure(self):
        nfa = NFA.from_rules([("a*", "A")])
        closure = nfa.epsilon_closure([nfa.root])
        self.assertIsInstance(closure, frozenset)
        self.assertEqual(len(closure), 3)
        self.assertIn(nfa.root, closure)
        self.assertTrue(any(nfa.graph.get(state).terminal for state in closure))

    def test_move_and_symbols(self):
        nfa = NFA.from_rules([("ab", "AB"), ("[a-c]", "ABC")])
        closure = nfa.epsilon_closure([nfa.root])
        self.assertEqual(nfa.extract_symbols(closure), set("abc"))
        self.assertEqual(len(nfa.move(closure, "a")), 2)
        self.assertEqual(len(nfa.move(closure, "c")), 1)
        self.assertEqual(nfa.move(closure, "d"), frozenset())

    def test_to_dot(self):
        nfa = NFA.from_rules([("(a)", "A")])
        self.assertEqual(nfa.to_dot(), (
            "digraph NFA {\n"
            '    1 -> 2 [label="ε"];\n'
            '    2 -> 3 [label="a"];\n'
            '    3 [shape=doublecircle, label="A"];\n'
            "}\n"
        ))


class TestDFA(TestCase):
    def setUp(self):
        self.nfa = NFA.from_rules(PROGRAM_RULES + [("(ab|cd)+e?", "AB")])
        self.dfa = self.nfa.to_dfa()

    def test_single_root(self):
        graph = self.dfa.graph
        self.assertEqual(graph.reachable_from(self.dfa.root), set(graph))
        incoming = set(
            edge.destination for node in graph for edge in graph.edges(node)
        )
        self.assertNotIn(self.dfa.root, incoming)

    def test_no_dangling_ids(self):
        graph = self.dfa.graph
        for node in graph:
            for edge in graph.edges(node):
                self.assertIn(edge.destination, graph)
                self.assertFalse(edge.is_epsilon)

    def test_deterministic(self):
        graph = self.dfa.graph
        for node in graph:
            seen = set()
            for edge in graph.edges(node):
                self.assertFalse(seen & edge.label)
                seen |= edge.label
            destinations = [edge.destination for edge in graph.edges(node)]
            self.assertEqual(len(destinations), len(set(destinations)))

    def test_subsets_are_unique(self):
        self.assertEqual(len(self.dfa.subsets), len(self.dfa.graph))
        self.assertEqual(
            sorted(self.dfa.subsets.values()),
            list(self.dfa.graph)
        )
        self.assertEqual(
            self.dfa.subsets[self.nfa.epsilon_closure([self.nfa.root])],
            self.dfa.root
        )

    def test_terminal_follows_subset(self):
        for subset, state in self.dfa.subsets.items():
            self.assertEqual(
                self.dfa.graph.get(state).terminal,
                any(self.nfa.graph.get(nfa_state).terminal
                    for nfa_state in subset)
            )

    def test_idempotent(self):
        again = self.nfa.to_dfa()
        self.assertEqual(set(again.subsets), set(self.dfa.subsets))
        self.assertEqual(len(again.graph), len(self.dfa.graph))

    def test_agrees_with_nfa(self):
        minimized = self.dfa.minimize()
        for string in ["if", "iff", "x1", "==", "=", "42a", '"a b"', "abcde",
                       "abab", "cdx", " \t ", '"open', "", "?"]:
            expected = self.nfa.match(string)
            self.assertEqual(self.dfa.match(string), expected)
            self.assertEqual(minimized.match(string), expected)

    def test_transition(self):
        dfa = NFA.from_rules([("ab", "AB")]).to_dfa()
        state = dfa.transition(dfa.root, "a")
        self.assertIsNotNone(state)
        self.assertIsNone(dfa.transition(dfa.root, "b"))
        self.assertTrue(dfa.graph.get(dfa.transition(state, "b")).terminal)

    def test_first_declared_rule_wins(self):
        dfa = NFA.from_rules([("if", "IF"), ("[a-z]+", "ID")]).to_dfa()
        self.assertEqual(dfa.match("if"), Match("IF", Span(0, 2)))
        self.assertEqual(dfa.match("iff"), Match("ID", Span(0, 3)))
        dfa = NFA.from_rules([("[a-z]+", "ID"), ("if", "IF")]).to_dfa()
        self.assertEqual(dfa.match("if"), Match("ID", Span(0, 2)))

    def test_select_terminal(self):
        late = Node(1, "LATE", True, rule=1)
        early = Node(9, "EARLY", True, rule=0)
        other = Node(2, "OTHER", False)
        self.assertIs(select_terminal([late, early, other]), early)
        self.assertIsNone(select_terminal([other]))

    def test_to_dot(self):
        dfa = NFA.from_rules([("a", "A")]).to_dfa()
        self.assertEqual(dfa.to_dot(), (
            "digraph DFA {\n"
            '    1 -> 2 [label="a"];\n'
            '    2 [shape=doublecircle, label="A"];\n'
            "}\n"
        ))


class TestMinimize(TestCase):
    def test_merges_equivalent_states(self):
        dfa = NFA.from_rules([("a|b", "T")]).to_dfa()
        self.assertEqual(len(dfa.graph), 3)
        minimized = dfa.minimize()
        self.assertIsInstance(minimized, DFA)
        self.assertEqual(len(minimized.graph), 2)
        self.assertEqual(
            minimized.graph.edges(minimized.root),
            [Edge(minimized.transition(minimized.root, "a"), frozenset("ab"))]
        )

    def test_keeps_token_names_apart(self):
        dfa = NFA.from_rules([("a", "A"), ("b", "B")]).to_dfa()
        minimized = dfa.minimize()
        self.assertEqual(len(minimized.graph), 3)
        self.assertEqual(minimized.match("a"), Match("A", Span(0, 1)))
        self.assertEqual(minimized.match("b"), Match("B", Span(0, 1)))

    def test_collapses_loops(self):
        dfa = NFA.from_rules([("(a|b)*c", "T")]).to_dfa()
        minimized = dfa.minimize()
        self.assertEqual(len(minimized.graph), 2)
        self.assertEqual(minimized.match("abbac"), Match("T", Span(0, 5)))


class TestTokenizer(TestCase):
    def test_longest_match(self):
        tokenizer = Tokenizer.from_rules([("ab", "ID"), ("abc", "KEYWORD")])
        self.assertEqual(tokenizer.lex("abcx"), [("KEYWORD", "abc")])

    def test_backtracks_to_last_accept(self):
        tokenizer = Tokenizer.from_rules([("ab", "AB"), ("abcd", "ABCD")])
        self.assertEqual(tokenizer.lex("abcab"), [("AB", "ab"), ("AB", "ab")])
        self.assertEqual(tokenizer.lex("abcd"), [("ABCD", "abcd")])

    def test_union(self):
        tokenizer = Tokenizer.from_rules([("a|b", "T")])
        self.assertEqual(tokenizer.lex("ab"), [("T", "a"), ("T", "b")])

    def test_repetition(self):
        tokenizer = Tokenizer.from_rules([("a*", "A")])
        self.assertEqual(tokenizer.lex("aaab"), [("A", "aaa")])
        tokenizer = Tokenizer.from_rules([("a+", "A")])
        self.assertEqual(tokenizer.lex(""), [])
        self.assertEqual(tokenizer.lex("b"), [])
        self.assertEqual(tokenizer.lex("baab"), [("A", "aa")])

    def test_stacked_repetitions_stay_within_rule(self):
        self.assertEqual(
            Tokenizer.from_rules([("x?*", "X"), ("yz", "YZ")]).lex("xyz"),
            [("X", "x"), ("YZ", "yz")]
        )
        self.assertEqual(
            Tokenizer.from_rules([("a?+", "A"), ("b", "B")]).lex("ab"),
            [("A", "a"), ("B", "b")]
        )
        self.assertEqual(
            Tokenizer.from_rules([("a*?", "A"), ("b", "B")]).lex("aab"),
            [("A", "aa"), ("B", "b")]
        )

    def test_rules_accepting_empty_string(self):
        for pattern in ["a|", "(a|)", "a*", "a?"]:
            tokenizer = Tokenizer.from_rules([(pattern, "A"), ("b", "B")])
            root = tokenizer.dfa.graph.get(tokenizer.dfa.root)
            self.assertTrue(root.terminal)
            self.assertEqual(root.name, "A")
            self.assertEqual(
                tokenizer.lex("bab"),
                [("B", "b"), ("A", "a"), ("B", "b")]
            )

    def test_neither(self):
        tokenizer = Tokenizer.from_rules([("[^a]", "N")])
        self.assertEqual(tokenizer.lex("a"), [])
        self.assertEqual(tokenizer.lex("ab1"), [("N", "b"), ("N", "1")])

    def test_skip_rule(self):
        tokenizer = Tokenizer.from_rules([("[a-z]+", "ID"), ("\\s+", ";")])
        self.assertEqual(tokenizer.dfa.match("  x"), Match(";", Span(0, 2)))
        self.assertEqual(
            tokenizer.lex("ab  cd\n"),
            [("ID", "ab"), ("ID", "cd")]
        )

    def test_custom_skip(self):
        rules = [("[a-z]+", "ID"), ("\\s+", "WS")]
        self.assertEqual(
            Tokenizer.from_rules(rules).lex("a b"),
            [("ID", "a"), ("WS", ""), ("ID", "b")]
        )
        self.assertEqual(
            Tokenizer.from_rules(rules, skip="WS").lex("a b"),
            [("ID", "a"), ("ID", "b")]
        )

    def test_lexeme_is_trimmed(self):
        tokenizer = Tokenizer.from_rules([("\\s*x", "X")])
        self.assertEqual(tokenizer.lex("  x"), [("X", "x")])

    def test_tokens(self):
        tokenizer = Tokenizer.from_rules([("[a-z]+", "ID"), ("\\s+", ";")])
        tokens = list(tokenizer("ab cd"))
        self.assertEqual(tokens, [
            Token("ID", "ab", Span(0, 2)),
            Token("ID", "cd", Span(3, 5)),
        ])
        type, lexeme = tokens[1]
        self.assertEqual((type, lexeme), ("ID", "cd"))

    def test_unmatched_characters_are_skipped(self):
        tokenizer = Tokenizer.from_rules([("a", "A")])
        self.assertEqual(tokenizer.lex("?a!a"), [("A", "a"), ("A", "a")])

    def test_strict(self):
        tokenizer = Tokenizer.from_rules(
            [("ab", "ID"), ("abc", "KEYWORD")], strict=True
        )
        with self.assertRaises(LexError) as context:
            tokenizer.lex("abcx")
        exception = context.exception
        self.assertEqual(exception.position, 3)
        self.assertEqual(exception.character, "x")
        self.assertEqual(str(exception), "no rule matches 'x' at position 3")

    def test_program(self):
        for minimize in [False, True]:
            tokenizer = Tokenizer.from_rules(PROGRAM_RULES, minimize=minimize)
            self.assertEqual(
                tokenizer.lex('if x1 == 42 else\n\t"hi there" = iff'),
                [
                    ("IF", "if"),
                    ("ID", "x1"),
                    ("EQ", "=="),
                    ("INT", "42"),
                    ("ELSE", "else"),
                    ("STRING", '"hi there"'),
                    ("ASSIGN", "="),
                    ("ID", "iff"),
                ]
            )

    def test_from_file(self):
        directory = tempfile.mkdtemp()
        try:
            path = os.path.join(directory, "rules.l")
            with open(path, "w", encoding="utf-8") as file:
                file.write('%%\n[0-9]+ "INT"\n\\s+ ;\n%%\n')
            tokenizer = Tokenizer.from_file(path, minimize=True)
            self.assertEqual(tokenizer.lex("1 23"), [("INT", "1"), ("INT", "23")])
        finally:
            shutil.rmtree(directory)


class TestMain(TestCase):
    def setUp(self):
        self.directory = tempfile.mkdtemp()
        self.rules = self.write("rules.l", '%%\nif "IF"\n[a-z]+ "ID"\n\\s+ ;\n%%\n')
        self.source = self.write("source.txt", "if x?\n")

    def tearDown(self):
        shutil.rmtree(self.directory)

    def write(self, name, content):
        path = os.path.join(self.directory, name)
        with open(path, "w", encoding="utf-8") as file:
            file.write(content)
        return path

    def run_main(self, *arguments):
        stdout, stderr = io.StringIO(), io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            status = main(["lexgen"] + list(arguments))
        return status, stdout.getvalue(), stderr.getvalue()

    def test_tokenize(self):
        status, stdout, stderr = self.run_main(
            "tokenize", self.rules, self.source
        )
        self.assertEqual(status, 0)
        self.assertEqual(stdout, "%-15s %s\n%-15s %s\n" % ("IF", "if", "ID", "x"))

    def test_tokenize_strict(self):
        status, stdout, stderr = self.run_main(
            "tokenize", "--strict", self.rules, self.source
        )
        self.assertEqual(status, 1)
        self.assertIn("no rule matches '?' at position 4", stderr)

    def test_pattern_error(self):
        rules = self.write("broken.l", "(a BROKEN\n")
        status, stdout, stderr = self.run_main("tokenize", rules, self.source)
        self.assertEqual(status, 1)
        self.assertIn("in rule BROKEN", stderr)

    def test_dot(self):
        status, stdout, stderr = self.run_main("dot", "nfa", self.rules)
        self.assertEqual(status, 0)
        self.assertTrue(stdout.startswith("digraph NFA {\n"))
        output = os.path.join(self.directory, "dfa.dot")
        status, stdout, stderr = self.run_main(
            "dot", "--minimize", "--output", output, "dfa", self.rules
        )
        self.assertEqual(status, 0)
        self.assertEqual(stdout, "")
        with open(output, encoding="utf-8") as file:
            self.assertTrue(file.read().startswith("digraph DFA {\n"))
