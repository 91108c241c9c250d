import itertools

import pytest

from tagsearch import tagexpr
from tagsearch.errors import QuerySyntaxError
from tagsearch.tagexpr import Bool, Op, Operation, UnaryNot, evaluate, parse, resolve

ALL_TAGS = ("#a", "#b", "#c")
TAG_SETS = [
    set(combination)
    for n in range(len(ALL_TAGS) + 1)
    for combination in itertools.combinations(ALL_TAGS, n)
]


def run(query, tags):
    return evaluate(resolve(parse(query), tags))


@pytest.mark.parametrize("query", [
    "#a & !#b",
    "#a&#b",
    "#a\n|\n#b",
    "#a & (#b | #c)",
    "!!#a",
    "((#a))",
    "!(#a | #b) & #c-d | #1",
])
def test_parse_valid(query):
    parse(query)


@pytest.mark.parametrize("query", [
    "##",
    "#a &",
    "#a & #b)",
    "(#a & #b",
    "",
    "   ",
    "#a #b",
    "& #a",
    "#a !",
    "a & b",
    "#a ^ #b",
    "# a",
    "()",
])
def test_parse_invalid(query):
    with pytest.raises(QuerySyntaxError):
        parse(query)


def test_parse_error_shows_position():
    with pytest.raises(QuerySyntaxError) as exc_info:
        parse("#a & ##")

    e = exc_info.value
    assert e.text == "#a & ##"
    assert e.line == 1
    assert e.column is not None
    assert "@@@" in str(e)


def test_parse_tree_shape():
    assert parse("#a") == ["$", "#a"]
    assert parse("!#a") == ["!", ["$", "#a"]]
    assert parse("#a & #b | #c") == [["$", "#a"], "&", ["$", "#b"], "|", ["$", "#c"]]
    assert parse("(#a & #b) | #c") == [[["$", "#a"], "&", ["$", "#b"]], "|", ["$", "#c"]]


def test_resolve_flat():
    assert resolve(parse("#a & #b"), []) == Operation(Bool(False), Op.AND, Bool(False))


def test_resolve_nested():
    expected = Operation(
        Operation(Bool(False), Op.AND, Bool(False)),
        Op.OR,
        Operation(UnaryNot(Bool(True)), Op.AND, Bool(True)),
    )

    assert resolve(parse("#a & #b | (!#c & #d)"), ["#c", "#d"]) == expected


def test_resolve_groups_left_to_right():
    tags = {"#a"}

    assert resolve(parse("#a | #b & #c"), tags) == Operation(
        Operation(Bool(True), Op.OR, Bool(False)),
        Op.AND,
        Bool(False),
    )
    assert resolve(parse("#a & #b | #c"), tags) == Operation(
        Operation(Bool(True), Op.AND, Bool(False)),
        Op.OR,
        Bool(False),
    )


def test_negation_binds_tighter_than_infix():
    assert resolve(parse("!#a & #b"), set()) == Operation(UnaryNot(Bool(False)), Op.AND, Bool(False))
    assert resolve(parse("!!#a"), {"#a"}) == UnaryNot(UnaryNot(Bool(True)))


def test_resolve_does_not_normalize_tags():
    assert resolve(parse("#A"), {"#a"}) == Bool(False)


@pytest.mark.parametrize("tags", TAG_SETS)
def test_resolve_is_idempotent(tags):
    tree = parse("!(#a | #b) & #c | !#a")

    assert resolve(tree, tags) == resolve(tree, tags)


@pytest.mark.parametrize("tags", TAG_SETS)
def test_grouping_law(tags):
    assert run("#a & #b | #c", tags) == run("(#a & #b) | #c", tags)
    assert run("#a | #b & #c", tags) == run("(#a | #b) & #c", tags)


def test_grouping_differs_from_conventional_precedence():
    assert any(run("#a & #b | #c", tags) != run("#a & (#b | #c)", tags) for tags in TAG_SETS)
    assert run("#a | #b & #c", {"#a"}) is False


@pytest.mark.parametrize("tags", TAG_SETS)
def test_negation_law(tags):
    assert run("!#a", tags) == ("#a" not in tags)


@pytest.mark.parametrize("tags", TAG_SETS)
def test_membership_law(tags):
    assert run("#a", tags) == ("#a" in tags)


@pytest.mark.parametrize("query, tags, expected", [
    ("#a & #b", set(), False),
    ("#a & #b | (#c & #d)", {"#c", "#d"}, True),
    ("!#c", {"#c"}, False),
    ("#a\n&\n!#b", ["#a"], True),
    ("#x-1 | #2", ("#2",), True),
])
def test_scenarios(query, tags, expected):
    assert run(query, tags) is expected


@pytest.mark.parametrize("expr, expected", [
    (Bool(True), True),
    (Bool(False), False),
    (UnaryNot(Bool(False)), True),
    (Operation(Bool(True), Op.AND, Bool(True)), True),
    (Operation(Bool(True), Op.OR, Bool(False)), True),
    (Operation(Bool(False), Op.OR, Bool(False)), False),
    (
        Operation(
            Operation(Bool(False), Op.AND, Bool(False)),
            Op.OR,
            UnaryNot(Operation(Bool(True), Op.AND, Bool(True))),
        ),
        False,
    ),
])
def test_evaluate(expr, expected):
    assert evaluate(expr) is expected


class _Probe(Bool):
    __slots__ = ("_value", "log")

    def __init__(self, value, log):
        self._value = value
        self.log = log

    @property
    def value(self):
        self.log.append(self._value)
        return self._value


@pytest.mark.parametrize("op, first", [
    (Op.AND, False),
    (Op.OR, True),
])
def test_evaluate_does_not_short_circuit(op, first):
    log = []

    evaluate(Operation(_Probe(first, log), op, _Probe(not first, log)))

    assert log == [first, not first]


def test_expr_equality_is_structural():
    assert Bool(True) == Bool(True)
    assert Bool(True) != UnaryNot(True)
    assert Operation(Bool(True), Op.AND, Bool(False)) != Operation(Bool(True), Op.OR, Bool(False))
    assert hash(UnaryNot(Bool(True))) == hash(UnaryNot(Bool(True)))
    assert repr(UnaryNot(Bool(False))) == "UnaryNot(Bool(False))"


@pytest.mark.parametrize("tree", [
    ["?", "#a"],
    [["$", "#a"], "^", ["$", "#b"]],
    [["$", "#a"], "&"],
])
def test_resolve_rejects_unknown_nodes(tree):
    with pytest.raises(AssertionError):
        resolve(tree, set())


def test_evaluate_rejects_unknown_nodes():
    with pytest.raises(AssertionError):
        evaluate("#a")


def test_compile():
    matches = tagexpr.compile("#a & !#b")

    assert matches({"#a"})
    assert not matches({"#a", "#b"})
    assert not matches([])


def test_compile_rejects_invalid_query():
    with pytest.raises(QuerySyntaxError):
        tagexpr.compile("#a &")
