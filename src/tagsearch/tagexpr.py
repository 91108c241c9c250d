import enum
import types

import pyparsing as _pp

from .errors import QuerySyntaxError
from .tagline import tag as _tag


class Op(enum.Enum):
    AND = "&"
    OR = "|"


INFIX_OPERATORS = types.MappingProxyType({
    "&": Op.AND,
    "|": Op.OR,
})
PREFIX_OPERATORS = frozenset("!")


class Expr:
    __slots__ = ()

    def _fields(self):
        raise NotImplementedError()

    def __eq__(self, other):
        return type(self) is type(other) and self._fields() == other._fields()

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((type(self), self._fields()))

    def __repr__(self):
        return "{}({})".format(type(self).__name__, ", ".join(repr(i) for i in self._fields()))


class Bool(Expr):
    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value

    def _fields(self):
        return (self.value,)


class UnaryNot(Expr):
    __slots__ = ("child",)

    def __init__(self, child):
        self.child = child

    def _fields(self):
        return (self.child,)


class Operation(Expr):
    __slots__ = ("lhs", "op", "rhs")

    def __init__(self, lhs, op, rhs):
        self.lhs = lhs
        self.op = op
        self.rhs = rhs

    def _fields(self):
        return (self.lhs, self.op, self.rhs)


# & and | share a single level and group strictly left to right
_expr = _pp.infix_notation(
    _tag.copy().set_parse_action(lambda s, l, t: [["$", t[0]]]),
    [
        (_pp.one_of(sorted(PREFIX_OPERATORS)), 1, _pp.OpAssoc.RIGHT),
        (_pp.one_of(sorted(INFIX_OPERATORS)), 2, _pp.OpAssoc.LEFT),
    ]
)


def parse(query):
    """
    Parses a query string into a tree of plain lists:

        ['$', '#tag']               tag reference
        ['!', node]                 negation
        [node, op, node, op, ...]   chain of '&'/'|', grouped left to right

    The tree carries no resolved values and can be reused for any number
    of tag sets.
    """
    try:
        return _expr.parse_string(query, parse_all=True).as_list()[0]
    except _pp.ParseBaseException as e:
        raise QuerySyntaxError.from_pyparsing("tag expression", e) from e


def resolve(tree, tags):
    head = tree[0]

    if isinstance(head, str):
        if head == "$":
            return Bool(tree[1] in tags)

        if head in PREFIX_OPERATORS:
            return UnaryNot(resolve(tree[1], tags))

        assert 0, "unexpected node: {!r}".format(tree)

    assert len(tree) % 2 == 1, "unexpected node: {!r}".format(tree)

    result = resolve(head, tags)
    for i in range(1, len(tree), 2):
        op = INFIX_OPERATORS.get(tree[i])
        assert op is not None, "unexpected operator: {!r}".format(tree[i])
        result = Operation(result, op, resolve(tree[i + 1], tags))

    return result


def evaluate(expr):
    if isinstance(expr, Bool):
        return expr.value

    if isinstance(expr, UnaryNot):
        return not evaluate(expr.child)

    assert isinstance(expr, Operation), "unexpected expression: {!r}".format(expr)

    lhs = evaluate(expr.lhs)
    rhs = evaluate(expr.rhs)

    if expr.op is Op.AND:
        return lhs & rhs
    if expr.op is Op.OR:
        return lhs | rhs

    assert 0, "unexpected operator: {!r}".format(expr.op)


def compile(query):
    tree = parse(query)

    def matches(tags):
        return evaluate(resolve(tree, tags))

    return matches
