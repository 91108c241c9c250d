import pyparsing as _pp

from .errors import TaglineError

TAG_CHARS = _pp.alphanums + "-"

tag = _pp.Combine(_pp.Literal("#") + _pp.Word(TAG_CHARS))

_tagline = (
    _pp.Literal("tags:").suppress()
    + _pp.Suppress("[")
    + _pp.Group(_pp.ZeroOrMore(tag))
    + _pp.Suppress("]")
)


def parse_tagline(line):
    try:
        return _tagline.parse_string(line.strip(), parse_all=True)[0].as_list()
    except _pp.ParseBaseException as e:
        raise TaglineError.from_pyparsing("tagline", e) from e


def format_tagline(tags):
    return "tags: [{}]".format(" ".join(tags))


def extract(path):
    with open(path, "rb") as f:
        line = f.readline().decode("utf-8")

    try:
        return parse_tagline(line)
    except TaglineError as e:
        e.path = path
        raise
