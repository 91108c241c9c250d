import braceexpand
import collections
import fnmatch
import os
import pathlib
import re

from . import tagexpr
from . import tagline
from .errors import TaglineError


class TaggedFile(collections.namedtuple("TaggedFile", ("path", "tags"))):
    __slots__ = ()

    def __new__(cls, path, tags):
        return super().__new__(cls, pathlib.Path(path), tuple(tags))


def join_split(seq, sep=None):
    r = (sep or " ").join(seq).split(sep)
    if r == ['']:
        return []
    else:
        return r


def names_to_re(names):
    if names:
        return re.compile(
            '|'.join(
                fnmatch.translate(j)
                for i in names
                for j in braceexpand.braceexpand(i)
            )
        )
    else:
        return None


def _is_excluded(exclude, path, root):
    if exclude is None:
        return False

    return bool(
        exclude.match(path.name)
        or exclude.match(path.relative_to(root).as_posix())
    )


def get_tags_from_files(directory, *, exclude=None, on_skip=None):
    """
    Recursively collects the tags of all files below `directory`.

    Files without a valid tagline, as well as unreadable files, are skipped
    and reported through `on_skip(path, error)`. Directories and files are
    visited in sorted order, so the result is stable between runs.
    """
    root = pathlib.Path(directory)

    if not root.exists():
        raise FileNotFoundError("no such directory: '{}'".format(root))

    if not root.is_dir():
        raise NotADirectoryError("not a directory: '{}'".format(root))

    def skip(path, error):
        if on_skip is not None:
            on_skip(path, error)

    def walk_error(e):
        path = pathlib.Path(e.filename) if e.filename else root
        if path == root:
            raise e

        skip(path, e)

    result = []

    for current_dir, subdirs, files in os.walk(root, onerror=walk_error):
        current_dir = pathlib.Path(current_dir)

        subdirs[:] = sorted(
            d for d in subdirs
            if not _is_excluded(exclude, current_dir / d, root)
        )

        for file_name in sorted(files):
            path = current_dir / file_name

            if _is_excluded(exclude, path, root) or not path.is_file():
                continue

            try:
                tags = tagline.extract(path)
            except (TaglineError, OSError, UnicodeDecodeError) as e:
                skip(path, e)
                continue

            result.append(TaggedFile(path, tags))

    return result


def filter_files(files, query):
    if isinstance(query, str):
        matches = tagexpr.compile(query)
    else:
        matches = query

    return [i for i in files if matches(i.tags)]
