import ansimarkup
import click
import graphviz
import jinja2
import pathlib
import sys
import types

from . import commands
from . import search
from . import tagexpr
from .errors import CommandError, QuerySyntaxError

SKIP_MARK = ansimarkup.parse("<yellow><b>[SKIP]</b></yellow>")
ERROR_MARK = ansimarkup.parse("<red><b>[ERROR]</b></red>")


def make_graph(files):
    graph = graphviz.Digraph()

    all_tags = set()
    for file_i, tagged_file in enumerate(files):
        graph.node(
            'file-{}'.format(file_i),
            label=str(tagged_file.path),
            shape='note'
        )

        for tag in tagged_file.tags:
            all_tags.add(tag)
            graph.edge(
                'tag-' + tag,
                'file-{}'.format(file_i),
                style='dashed',
                arrowhead='none'
            )

    with graph.subgraph(name='cluster_tags', graph_attr=dict(style='invis')) as subgraph:
        for tag in sorted(all_tags):
            subgraph.node(
                'tag-' + tag,
                label=tag,
                shape='rectangle',
                fillcolor='yellow',
                style='filled'
            )

    return graph


def make_template(format_str):
    env = jinja2.Environment(undefined=jinja2.StrictUndefined, keep_trailing_newline=True)

    try:
        return env.from_string(format_str)
    except jinja2.TemplateSyntaxError as e:
        raise click.ClickException("invalid --format template: {}".format(e))


def format_match(tagged_file, *, template=None, output=None):
    if template is not None:
        try:
            return template.render(
                path=str(tagged_file.path),
                tags=list(tagged_file.tags),
                output=output
            )
        except jinja2.UndefinedError as e:
            raise click.ClickException("error rendering --format template: {}".format(e))

    return "{} {}".format(
        click.style(str(tagged_file.path), fg='blue', bold=True),
        click.style(" ".join(tagged_file.tags), fg='yellow')
    )


def read_query(query):
    if query is not None:
        return query

    line = click.get_text_stream('stdin').readline()
    if not line.strip():
        raise click.UsageError("no query given on the command line or standard input")

    return line


@click.command(context_settings=dict(auto_envvar_prefix='TAGSEARCH'))
@click.version_option()
@click.argument('query', required=False)
@click.option(
    '--dir', '-d', 'directory',
    type=click.Path(
        file_okay=False,
        exists=True,
        path_type=pathlib.Path
    ),
    default='.',
    help="directory to search for tagged files",
    show_default=True
)
@click.option(
    '--exclude', '-x',
    multiple=True,
    metavar='NAMES',
    help="file and directory names to skip"
)
@click.option(
    '--filter', '-f', 'filter_command',
    metavar='CMD',
    help="only keep files for which CMD exits successfully; #FILE# is replaced by the file path"
)
@click.option(
    '--command', '-c',
    metavar='CMD',
    help="run CMD for every matching file and show its output; #FILE# is replaced by the file path"
)
@click.option(
    '--format', 'format_str',
    metavar='TEMPLATE',
    help="jinja2 template used to print each match, with 'path', 'tags' and 'output' defined"
)
@click.option(
    '--count',
    is_flag=True,
    help="only print the number of matching files"
)
@click.option(
    '--graph',
    is_flag=True,
    help="display a visual graph of matching files and their tags (uses Graphviz)"
)
@click.option(
    '--no-color',
    is_flag=True,
    help="do not use colors in the output"
)
@click.option(
    '--verbose', '-v',
    is_flag=True,
    help="report files which were skipped and why"
)
@click.option(
    '--debug',
    is_flag=True,
    help="do not suppress exception stack traces"
)
def main(**kwargs):
    """
    Searches DIR for files whose first line is a tagline, e.g.

        tags: [#work #draft]

    and prints those matching QUERY. QUERY is a boolean expression over tags
    using '!' (not), '&' (and), '|' (or) and parentheses. '&' and '|' have the
    same precedence and are grouped from left to right, so '#a & #b | #c'
    means '(#a & #b) | #c'. If QUERY is omitted, it is read from standard input.

    Option --exclude takes space separated lists and can be supplied multiple
    times with lists being accumulated. Names are expanded using Bash-style
    brace expansion and are treated as Unix shell-style wildcards, matched
    against both the bare name and the path relative to DIR.
    """
    opts = types.SimpleNamespace(**kwargs)

    opts.exclude = search.names_to_re(search.join_split(opts.exclude))
    color = False if opts.no_color else None

    try:
        query = read_query(opts.query)

        try:
            matches = tagexpr.compile(query)
        except QuerySyntaxError as e:
            raise click.ClickException(str(e))

        template = make_template(opts.format_str) if opts.format_str else None

        def on_skip(path, error):
            if opts.verbose:
                click.echo("{} {}: {}".format(SKIP_MARK, path, error), err=True, color=color)

        tagged_files = search.get_tags_from_files(
            opts.directory,
            exclude=opts.exclude,
            on_skip=on_skip
        )

        found = search.filter_files(tagged_files, matches)

        if opts.filter_command:
            found = [
                i for i in found
                if commands.execute_filter_command_on_file(i.path, opts.filter_command)
            ]

        if opts.count:
            click.echo(len(found))
        else:
            for tagged_file in found:
                output = None
                if opts.command:
                    output = commands.execute_command_on_file(tagged_file.path, opts.command)

                click.echo(format_match(tagged_file, template=template, output=output), color=color)

                if output and template is None:
                    click.echo(output, nl=not output.endswith("\n"), color=color)

        if opts.graph:
            make_graph(found).view()
    except CommandError as e:
        click.echo("{} {}".format(ERROR_MARK, e), err=True, color=color)
        sys.exit(1)
    except Exception as e:
        if not opts.debug and not isinstance(e, (click.exceptions.ClickException, click.exceptions.Abort)):
            click.secho("error: {}".format(e), err=True, fg='red', color=color)
            sys.exit(1)
        else:
            raise
