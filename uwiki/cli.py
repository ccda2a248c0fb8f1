import argparse
import logging
import os
import sys
import textwrap
import time

from . import errors
from .item import INDEX_FILE, Repository

logger = logging.getLogger(__name__)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')
    try:
        repo = Repository(args.repo)
        args.func(repo, args)
    except errors.NoChange:
        print('Nothing to commit, content unchanged')
    except (errors.WikiError, OSError) as e:
        print(f'uwiki: {e}', file=sys.stderr)
        return 1
    return 0


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog='uwiki')
    parser.add_argument('--repo', default=os.environ.get('UWIKI_REPO', 'repo'),
                        help='repository directory (default: $UWIKI_REPO or ./repo)')
    parser.add_argument('-v', '--verbose', action='store_true')
    commands = parser.add_subparsers(dest='command')
    commands.required = True

    init_parser = commands.add_parser('init')
    init_parser.set_defaults(func=init)

    cat_parser = commands.add_parser('cat')
    cat_parser.set_defaults(func=cat)
    cat_parser.add_argument('path')

    ls_parser = commands.add_parser('ls')
    ls_parser.set_defaults(func=ls)
    ls_parser.add_argument('path', default='', nargs='?')

    edit_parser = commands.add_parser('edit')
    edit_parser.set_defaults(func=edit)
    edit_parser.add_argument('path')
    edit_parser.add_argument('-m', '--message', required=True)
    edit_parser.add_argument('-f', '--file', help='read the content from FILE instead of stdin')

    rm_parser = commands.add_parser('rm')
    rm_parser.set_defaults(func=rm)
    rm_parser.add_argument('path')
    rm_parser.add_argument('-m', '--message', required=True)

    log_parser = commands.add_parser('log')
    log_parser.set_defaults(func=log)
    log_parser.add_argument('-n', '--max-count', type=int, default=None)

    changes_parser = commands.add_parser('changes')
    changes_parser.set_defaults(func=changes)
    changes_parser.add_argument('commit', default=None, nargs='?')

    cat_file_parser = commands.add_parser('cat-file')
    cat_file_parser.set_defaults(func=cat_file)
    cat_file_parser.add_argument('object')

    return parser.parse_args(argv)


def _write(content: bytes):
    sys.stdout.flush()
    sys.stdout.buffer.write(content)
    sys.stdout.flush()


def init(repo, args):
    print(f'Initialized repository in {os.path.abspath(repo.directory)}, head {repo.head()}')


def cat(repo, args):
    item = repo.item(args.path)
    try:
        content = item.content()
    except errors.IsDir:
        # directories are shown through their index page
        content = repo.item(item.path.child(INDEX_FILE)).content()
    _write(content)


def ls(repo, args):
    for child in repo.item(args.path).list():
        suffix = '/' if child.is_dir() else ''
        print(f'{child.path}{suffix}')


def edit(repo, args):
    if args.file:
        with open(args.file, 'rb') as f:
            content = f.read()
    else:
        content = sys.stdin.buffer.read()
    print(repo.item(args.path).edit(content, args.message))


def rm(repo, args):
    print(repo.item(args.path).remove(args.message))


def log(repo, args):
    for count, (oid, commit_) in enumerate(repo.log()):
        if args.max_count is not None and count >= args.max_count:
            break
        date = time.strftime('%Y-%m-%d %H:%M:%S', time.gmtime(commit_.timestamp))
        print(f'commit {oid}')
        print(f'Author: {commit_.author}')
        print(f'Date:   {date} +0000\n')
        print(textwrap.indent(commit_.message, '    '))
        print('')


def changes(repo, args):
    for path, action in repo.changes(args.commit):
        print(f'{action:>8}: {path}')


def cat_file(repo, args):
    type_, content = repo.store.read_object(args.object)
    logger.debug('%s is a %s', args.object, type_)
    _write(content)


if __name__ == '__main__':
    sys.exit(main())
