"""
Helpers shared by the test modules: commit-graph builders and a driver for
throwaway git repositories.
"""

import os
import shutil
import subprocess

import pytest

from tagver.commits import Commit


requires_git = pytest.mark.skipif(shutil.which('git') is None, reason='git executable not available')


def make_commits(graph):
    """
    Build linked Commit objects from a {sha: [parent shas]} mapping.

    Returns:
        dict: sha -> Commit
    """
    commits = {sha: Commit(sha) for sha in graph}
    for sha, parents in graph.items():
        for parent in parents:
            commits.setdefault(parent, Commit(parent))
            commits[sha].parents.append(commits[parent])
    return commits


def make_chain(length, prefix='c'):
    """
    Build a linear history of `length` commits.

    Returns:
        list: Commits from root (index 0) to tip (index length - 1)
    """
    chain = []
    for i in range(length):
        chain.append(Commit(f'{prefix}{i:06d}', [chain[-1]] if chain else []))
    return chain


class GitRepo:
    """Small driver for a real git repository used by integration tests."""

    def __init__(self, path):
        self.path = str(path)
        self.env = dict(os.environ)
        self.env.update({
            'GIT_AUTHOR_NAME': 'Test',
            'GIT_AUTHOR_EMAIL': 'test@example.com',
            'GIT_COMMITTER_NAME': 'Test',
            'GIT_COMMITTER_EMAIL': 'test@example.com',
            'GIT_CONFIG_NOSYSTEM': '1',
            'HOME': self.path,
        })
        self.commit_count = 0

    def git(self, *args):
        result = subprocess.run(
            ['git', '-c', 'commit.gpgsign=false', '-c', 'tag.gpgsign=false', *args],
            cwd=self.path,
            env=self.env,
            capture_output=True,
            text=True,
            check=True
        )
        return result.stdout.strip()

    def init(self, branch='main'):
        self.git('init', '-q')
        self.git('symbolic-ref', 'HEAD', f'refs/heads/{branch}')
        return self

    def commit(self, message=None):
        # distinct messages keep sibling commits made in the same second from sharing a sha
        self.commit_count += 1
        self.git('commit', '-q', '--allow-empty', '-m', message or f'commit {self.commit_count}')
        return self.git('rev-parse', 'HEAD')

    def tag(self, name, annotated=False):
        if annotated:
            self.git('tag', '-a', name, '-m', name)
        else:
            self.git('tag', name)

    def create_branch(self, name):
        self.git('checkout', '-q', '-b', name)

    def checkout(self, ref):
        self.git('checkout', '-q', ref)

    def merge(self, ref):
        self.git('merge', '-q', '--no-ff', '--no-edit', ref)
        return self.git('rev-parse', 'HEAD')

    def parents(self, ref='HEAD'):
        return self.git('rev-list', '--parents', '-n', '1', ref).split()[1:]
