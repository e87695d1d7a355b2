# Copyright (c) 2026 - 2026, Oracle and/or its affiliates. All rights reserved.
# Licensed under the Universal Permissive License v 1.0 as shown at https://oss.oracle.com/licenses/upl/.

"""This module inspects git repositories, locally through pydriller and remotely through ``git ls-remote``."""

import logging

from git import GitCommandError, GitError
from git.cmd import Git as GitCmd
from pydriller.git import Git

from deplabel.collaborators import HeadCommit, VcsInspector
from deplabel.config.defaults import defaults
from deplabel.errors import NoRemoteError, NotARepoError, SourceUnreachableError

logger: logging.Logger = logging.getLogger(__name__)

# Setting the GIT_TERMINAL_PROMPT environment variable to ``0`` stops git from prompting for login credentials.
GIT_ENV_PATCH = {"GIT_TERMINAL_PROMPT": "0"}


def parse_ls_remote_output(content: str) -> dict[str, str]:
    """Return the mapping from ref names to commit SHAs of the output of ``git ls-remote``.

    Parameters
    ----------
    content : str
        The raw output of ``git ls-remote``.

    Returns
    -------
    dict[str, str]
        The mapping from each ref name to the SHA it points at.

    Examples
    --------
    >>> parse_ls_remote_output("abc123\\trefs/heads/main\\ndef456\\trefs/tags/v1.0\\n")
    {'refs/heads/main': 'abc123', 'refs/tags/v1.0': 'def456'}
    """
    refs = {}
    for line in content.splitlines():
        sha, _, ref_name = line.strip().partition("\t")
        if sha and ref_name:
            refs[ref_name] = sha
    return refs


def ls_remote(url: str, *patterns: str) -> dict[str, str]:
    """List the refs of a remote repository.

    Parameters
    ----------
    url : str
        The remote URL.
    patterns : str
        The optional ref patterns to restrict the listing to.

    Returns
    -------
    dict[str, str]
        The mapping from each ref name to the SHA it points at.

    Raises
    ------
    SourceUnreachableError
        If the remote cannot be listed.
    """
    timeout = defaults.getint("git", "ls_remote_timeout", fallback=30)
    logger.debug("LS-REMOTE - %s", url)
    try:
        raw_output: str = GitCmd().ls_remote(url, *patterns, env=GIT_ENV_PATCH, kill_after_timeout=timeout)
    except GitCommandError as error:
        # Only the status is reported as the captured output can contain credentials embedded in the URL.
        raise SourceUnreachableError(url, f"git ls-remote exited with status {error.status}") from None

    return parse_ls_remote_output(raw_output)


class GitInspector(VcsInspector):
    """The git implementation of the VCS inspector."""

    def resolve_head_commit(self, repo_path: str) -> HeadCommit:
        """Return the remote URL, HEAD commit and tags at HEAD of a local repository.

        The ``origin`` remote is used when it exists, otherwise the first configured remote.

        Parameters
        ----------
        repo_path : str
            The path to the local repository.

        Returns
        -------
        HeadCommit
            The state of HEAD.

        Raises
        ------
        NotARepoError
            If ``repo_path`` is not a git repository or has no commit.
        NoRemoteError
            If the repository has no remote.
        """
        try:
            repo = Git(repo_path).repo
        except GitError as error:
            raise NotARepoError(f"{repo_path} is not a git repository: {error}") from error

        try:
            head_sha = repo.head.commit.hexsha
        except ValueError as error:
            raise NotARepoError(f"the git repository at {repo_path} has no commit") from error

        if not repo.remotes:
            raise NoRemoteError(f"the git repository at {repo_path} has no remote")

        remote_names = [remote.name for remote in repo.remotes]
        remote = repo.remote("origin") if "origin" in remote_names else repo.remotes[0]
        remote_urls = [url for url in remote.urls if url]
        if not remote_urls:
            raise NoRemoteError(f"the remote {remote.name} of the git repository at {repo_path} has no url")

        refs = sorted(tag.name for tag in repo.tags if tag.commit.hexsha == head_sha)
        logger.info("The git repository at %s is at commit %s of %s.", repo_path, head_sha, remote_urls[0])

        return HeadCommit(remote_url=remote_urls[0], commit_sha=head_sha, refs=tuple(refs))

    def resolve_ref(self, url: str, ref: str) -> str:
        """Return the commit SHA a branch or tag of a remote repository points at.

        Annotated tags are peeled to the commit they tag. The default branch is never assumed.

        Parameters
        ----------
        url : str
            The remote URL.
        ref : str
            The branch name, tag name or full ref name.

        Returns
        -------
        str
            The commit SHA.

        Raises
        ------
        SourceUnreachableError
            If the remote cannot be listed or does not have the ref.
        """
        refs = ls_remote(url, ref)
        # Same precedence as git rev-parse: a tag shadows a branch of the same name.
        for candidate in (ref, f"refs/{ref}", f"refs/tags/{ref}", f"refs/heads/{ref}"):
            for name in (f"{candidate}^{{}}", candidate):
                if name in refs:
                    logger.debug("Resolved ref %s of %s to %s.", ref, url, refs[name])
                    return refs[name]

        raise SourceUnreachableError(url, f"ref {ref} does not exist in the remote repository")
