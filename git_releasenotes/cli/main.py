"""Main CLI entry point for git-releasenotes."""

import logging
import sys
from pathlib import Path

import click
from dotenv import find_dotenv, load_dotenv

from .. import __version__
from ..config import get_config, Config
from ..git import GitClient, GitError, RangeResolutionError
from ..github import GitHubClient, parse_repo_url
from ..releasenote import RenderMode, generate_release_notes
from .clipboard import copy_to_clipboard


CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])


def setup_logging(debug: bool) -> logging.Logger:
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    return logging.getLogger('git_releasenotes')


def resolve_start(git: GitClient, tag, commit) -> str:
    """Pick the reference the commit range starts after.

    Raises:
        RangeResolutionError: If the reference does not exist or no tag is found
    """
    if commit:
        git.resolve_commit(commit)
        return commit
    if tag:
        if not git.tag_exists(tag):
            raise RangeResolutionError(f"'{tag}' is not a tag")
        return tag
    return git.latest_tag()


def update_tags(git: GitClient, terse: bool, logger: logging.Logger):
    """Fetch tags from origin. A failed fetch is only fatal outside terse mode."""
    try:
        git.fetch_tags()
    except GitError as e:
        if not terse:
            raise
        logger.debug(f"Fetching tags failed: {e}")


def create_github_client(config: Config, git: GitClient, logger: logging.Logger):
    """Create a GitHub client for the repository, or None if it is not on GitHub."""
    if config.github_repo and '/' in config.github_repo:
        owner, repo = config.github_repo.split('/', 1)
    else:
        parsed = parse_repo_url(git.remote_url())
        if parsed is None:
            logger.debug("origin is not a GitHub remote, PR search disabled")
            return None
        owner, repo = parsed

    if not config.has_token:
        logger.debug("GITHUB_TOKEN not set, PR search disabled")
    return GitHubClient(config, owner, repo, logger)


@click.command(context_settings=CONTEXT_SETTINGS)
@click.option('-c', 'clipboard', is_flag=True, help='Copy output to clipboard')
@click.option('-p', 'include_pr', is_flag=True, help='Include PR numbers in output')
@click.option('-x', 'raw_commits', is_flag=True, help='List raw commits that form the basis of the output')
@click.option('-X', 'debug', is_flag=True, help='Enable debug logging')
@click.option('-T', '--terse', is_flag=True, help='Output only the release notes, no headers or other text')
@click.option('-t', 'tag', metavar='TAG', help='Tag to use instead of the latest one')
@click.option('-C', 'commit', metavar='COMMIT', help='Commit to use instead of a tag')
@click.option('--config-file', help='Path to JSON configuration file')
@click.version_option(version=__version__, prog_name="git-releasenotes")
def cli(clipboard, include_pr, raw_commits, debug, terse, tag, commit, config_file):
    """Generate release notes from the commits since the latest tag."""

    logger = setup_logging(debug)

    if tag and commit:
        click.echo("Error: -t and -C cannot be used together", err=True)
        sys.exit(2)

    # .env never overrides variables already set in the environment
    load_dotenv(find_dotenv(usecwd=True))

    try:
        config = get_config(config_file)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    try:
        git = GitClient.discover(Path.cwd(), logger)
        if not terse and config.require_clean_worktree and git.is_dirty():
            click.echo("Error: You have local changes. Commit or stash them first.", err=True)
            sys.exit(1)
        if config.fetch_tags:
            update_tags(git, terse, logger)
        since_ref = resolve_start(git, tag, commit)
        commits = git.commits_since(since_ref)
    except GitError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    logger.debug(f"Found {len(commits)} commits between {since_ref} and HEAD")
    if not commits:
        logger.warning(f"No commits found since {since_ref}")

    mode = RenderMode(
        terse=terse,
        include_pr=include_pr,
        include_author=config.include_author,
        raw_commits=raw_commits,
    )
    client = create_github_client(config, git, logger)
    notes = generate_release_notes(commits, mode, client=client, config=config, since_ref=since_ref)

    if clipboard:
        if copy_to_clipboard(notes):
            if not terse:
                click.echo("Release notes copied to clipboard", err=True)
            return
        click.echo("Failed to copy to clipboard, printing instead", err=True)

    if notes:
        click.echo(notes)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == '__main__':
    main()
