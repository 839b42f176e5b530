from __future__ import annotations

import logging

from github import Auth, Github, GithubException
from github.GithubRetry import GithubRetry

from prledger_core.gh.base import BasePullRequest
from prledger_core.gh.models import Comment, Comparison, FileChange, ReviewCommentArgs

logger = logging.getLogger(__name__)

PER_PAGE = 100
# Transport-level budget. Rate-limit waits and 5xx retries happen inside
# PyGithub; the engine only sees the final success or failure.
_TRANSPORT_RETRIES = 10
_REQUEST_TIMEOUT = 30


def get_repo(repo_name: str, token: str):
    client = Github(
        auth=Auth.Token(token),
        per_page=PER_PAGE,
        retry=GithubRetry(total=_TRANSPORT_RETRIES),
        timeout=_REQUEST_TIMEOUT,
    )
    return client.get_repo(repo_name)


def get_pull_requests(repo, state: str = "open"):
    return repo.get_pulls(state=state)


def open_pull_request(repo_name: str, pr_number: int, token: str | None = None, repo_obj=None) -> GithubPullRequest:
    """Return a GithubPullRequest for ``repo_name#pr_number``.

    Raises ValueError when the PR does not exist; a run cannot proceed without it.
    """
    repo = repo_obj if repo_obj is not None else get_repo(repo_name, token=token)
    try:
        pull = repo.get_pull(pr_number)
    except GithubException:
        raise ValueError(f"PR #{pr_number} not found in {repo_name}.")
    return GithubPullRequest(repo, pull)


def drain_pages(paginated, per_page: int = PER_PAGE) -> list:
    """Fetch every page of a PyGithub PaginatedList, stopping on a short page."""
    items: list = []
    page = 0
    while True:
        batch = list(paginated.get_page(page))
        items.extend(batch)
        if len(batch) < per_page:
            return items
        page += 1


class GithubPullRequest(BasePullRequest):
    """BasePullRequest backed by PyGithub.

    The issue-comment and review-comment lists are drained once and cached for
    the lifetime of the instance. Writes made through this instance go through
    to the cache, so later scans in the same run see them.
    """

    def __init__(self, repo, pull):
        self._repo = repo
        self._pull = pull
        self.repo_name = repo.full_name
        self.number = pull.number
        self.title = pull.title or ""
        self.body = pull.body or ""
        self.base_sha = pull.base.sha
        self.head_sha = pull.head.sha
        self.draft = bool(getattr(pull, "draft", False))
        self._comments: list[Comment] | None = None
        self._review_comments: list[Comment] | None = None

    # -- description ----------------------------------------------------

    def get_description(self) -> str:
        return self._repo.get_pull(self.number).body or ""

    def update_description(self, description: str) -> None:
        self._pull.edit(body=description)

    # -- commits and content --------------------------------------------

    def list_commits(self) -> list[str]:
        return [c.sha for c in drain_pages(self._pull.get_commits())]

    def compare_commits(self, base: str, head: str) -> Comparison:
        comparison = self._repo.compare(base, head)
        return Comparison(
            commits=[c.sha for c in comparison.commits],
            files=[FileChange(filename=f.filename, status=f.status, patch=f.patch or "") for f in comparison.files],
        )

    def get_content(self, path: str, ref: str) -> str | None:
        content = self._repo.get_contents(path, ref=ref)
        if isinstance(content, list):
            return None
        return content.decoded_content.decode("utf-8", errors="replace")

    # -- issue comments -------------------------------------------------

    def list_comments(self) -> list[Comment]:
        if self._comments is None:
            try:
                raw = drain_pages(self._pull.get_issue_comments())
            except GithubException as e:
                logger.warning("Failed to list comments: %s", e)
                raise
            self._comments = [Comment.from_github(c) for c in raw]
        return self._comments

    def create_comment(self, body: str) -> Comment:
        comment = Comment.from_github(self._pull.create_issue_comment(body))
        if self._comments is not None:
            self._comments.append(comment)
        return comment

    def update_comment(self, comment_id: int, body: str) -> None:
        self._pull.get_issue_comment(comment_id).edit(body)
        _write_through(self._comments, comment_id, body)

    # -- review comments ------------------------------------------------

    def list_review_comments(self) -> list[Comment]:
        if self._review_comments is None:
            try:
                raw = drain_pages(self._pull.get_review_comments())
            except GithubException as e:
                logger.warning("Failed to list review comments: %s", e)
                raise
            self._review_comments = [Comment.from_github(c) for c in raw]
        return self._review_comments

    def create_review_comment(self, args: ReviewCommentArgs) -> Comment:
        anchor = {"line": args.line}
        if args.start_line is not None:
            anchor["start_line"] = args.start_line
            anchor["start_side"] = args.start_side or "RIGHT"
        created = self._pull.create_review_comment(
            body=args.body,
            commit=self._repo.get_commit(args.commit_id),
            path=args.path,
            **anchor,
        )
        comment = Comment.from_github(created)
        if self._review_comments is not None:
            self._review_comments.append(comment)
        return comment

    def update_review_comment(self, comment_id: int, body: str) -> None:
        self._pull.get_review_comment(comment_id).edit(body)
        _write_through(self._review_comments, comment_id, body)

    def create_reply_for_review_comment(self, comment_id: int, body: str) -> Comment:
        comment = Comment.from_github(self._pull.create_review_comment_reply(comment_id, body))
        if self._review_comments is not None:
            self._review_comments.append(comment)
        return comment


def _write_through(cache: list[Comment] | None, comment_id: int, body: str) -> None:
    if cache is None:
        return
    for comment in cache:
        if comment.id == comment_id:
            comment.body = body
            return
