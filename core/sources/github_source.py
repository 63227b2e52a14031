import datetime
import os
from typing import Any, Dict, Iterator, List, Optional

import httpx

from config.models import GitHubConfig
from core.contracts.models import Change, ChangeFiles, ChangeReport
from utils.errors import SourceError
from utils.logger import logger

PER_PAGE = 100

# GitHub file status -> report bucket. Other statuses (copied, unchanged) are ignored.
FILE_STATUS_BUCKETS = {
    "added": "added",
    "removed": "deleted",
    "modified": "modified",
    "changed": "modified",
    "renamed": "modified",
}


def _parse_timestamp(value: str) -> datetime.datetime:
    return datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))


class GitHubChangeSource:
    """
    Builds a change report from the pull requests of a GitHub repository.

    Open pull requests are all listed; closed ones are read newest first
    and listing stops at the first one created before the retention window.
    """

    def __init__(
        self,
        config: GitHubConfig,
        client: Optional[httpx.Client] = None,
        now: Optional[datetime.datetime] = None,
    ):
        if not config.repo:
            raise SourceError("GitHub repository (`repo`) not specified in config.")
        self.config = config
        self.repo = config.repo
        self.now = now or datetime.datetime.now(datetime.timezone.utc)
        self.client = client or httpx.Client(
            base_url=config.api_url,
            headers=self._headers(),
            timeout=config.timeout_sec,
            transport=httpx.HTTPTransport(retries=config.retries),
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        token = os.getenv(self.config.token_env_var)
        if token:
            headers["Authorization"] = f"token {token}"
        else:
            logger.warning(
                f"Environment variable '{self.config.token_env_var}' not set. "
                "Making unauthenticated requests to GitHub API."
            )
        return headers

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = self.client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise SourceError(
                f"GitHub API returned error: {e.response.status_code} {e.response.text}"
            ) from e
        except httpx.RequestError as e:
            raise SourceError(f"Failed to request GitHub API: {e}") from e

    def _pages(self, url: str, params: Dict[str, Any]) -> Iterator[List[Dict[str, Any]]]:
        page = 1
        while True:
            items = self._get(url, params={**params, "per_page": PER_PAGE, "page": page})
            yield items
            if len(items) < PER_PAGE:
                return
            page += 1

    def fetch(self) -> ChangeReport:
        """
        Reads open and recently closed pull requests with their changed files.

        Raises:
            SourceError: If the pull request lists cannot be read.
        """
        logger.info(f"Fetching pull requests for {self.repo}")
        open_prs = self.fetch_pull_requests("open")
        closed_prs = self.fetch_pull_requests("closed")
        return ChangeReport(open_prs=open_prs, closed_prs=closed_prs)

    def fetch_pull_requests(self, state: str) -> Dict[str, Change]:
        threshold = None
        if state == "closed":
            threshold = self.now - datetime.timedelta(days=self.config.retention_days)

        changes: Dict[str, Change] = {}
        params = {"state": state, "sort": "created", "direction": "desc"}
        for page in self._pages(f"/repos/{self.repo}/pulls", params):
            for pr in page:
                created_at = _parse_timestamp(pr["created_at"])
                if threshold is not None and created_at < threshold:
                    logger.info(f"Reached {state} PRs older than {self.config.retention_days} days")
                    return changes
                changes[str(pr["number"])] = self._to_change(pr, created_at)
        logger.info(f"Fetched {len(changes)} {state} PRs")
        return changes

    def _to_change(self, pr: Dict[str, Any], created_at: datetime.datetime) -> Change:
        number = pr["number"]
        try:
            files = self.fetch_files(number)
        except SourceError as e:
            logger.error(f"Error fetching files for PR {number}..ignoring: {e}")
            files = None

        user = pr.get("user") or {}
        return Change(
            files=files,
            issueTitle=pr.get("title"),
            branch=(pr.get("head") or {}).get("ref"),
            author=user.get("login"),
            authorAvatarUrl=user.get("avatar_url"),
            labels=[
                {"key": label.get("name"), "description": label.get("description")}
                for label in pr.get("labels", [])
            ],
            elapsedTime=int((self.now - created_at).total_seconds() * 1000),
            linkToIssue=pr.get("html_url"),
            merged=bool(pr.get("merged_at")),
            mergeCommitSha=pr.get("merge_commit_sha"),
        )

    def fetch_files(self, number: int) -> ChangeFiles:
        """Partitions a pull request's changed files into added/modified/deleted."""
        files = ChangeFiles()
        for page in self._pages(f"/repos/{self.repo}/pulls/{number}/files", {}):
            for entry in page:
                bucket = FILE_STATUS_BUCKETS.get(entry.get("status"))
                if bucket:
                    getattr(files, bucket).append(entry["filename"])
        return files
