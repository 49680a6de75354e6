"""TFVC adapter.

TFVC workspaces carry no usable commit time locally, so the creation date of
the current changeset is fetched from the TFS / Azure DevOps REST API. The
branch cannot be derived reliably and must always be passed explicitly.
"""

from __future__ import annotations

import base64
import logging
from typing import Optional

import httpx

from ..config import TfvcSettings
from ..env import EnvReader
from ..errors import VcsError, VcsErrorKind
from ..models import RevisionInfo, VcsKind
from .base import TfvcWorkspace, parse_rfc3339

logger = logging.getLogger(__name__)

OAUTH_TOKEN_VAR = "SYSTEM_ACCESSTOKEN"
COLLECTION_URI_VAR = "SYSTEM_TEAMFOUNDATIONCOLLECTIONURI"
PROJECT_VARS = ("SYSTEM_TEAMPROJECTID", "SYSTEM_TEAMPROJECT")
CHANGESET_VAR = "BUILD_SOURCEVERSION"

_STATUS_HINTS = {
    401: "The token was rejected. Check that it is valid and has not expired.",
    403: (
        "The token lacks permissions. The identity must be allowed to read "
        "code and work items of the project."
    ),
    404: "The changeset or project does not exist on the server.",
    429: "The server is rate-limiting requests. Try again later.",
}


class TfvcAdapter:
    """Resolve the changeset creation date via the REST API."""

    def __init__(
        self,
        env: Optional[EnvReader] = None,
        settings: Optional[TfvcSettings] = None,
        branch_override: Optional[str] = None,
        personal_access_token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._env = env or EnvReader()
        self._settings = settings or TfvcSettings()
        self._branch_override = (branch_override or "").strip() or None
        self._personal_access_token = (personal_access_token or "").strip() or None
        self._transport = transport

    def resolve(self, handle: TfvcWorkspace) -> RevisionInfo:
        if self._branch_override is None:
            raise VcsError(
                VcsErrorKind.MISSING_BRANCH, VcsKind.TFVC, "determine branch",
                "TFVC branches cannot be derived from the workspace",
            )
        headers = self._authentication_headers()
        collection_uri = self._coordinate("collection URI", self._settings.collection_uri, COLLECTION_URI_VAR)
        project = self._coordinate("team project", self._settings.project, *PROJECT_VARS)
        changeset = self._coordinate("changeset", self._settings.changeset, CHANGESET_VAR)
        if changeset[:1] in ("C", "c") and changeset[1:].isdigit():
            changeset = changeset[1:]

        url = changeset_url(collection_uri, project, changeset)
        created = self._fetch_created_date(url, headers)
        logger.debug(f"Changeset {changeset} in {handle.root} was created {created}")
        try:
            committed = parse_rfc3339(created)
        except ValueError:
            raise VcsError(
                VcsErrorKind.API_ERROR, VcsKind.TFVC, "parse changeset",
                f"unexpected createdDate {created!r}",
            ) from None
        return RevisionInfo(
            vcs=VcsKind.TFVC,
            revision_id=changeset,
            commit_timestamp=committed,
            branch_hint=None,
        )

    def _authentication_headers(self) -> dict[str, str]:
        if self._personal_access_token:
            logger.debug("Authenticating with the personal access token")
            # PATs go in as the password of a Basic credential with an empty user name.
            credential = base64.b64encode(f":{self._personal_access_token}".encode("utf-8")).decode("ascii")
            return {"Authorization": f"Basic {credential}"}
        token = self._env.get(OAUTH_TOKEN_VAR)
        if token:
            logger.debug(f"Authenticating with the OAuth token from ${OAUTH_TOKEN_VAR}")
            return {"Authorization": f"Bearer {token}"}
        raise VcsError(
            VcsErrorKind.AUTHENTICATION_MISSING, VcsKind.TFVC, "authenticate",
            f"neither --tfs-pat nor ${OAUTH_TOKEN_VAR} is set",
        )

    def _coordinate(self, label: str, configured: Optional[str], *variables: str) -> str:
        if configured:
            return configured
        found = self._env.first(*variables)
        if found is None:
            raise VcsError(
                VcsErrorKind.UNREADABLE, VcsKind.TFVC, f"read {label}",
                f"${' or $'.join(variables)} is not set; run inside an Azure DevOps/TFS build "
                "or configure it under [tfvc]",
            )
        return found[1]

    def _fetch_created_date(self, url: str, headers: dict[str, str]) -> str:
        logger.debug(f"Requesting {url}")
        try:
            with httpx.Client(timeout=self._settings.timeout, transport=self._transport) as client:
                response = client.get(url, headers={"Accept": "application/json", **headers})
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as exc:
            raise VcsError(
                VcsErrorKind.API_ERROR, VcsKind.TFVC, "fetch changeset",
                f"request to {url} timed out after {self._settings.timeout}s",
                hint="Increase the timeout with --timeout or check the server's availability.",
                timed_out=True,
            ) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise VcsError(
                VcsErrorKind.API_ERROR, VcsKind.TFVC, "fetch changeset",
                f"request to {url} failed with HTTP status {status}",
                hint=_STATUS_HINTS.get(status),
                status_code=status,
            ) from exc
        except httpx.HTTPError as exc:
            raise VcsError(
                VcsErrorKind.API_ERROR, VcsKind.TFVC, "fetch changeset",
                f"request to {url} failed: {exc}",
            ) from exc
        except ValueError as exc:
            raise VcsError(
                VcsErrorKind.API_ERROR, VcsKind.TFVC, "parse changeset",
                f"response from {url} is not valid JSON",
            ) from exc

        created = payload.get("createdDate") if isinstance(payload, dict) else None
        if not isinstance(created, str) or not created:
            raise VcsError(
                VcsErrorKind.API_ERROR, VcsKind.TFVC, "parse changeset",
                f"response from {url} has no createdDate",
            )
        return created


def changeset_url(collection_uri: str, project: str, changeset: str) -> str:
    return f"{collection_uri.rstrip('/')}/{project}/_apis/tfvc/changesets/{changeset}"
