"""
Data Models Module

This module defines the Pydantic models used throughout the application.
The GitHub models are read-only views over captured webhook deliveries;
they mirror GitHub's wire schema rather than defining one.

Design Decisions:
- Unknown keys are kept (extra="allow") so a parsed payload dumps back
  to the captured literal
- Header lookup is case-insensitive, header spelling in raw maps is preserved
- Clear separation between GitHub wire models and replay models
"""

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class UnsupportedEventError(Exception):
    """Raised when no typed model exists for a webhook event."""
    pass


# =============================================================================
# Enums
# =============================================================================

class ReviewAction(str, Enum):
    """Actions GitHub sends with pull_request_review deliveries."""
    CREATED = "created"
    SUBMITTED = "submitted"
    EDITED = "edited"
    DISMISSED = "dismissed"


# =============================================================================
# GitHub Webhook Models
# =============================================================================

class WireModel(BaseModel):
    """Base for models that mirror GitHub's webhook schema."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        """Dump back to the JSON shape GitHub sent."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class GitHubUser(WireModel):
    """GitHub user snapshot embedded in events."""
    login: str
    id: int
    avatar_url: Optional[str] = None
    gravatar_id: Optional[str] = None
    url: Optional[str] = None
    html_url: Optional[str] = None
    type: str = "User"
    site_admin: bool = False


class Link(WireModel):
    """A single hypermedia link."""
    href: str


class ReviewCommentLinks(WireModel):
    """Hypermedia links attached to a review comment."""
    self_link: Link = Field(alias="self")
    html: Link
    pull_request: Link


class ReviewComment(WireModel):
    """Inline review comment on a pull request diff."""
    url: str
    id: int
    diff_hunk: str
    path: str
    position: Optional[int] = None
    original_position: Optional[int] = None
    commit_id: str
    original_commit_id: str
    user: GitHubUser
    body: str
    created_at: datetime
    updated_at: datetime
    html_url: str
    pull_request_url: str
    links: ReviewCommentLinks = Field(alias="_links")


class Repository(WireModel):
    """GitHub repository snapshot."""
    id: int
    name: str
    full_name: str
    owner: GitHubUser
    private: bool
    html_url: str
    description: Optional[str] = None
    fork: bool = False
    url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    pushed_at: Optional[datetime] = None
    clone_url: Optional[str] = None
    ssh_url: Optional[str] = None
    default_branch: str = "main"


class PullRequestRef(WireModel):
    """PR head or base (branch tip) information."""
    label: str
    ref: str
    sha: str
    user: GitHubUser
    repo: Optional[Repository] = None


class PullRequest(WireModel):
    """Pull request snapshot at delivery time."""
    url: str
    id: int
    html_url: str
    diff_url: str
    patch_url: str
    issue_url: str
    number: int
    state: str
    locked: bool = False
    title: str
    user: GitHubUser
    body: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    closed_at: Optional[datetime] = None
    merged_at: Optional[datetime] = None
    merge_commit_sha: Optional[str] = None
    assignee: Optional[GitHubUser] = None
    milestone: Optional[Dict[str, Any]] = None
    head: PullRequestRef
    base: PullRequestRef
    links: Dict[str, Link] = Field(default_factory=dict, alias="_links")

    @property
    def is_open(self) -> bool:
        return self.state == "open"


class PullRequestReviewPayload(WireModel):
    """Body of a pull_request_review delivery."""
    action: ReviewAction
    comment: Optional[ReviewComment] = None
    review: Optional[Dict[str, Any]] = None
    pull_request: PullRequest
    repository: Repository
    sender: GitHubUser


# Typed payload model per X-GitHub-Event value
EVENT_MODELS = {
    "pull_request_review": PullRequestReviewPayload,
}


class WebhookHeaders(BaseModel):
    """
    The GitHub-specific headers of a delivery.

    HTTP header names are case-insensitive; build this with
    ``from_mapping`` rather than from a raw dict.
    """
    content_type: str = "application/json"
    event: str
    signature: Optional[str] = None
    signature_256: Optional[str] = None
    delivery_id: str
    user_agent: Optional[str] = None

    HEADER_NAMES: ClassVar[Dict[str, str]] = {
        "content_type": "content-type",
        "event": "x-github-event",
        "signature": "x-hub-signature",
        "signature_256": "x-hub-signature-256",
        "delivery_id": "x-github-delivery",
        "user_agent": "user-agent",
    }

    @classmethod
    def from_mapping(cls, headers: Mapping[str, str]) -> "WebhookHeaders":
        """Pick the GitHub headers out of any header mapping."""
        lowered = {name.lower(): value for name, value in headers.items()}
        values = {
            field: lowered[header]
            for field, header in cls.HEADER_NAMES.items()
            if header in lowered
        }
        return cls(**values)


# =============================================================================
# Delivery Models
# =============================================================================

class WebhookDelivery(BaseModel):
    """
    A captured webhook delivery: event name, raw headers and raw payload.

    The raw maps are kept exactly as captured; typed views are built
    on demand.
    """
    event: str
    headers: Dict[str, str]
    payload: Dict[str, Any]

    def parsed_headers(self) -> WebhookHeaders:
        return WebhookHeaders.from_mapping(self.headers)

    def parsed_payload(self) -> WireModel:
        """
        Parse the payload into the typed model for this event.

        Raises:
            UnsupportedEventError: If no model exists for the event
        """
        model = EVENT_MODELS.get(self.event)
        if model is None:
            raise UnsupportedEventError(f"No payload model for event '{self.event}'")
        return model.model_validate(self.payload)


class PreparedDelivery(BaseModel):
    """A delivery rendered into the exact bytes and headers to POST."""
    event: str
    delivery_id: str
    headers: Dict[str, str]
    body: bytes


class ReplayResult(BaseModel):
    """Outcome of POSTing one prepared delivery at a receiver."""
    target_url: str
    event: str
    delivery_id: str
    status_code: int
    elapsed_seconds: float = Field(ge=0.0)
    response_body: str = ""
    sent_at: datetime = Field(default_factory=datetime.utcnow)

    @computed_field
    @property
    def succeeded(self) -> bool:
        return 200 <= self.status_code < 300


class ReplayRequest(BaseModel):
    """Request body for the replay endpoint."""
    target_url: Optional[str] = Field(
        default=None,
        description="Receiver URL; defaults to the configured target"
    )
    count: int = Field(default=1, ge=1, description="Number of sends")
    resign: bool = Field(
        default=False,
        description="Recompute signatures with the configured secret"
    )
    fresh_delivery_id: bool = Field(
        default=False,
        description="Use a new X-GitHub-Delivery for every send"
    )

    @field_validator("target_url")
    @classmethod
    def validate_target_url(cls, v: Optional[str]) -> Optional[str]:
        """Only http(s) receivers can be replayed to."""
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid target_url: {v}. Must be http(s)")
        return v


class ReplayResponse(BaseModel):
    """Response body of the replay endpoint."""
    event: str
    target_url: str
    results: List[ReplayResult]

    @computed_field
    @property
    def all_succeeded(self) -> bool:
        return all(result.succeeded for result in self.results)
