"""Azure DevOps pull-request status scanner."""

from .classifier import classify, classify_vote
from .models import PullRequestSnapshot, PullRequestStatus

__all__ = ["classify", "classify_vote", "PullRequestSnapshot", "PullRequestStatus"]
