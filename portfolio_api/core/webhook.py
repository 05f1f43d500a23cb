import hashlib
import hmac

from portfolio_api import config


def verify_signature(body: bytes, signature: str | None, secret: str | None = None) -> bool:
    """Check the `X-Hub-Signature-256` header of a webhook delivery.

    Deliveries are accepted unsigned when no secret is configured.
    """
    secret = config.WEBHOOK_SECRET if secret is None else secret
    if not secret:
        return True
    if not signature:
        return False
    expected = "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature)


def touches_artifact(payload: dict) -> bool:
    """Whether a push payload modifies the tracked artifact on the configured branch."""
    if payload.get("ref") != f"refs/heads/{config.ARTIFACT_BRANCH}":
        return False
    commits = payload.get("commits")
    if not isinstance(commits, list):
        return False
    for commit in commits:
        if not isinstance(commit, dict):
            continue
        for key in ("added", "modified"):
            changed = commit.get(key)
            if isinstance(changed, list) and config.ARTIFACT_PATH in changed:
                return True
    return False
