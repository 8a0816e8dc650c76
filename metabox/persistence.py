"""
Persistence pipeline for metabox panels.
Handles save authorization, context checks and the sanitize+store walk over
every field of a panel schema.
"""

from typing import Any, Optional
import logging

from .models import FieldDescriptor, SaveResult
from .sanitizer import sanitize, sanitize_flags
from .schema_loader import coerce_schema
from .security import CapabilityAuthorizer, NonceManager, Principal
from .store import KeyValueStore
from .submission import Submission

logger = logging.getLogger(__name__)

DEFAULT_NONCE_FIELD = "metabox_nonce"
DEFAULT_NONCE_ACTION = "metabox_save_data"


class PersistencePipeline:
    """Saves submitted panel data to the durable store."""

    def __init__(
        self,
        store: KeyValueStore,
        nonces: NonceManager,
        authorizer: CapabilityAuthorizer,
        nonce_field: str = DEFAULT_NONCE_FIELD,
        nonce_action: str = DEFAULT_NONCE_ACTION
    ):
        self.store = store
        self.nonces = nonces
        self.authorizer = authorizer
        self.nonce_field = nonce_field
        self.nonce_action = nonce_action

    def is_authorized(self, post_id: Any, submission: Submission, principal: Optional[Principal]) -> bool:
        """Check the anti-forgery token and the principal's capability on the post."""
        user_id = principal.user_id if principal else 0
        token = submission.get_submitted_value(self.nonce_field)

        if not self.nonces.verify(token, self.nonce_action, user_id):
            return False

        return self.authorizer.can_edit(principal, post_id)

    def save(self, post_id: Any, schema: Any, submission: Submission,
             principal: Optional[Principal]) -> SaveResult:
        """
        Save every identifiable field of a schema.

        This save is not validating. Extension points before and after the
        save are where validation messages should be queued.

        Args:
            post_id: Post the values belong to
            schema: List of tabs (Tab models or raw declarations)
            submission: Submitted form data
            principal: Acting user

        Returns:
            UNAUTHORIZED when the token or capability check fails,
            SKIPPED during quick-edit/async saves or for a missing or malformed schema,
            APPLIED once every field has been attempted (individual writes may have failed)
        """
        if not self.is_authorized(post_id, submission, principal):
            logger.info(f"Save refused for post {post_id}: unauthorized")
            return SaveResult.UNAUTHORIZED

        if submission.is_low_fidelity:
            logger.debug(f"Save skipped for post {post_id}: quick-edit or async request")
            return SaveResult.SKIPPED

        tabs = coerce_schema(schema)
        if tabs is None:
            logger.warning(f"Save skipped for post {post_id}: no valid schema")
            return SaveResult.SKIPPED

        saved = 0
        attempted = 0
        for tab in tabs:
            for field in tab.fields:
                # Render-only fields have no id
                if not field.persistable:
                    continue
                attempted += 1
                if self.save_field(post_id, field, submission):
                    saved += 1

        logger.info(f"Saved post {post_id}: {saved}/{attempted} fields updated")
        return SaveResult.APPLIED

    def save_field(self, post_id: Any, field: FieldDescriptor, submission: Submission) -> bool:
        """
        Sanitize and store a single field.

        Returns:
            True if the store reported a changed value, False otherwise
            (an unchanged value is not an error)
        """
        flags = sanitize_flags(field)
        raw_value = submission.get_submitted_value(field.id, as_array=flags.require_array)
        value = sanitize(raw_value, field)

        try:
            updated = self.store.set(post_id, field.id, value)
        except Exception as e:
            logger.error(f"Failed to store field '{field.id}' for post {post_id}: {e}")
            return False

        if not updated:
            logger.debug(f"Field '{field.id}' for post {post_id} not updated")
        return bool(updated)
