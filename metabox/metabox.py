"""
Admin metabox base class.

A metabox is a tabbed settings panel attached to one or more content
editing screens. Extending classes set id, title and screens in
configure() and declare their tabs and fields in get_fields().

The host binds the metabox once through subscriptions():

    hooks.subscribe(metabox.subscriptions())

and then drives it through the lifecycle methods:

    on_register -> output -> on_save (on_before_save, save, on_after_save)
    -> on_shutdown, and on_render_notices on the next render.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union
import logging

from .config_loader import get_config_value, get_default_config
from .exceptions import SchemaError
from .error_queue import ErrorQueue
from .field_registry import FieldTypeRegistry, default_registry
from .field_renderers import render_template
from .hooks import HookRegistry
from .models import FieldDescriptor, RenderState, SaveResult, Tab
from .persistence import PersistencePipeline
from .schema_loader import coerce_schema
from .schema_processor import process_fields, render_panel
from .security import CapabilityAuthorizer, NonceManager, Principal
from .store import KeyValueStore
from .submission import Submission

logger = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    IDLE = "idle"
    REGISTERED = "registered"
    SAVE_INVOKED = "save_invoked"
    SAVE_COMPLETE = "save_complete"


class AdminMetabox(ABC):
    """Admin metabox abstract class."""

    # Define these in the extending class's configure() method
    id: str = ''
    title: str = ''
    screens: Union[str, List[str]] = []

    # Capability checked before displaying and saving the metabox
    capability = 'edit_post'

    # Placement on the editing screen: 'normal', 'side' or 'advanced'
    context = 'normal'

    # 'default', 'high' or 'low'
    priority = 'default'

    def __init__(
        self,
        store: KeyValueStore,
        hooks: Optional[HookRegistry] = None,
        registry: Optional[FieldTypeRegistry] = None,
        nonces: Optional[NonceManager] = None,
        config: Optional[Dict[str, Any]] = None,
        owner_lookup: Optional[Callable[[Any], Optional[int]]] = None
    ):
        self.config = config or get_default_config()
        # Meta key prefix for the fields declared by the metabox
        self.prefix = get_config_value(self.config, 'panel', 'meta_prefix', '_mb_')

        self.configure()
        if not self.id:
            raise ValueError(f"{self.__class__.__name__}.configure() must set an id")

        self.store = store
        self.hooks = hooks or HookRegistry()
        self.registry = registry or default_registry()
        self.nonces = nonces or NonceManager(
            secret=get_config_value(self.config, 'security', 'nonce_secret'),
            lifetime=int(get_config_value(self.config, 'security', 'nonce_lifetime', 86400))
        )
        self.nonce_field = get_config_value(self.config, 'panel', 'nonce_field', 'metabox_nonce')
        self.nonce_action = get_config_value(self.config, 'panel', 'nonce_action', 'metabox_save_data')

        error_prefix = get_config_value(self.config, 'panel', 'error_option_prefix', 'metabox_errors_')
        self.error_opt_key = f"{error_prefix}{self.id}"
        self.errors = ErrorQueue(self.error_opt_key, store)

        self.authorizer = CapabilityAuthorizer(self.capability, owner_lookup)
        self.pipeline = PersistencePipeline(
            store, self.nonces, self.authorizer, self.nonce_field, self.nonce_action
        )

        self.post_id: Any = None
        self.state = LifecycleState.IDLE
        self._saved = False
        self._save_result: Optional[SaveResult] = None

    @abstractmethod
    def configure(self) -> None:
        """Set id, title and screens (and optionally capability, context, priority)."""

    @abstractmethod
    def get_fields(self) -> List[Any]:
        """Return the panel's tabs: a list of Tab models or tab declarations."""

    def get_screens(self) -> List[str]:
        """Screens (post types) as a list."""
        if isinstance(self.screens, str):
            return [self.screens]
        return list(self.screens)

    @property
    def fields_filter(self) -> str:
        return f"metabox_fields_{self.id.replace('-', '_')}"

    def subscriptions(self) -> Dict[str, Callable]:
        """Host events this metabox handles, bound once by the host."""
        table: Dict[str, Callable] = {
            'add_meta_boxes': self.on_register,
            'admin_notices': self.on_render_notices,
            'shutdown': self.on_shutdown,
        }
        for screen in self.get_screens():
            table[f'save_post_{screen}'] = self.on_save
        return table

    # Errors

    def add_error(self, text: str) -> None:
        """Add an error message shown on the next render."""
        self.errors.add(text)

    def has_errors(self) -> bool:
        return self.errors.has_errors()

    def get_errors(self) -> List[str]:
        """Retrieve stored metabox errors."""
        return self.errors.get_stored()

    # Schema

    def get_filtered_fields(self) -> Any:
        """Declared fields after the metabox's fields filter."""
        return self.hooks.apply_filters(self.fields_filter, self.get_fields(), self)

    def get_schema(self) -> Optional[List[Tab]]:
        return coerce_schema(self.get_filtered_fields())

    # Render path

    def on_register(self, post_id: Any, principal: Optional[Principal]) -> bool:
        """
        Register the metabox for the screen being edited.

        Returns:
            True if the principal may see the metabox
        """
        self.post_id = post_id

        if not self.authorizer.can_edit(principal, post_id):
            logger.debug(f"Metabox {self.id} not registered for post {post_id}: missing capability")
            return False

        self.state = LifecycleState.REGISTERED
        return True

    def process_fields(self, post_id: Any = None) -> RenderState:
        """
        Build navigation and content for the metabox.

        Raises:
            SchemaError: If the declared fields are not a valid list of tabs
            UnknownFieldType: If a field type has no renderer
        """
        schema = self.get_schema()
        if schema is None:
            raise SchemaError(self.id, "get_fields() did not return a valid list of tabs")

        post_id = self.post_id if post_id is None else post_id
        values = self.store.get_all(post_id) if post_id is not None else {}
        return process_fields(self.id, schema, self.registry, values)

    def output(self, post_id: Any = None, principal: Optional[Principal] = None) -> str:
        """Generate the HTML for the metabox."""
        state = self.process_fields(post_id)

        user_id = principal.user_id if principal else 0
        nonce_markup = render_template("panel/nonce_field.html", {
            'name': self.nonce_field,
            'token': self.nonces.create(self.nonce_action, user_id),
        })

        return render_panel(
            self.id,
            state,
            before_content=self.hooks.apply_filters('metabox_before_content', '', self.id),
            after_content=self.hooks.apply_filters('metabox_after_content', '', self.id),
            nonce_markup=nonce_markup,
        )

    def on_render_notices(self, notice: Optional[Callable[[str], Any]] = None) -> List[str]:
        """Display stored errors through the host's notice surface, then delete them."""
        return self.errors.display(notice)

    # Save path

    def save(self, post_id: Any, submission: Submission, principal: Optional[Principal]) -> SaveResult:
        """
        Save field data.

        This save is not validating. Extending classes that need validation
        should queue messages from save_before() / save_after().
        """
        return self.pipeline.save(post_id, self.get_filtered_fields(), submission, principal)

    def save_field(self, post_id: Any, field: FieldDescriptor, submission: Submission) -> bool:
        """Save a single metabox field."""
        return self.pipeline.save_field(post_id, field, submission)

    def save_before(self, post_id: Any) -> None:
        """Extension point run before the default save."""

    def save_after(self, post_id: Any) -> None:
        """Extension point run after the default save."""

    def on_before_save(self, post_id: Any) -> None:
        self.hooks.do_action(f'metabox_before_save_{self.id}', post_id, self)
        self.save_before(post_id)

    def on_after_save(self, post_id: Any) -> None:
        self.save_after(post_id)
        self.hooks.do_action(f'metabox_after_save_{self.id}', post_id, self)

    def on_save(self, post_id: Any, submission: Submission, principal: Optional[Principal]) -> Optional[SaveResult]:
        """
        Perform save actions.

        Hosts may fire the save event more than once per request; only the
        first call does any work, later calls return the first result.
        """
        if self._saved:
            logger.debug(f"Metabox {self.id} already saved during this request")
            return self._save_result

        self._saved = True
        self.post_id = post_id
        self.state = LifecycleState.SAVE_INVOKED

        self.on_before_save(post_id)
        self._save_result = self.save(post_id, submission, principal)
        self.on_after_save(post_id)

        self.state = LifecycleState.SAVE_COMPLETE
        return self._save_result

    def on_shutdown(self) -> bool:
        """Save queued messages to the store at the end of the request."""
        return self.errors.flush()
