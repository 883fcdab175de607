"""Action controllers.

A controller is a short-lived object: the dispatcher creates one instance
per request and releases it once the response exists. Subclasses declare
actions by naming convention::

    class WidgetsController(Controller):
        components = ("access", "request_log")

        def index_action(self):
            return {"items": store.all()}

        def object_action(self, identifier: str):
            widget = store.get(identifier)
            if widget is None:
                raise NotFound(f"No widget {identifier!r}")
            return {"widget": widget}

        def init_object_action(self, request):
            self.layout = "PlainLayout"

Default actions answer the bare verbs (see ``wren.resolver``)::

    GET    /widgets       -> index_action
    GET    /widgets/{v}   -> object_action   (identifier=v)
    POST   /widgets       -> create_action
    POST   /widgets/{v}   -> update_action   (identifier=v; PUT/PATCH too)
    DELETE /widgets[/{v}] -> delete_action

Any other ``<name>_action`` method is reachable as ``/widgets/<name>/...``.
An ``init_<name>_action`` method, when present, runs right before its
action and is responsible for choosing ``view`` and ``layout``.

Every hook below exists with a no-op default, so the dispatcher never
has to ask whether a controller implements it. Hooks may be ``def`` or
``async def``.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from wren.context import DispatchContext
from wren.http.request import Request
from wren.http.response import Response

if TYPE_CHECKING:
    from wren.views import View

# A view can be given as an instance, a View subclass, or the name of a
# view class registered with ``App.view``.
type ViewRef = View | type[View] | str


class Controller:
    """Base class for action controllers.

    Class attributes:
        name: Mount-independent controller name. Derived from the class
            name when empty (``BlogPostsController`` -> ``blog_posts``).
        components: Ordered names of the components this controller runs.
        component_config: Static per-component configuration, keyed by
            component name. Read once when the app freezes.
    """

    name: ClassVar[str] = ""
    components: ClassVar[tuple[str, ...]] = ()
    component_config: ClassVar[Mapping[str, Mapping[str, Any]]] = {}

    def __init__(self, context: DispatchContext) -> None:
        self.context = context
        self.view: ViewRef | None = None
        self.layout: ViewRef | None = None

    @property
    def request(self) -> Request:
        return self.context.request

    # -- Hooks --

    def prepare_component(self, name: str, request: Request) -> Mapping[str, Any] | None:
        """Per-request settings for component *name*.

        Called once per component, right before that component's
        ``before`` step. The result is merged over the static
        ``component_config`` entry.
        """
        return None

    def pre_process_request(self, request: Request) -> None:
        """Runs after the component pre-phase, before the action is resolved.

        May set ``view``/``layout``. Cannot produce a response.
        """
        return None

    def resolve_action(self, name: str | None, request: Request) -> str | None:
        """Override action resolution.

        *name* is the literal first path segment (``None`` when there is
        none). Return an action name to use it instead of the naming
        convention, or ``None`` to fall through.
        """
        return None

    def post_process_response(self, response: Response, request: Request) -> Response:
        """Inspect or replace the rendered response."""
        return response

    def close(self) -> None:
        """Release per-request resources. Runs on every exit path."""
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} action={self.context.action!r}>"
