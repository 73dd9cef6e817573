"""
Component engine: documents in, live renderings out.

Glues a DocumentStore and a Surface to the component registry:

- documents marked `defines-components: true` contribute one component per
  ```py:component:<Name>``` block, in the namespace named by their
  `components-namespace` property (Global by default)
- documents under the template folder are whole-file components named after
  the file; `use-as-note-header: true` makes one the note header
- inline snippets are attached to the surface and re-rendered on refresh
"""
from components.console import debug_log, log, notice
from components.errors import HostError
from components.events import Signal
from components.host import MemorySurface, basename, is_markdown
from components.identifiers import is_identifier
from components.mounts import MountTracker
from components.namespace import GLOBAL_NAMESPACE
from components.registry import ComponentRegistry
from components.runtime import RenderContext, get_builtins
from components.runtime.config import Settings
from components.snippets import (
    extract_component_blocks,
    find_inline_snippets,
    property_value,
    remove_front_matter,
)

DEFINES_PROPERTY = "defines-components"
NAMESPACE_PROPERTY = "components-namespace"
NOTE_HEADER_PROPERTY = "use-as-note-header"

DOCUMENT_EVENTS = ("created", "modified", "renamed", "metadata-changed")

NOTE_HEADER_SOURCE = "NoteHeader"


class ComponentEngine:

    def __init__(self, store, surface=None, settings=None, notify=notice):
        self.store = store
        self.surface = surface if surface is not None else MemorySurface()
        self.settings = settings if settings is not None else Settings()
        self.signal = Signal()
        self.note_header = None
        self._notify = notify
        self.registry = ComponentRegistry(
            self.settings,
            builtins=get_builtins(note_header=lambda: self.note_header),
            signal=self.signal,
            notify=notify,
        )
        self.mounts = MountTracker(self.surface, self.signal, self.registry.evaluate_inline)

    # --- Document properties ---

    def property(self, doc_id, name):
        return property_value(self.store.properties(doc_id), name)

    def namespace_of(self, doc_id):
        namespace = self.property(doc_id, NAMESPACE_PROPERTY)
        return str(namespace).strip() if namespace else GLOBAL_NAMESPACE

    def in_template_folder(self, doc_id):
        folder = self.settings.template_folder.strip().strip("/")
        if not folder:
            return False
        return doc_id.startswith(folder + "/")

    def documents_in_folder(self, folder):
        if not self.store.exists(folder):
            raise HostError(f"Folder not found: {folder}")
        if not self.store.is_folder(folder):
            raise HostError(f"{folder} is a file, not a folder")
        return self.store.list_documents(folder)

    # --- Registration ---

    async def register_components(self, doc_id, suppress_notification=False):
        """Register every component a document defines."""
        if not is_markdown(doc_id):
            self._notify(f'"{doc_id}" is not a markdown file')
            return

        if self.property(doc_id, DEFINES_PROPERTY):
            await self._register_code_blocks(doc_id, suppress_notification)
        elif self.in_template_folder(doc_id):
            await self._register_full_file(doc_id, suppress_notification)

    async def _register_code_blocks(self, doc_id, suppress_notification):
        namespace = self.namespace_of(doc_id)
        for name, source in extract_component_blocks(self.store.read(doc_id)):
            await self.registry.register_component(source, name, namespace, suppress_notification)

    async def _register_full_file(self, doc_id, suppress_notification):
        name = basename(doc_id)
        if not is_identifier(name):
            self._notify(f'"{name}" is not a valid component name')
            return

        content = remove_front_matter(self.store.read(doc_id))
        await self.registry.register_component(content, name, GLOBAL_NAMESPACE, suppress_notification)

        if self.property(doc_id, NOTE_HEADER_PROPERTY):
            compiled = self.registry.get(GLOBAL_NAMESPACE, name)
            if compiled is None or not compiled.is_ready():
                return
            component = compiled.resolve(name)
            if callable(component) and component is not self.note_header:
                debug_log(f"Using {name} as note header")
                self.note_header = component
                self.registry.request_component_update()

    async def load_components(self):
        """Rebuild every namespace from the documents in the store."""
        self.registry.reset()
        self.note_header = None
        documents = self.store.list_documents()
        for doc_id in documents:
            await self.register_components(doc_id, suppress_notification=True)
        await self.registry.refresh_component_scope()
        self.registry.request_component_update()
        log(f"Loaded {sum(1 for _ in self.registry.components())} component(s) from {len(documents)} document(s)")

    async def refresh(self):
        await self.load_components()

    async def on_document_event(self, kind, doc_id):
        """
        React to a host file event.

        Returns True if the document was re-registered.
        """
        if kind not in DOCUMENT_EVENTS:
            raise ValueError(f"Unknown document event: {kind}")
        defines = is_markdown(doc_id) and self.property(doc_id, DEFINES_PROPERTY)
        if not (defines or self.in_template_folder(doc_id)):
            return False
        debug_log(f"{kind}: {doc_id}")
        await self.register_components(doc_id)
        return True

    # --- Rendering ---

    async def attach(self, source, handle, context=None):
        """Render `source` into `handle`, now and on every refresh."""
        context = context if context is not None else RenderContext()
        if context.namespace is None and context.source_path and is_markdown(context.source_path) \
                and self.store.exists(context.source_path):
            context = context.model_copy(update={"namespace": self.namespace_of(context.source_path)})
        await self.mounts.attach(source, handle, context)

    async def attach_note_header(self, handle, context=None):
        await self.attach(NOTE_HEADER_SOURCE, handle, context)

    def sweep_detached(self):
        return self.mounts.sweep_detached()

    def on_components_updated(self, callback):
        return self.signal.subscribe(callback)

    async def render_document(self, doc_id):
        """
        Render every inline snippet of a document (note header first, if any).

        Needs a surface with open() and html(), like MemorySurface.
        """
        text = self.store.read(doc_id)
        context = RenderContext(source_path=doc_id, mode="render")
        handles = []
        if self.note_header is not None:
            handle = self.surface.open((doc_id, "header"))
            await self.attach_note_header(handle, context)
            handles.append(handle)
        for index, source in enumerate(find_inline_snippets(text)):
            handle = self.surface.open((doc_id, index))
            await self.attach(source, handle, context)
            handles.append(handle)
        return "\n".join(self.surface.html(handle) for handle in handles)

    def close(self):
        self.registry.debouncer.cancel()
        self.mounts.detach_all()
